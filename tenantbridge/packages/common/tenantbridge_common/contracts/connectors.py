from __future__ import annotations

from typing import Literal

from .base import _Base


class SecretReference(_Base):
    provider_type: Literal[
        "env",
        "kubernetes",
    ]
    identifier: str
    key: str | None = None
