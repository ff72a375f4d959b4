from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True, slots=True)
class ConnectorIdentity:
    """
    Calling principal for a single request.

    Extra credentials keep the caller's ordering and are exposed read-only,
    so a resolver can never write back into the session that supplied them.
    Hashing uses ``user`` only; equality still compares the credentials.
    """

    user: str = ""
    extra_credentials: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra_credentials", MappingProxyType(dict(self.extra_credentials)))

    @classmethod
    def of(
        cls,
        credentials: Optional[Mapping[str, str]] = None,
        /,
        *,
        user: str = "",
        **extra_credentials: str,
    ) -> "ConnectorIdentity":
        """
        Build an identity from a mapping and/or keyword credentials.

        ``user`` is the principal; pass a credential literally named "user"
        through the positional mapping.
        """
        merged = dict(credentials or {})
        merged.update(extra_credentials)
        return cls(user=user, extra_credentials=merged)
