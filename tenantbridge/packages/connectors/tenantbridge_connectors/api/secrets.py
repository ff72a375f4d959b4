from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Protocol

from tenantbridge.packages.common.tenantbridge_common.contracts.connectors import SecretReference
from tenantbridge.packages.common.tenantbridge_common.errors.connector_errors import SecretResolutionError


class SecretProvider(Protocol):
    def resolve(self, reference: SecretReference) -> str: ...


class EnvSecretProvider:
    """Reads a secret from an environment variable, optionally a key inside a JSON object."""

    def resolve(self, reference: SecretReference) -> str:
        raw = os.environ.get(reference.identifier)
        if raw is None:
            raise SecretResolutionError(f"Environment secret '{reference.identifier}' was not found.")
        if not reference.key:
            return raw
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SecretResolutionError(
                f"Environment secret '{reference.identifier}' is not valid JSON."
            ) from exc
        if not isinstance(payload, dict) or payload.get(reference.key) is None:
            raise SecretResolutionError(
                f"Environment secret '{reference.identifier}' does not contain key '{reference.key}'."
            )
        return str(payload[reference.key])


class KubernetesSecretProvider:
    """Reads a secret mounted as a file at ``<mount dir>/<identifier>/<key>``."""

    def __init__(self, secrets_mount_dir: str | None = None) -> None:
        self._base_dir = Path(
            secrets_mount_dir
            or os.environ.get("K8S_SECRETS_DIR", "/var/run/secrets/tenantbridge")
        )

    def resolve(self, reference: SecretReference) -> str:
        secret_path = self._base_dir / reference.identifier / (reference.key or "value")
        if not secret_path.is_file():
            raise SecretResolutionError(f"Kubernetes secret file '{secret_path}' was not found.")
        return secret_path.read_text(encoding="utf-8").strip()


class SecretProviderRegistry:
    def __init__(self, providers: dict[str, SecretProvider] | None = None) -> None:
        self._providers: dict[str, SecretProvider] = {
            "env": EnvSecretProvider(),
            "kubernetes": KubernetesSecretProvider(),
        }
        self._providers.update(providers or {})

    def resolve(self, reference: SecretReference) -> str:
        provider = self._providers.get(reference.provider_type)
        if provider is None:
            raise SecretResolutionError(
                f"Secret provider '{reference.provider_type}' is not registered."
            )
        return provider.resolve(reference)
