from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from tenantbridge.packages.common.tenantbridge_common.config import TenantRoutingSettings
from tenantbridge.packages.common.tenantbridge_common.errors.connector_errors import ConnectorConfigurationError

from ..credentials import (
    CredentialPropertiesProvider,
    EmptyCredentialPropertiesProvider,
    ExtraCredentialPropertiesProvider,
    StaticCredentialPropertiesProvider,
)
from ..driver import Driver
from ..tracing import NoopTracingSink, OpenTelemetryTracingSink, TracingSink

DEFAULT_TENANT_CREDENTIAL_KEY = "tenant"

_REQUIRED_FIELDS = (
    "driver",
    "connection_url_template",
    "fallback_connection_url",
    "connection_properties",
    "credential_properties_provider",
    "tenant_credential_key",
)


@dataclass(frozen=True, slots=True)
class TenantConnectionConfig:
    """
    Immutable settings for a tenant-aware connection factory.

    ``connection_properties`` is copied into a read-only mapping, so changes
    the caller makes to its own dict afterwards are never observed.
    """

    driver: Driver
    connection_url_template: str
    fallback_connection_url: str
    connection_properties: Mapping[str, str]
    credential_properties_provider: CredentialPropertiesProvider
    tenant_credential_key: str = DEFAULT_TENANT_CREDENTIAL_KEY
    user_template: Optional[str] = None
    tracing: TracingSink = field(default_factory=NoopTracingSink)

    def __post_init__(self) -> None:
        for name in _REQUIRED_FIELDS:
            if getattr(self, name) is None:
                raise ConnectorConfigurationError(f"{name} is None")
        object.__setattr__(
            self,
            "connection_properties",
            MappingProxyType(dict(self.connection_properties)),
        )
        if self.tracing is None:
            object.__setattr__(self, "tracing", NoopTracingSink())

    @classmethod
    def from_settings(
        cls,
        settings: TenantRoutingSettings,
        driver: Driver,
        *,
        credential_properties_provider: Optional[CredentialPropertiesProvider] = None,
        tracing: Optional[TracingSink] = None,
    ) -> "TenantConnectionConfig":
        if tracing is None:
            tracing = OpenTelemetryTracingSink() if settings.TRACING_ENABLED else NoopTracingSink()
        return cls(
            driver=driver,
            connection_url_template=settings.CONNECTION_URL_TEMPLATE,
            fallback_connection_url=settings.FALLBACK_CONNECTION_URL,
            connection_properties=settings.CONNECTION_PROPERTIES,
            credential_properties_provider=credential_properties_provider or build_credential_provider(settings),
            tenant_credential_key=settings.TENANT_CREDENTIAL_KEY,
            user_template=settings.USER_TEMPLATE,
            tracing=tracing,
        )


def build_credential_provider(settings: TenantRoutingSettings) -> CredentialPropertiesProvider:
    static: Optional[StaticCredentialPropertiesProvider] = None
    if settings.CONNECTION_USER is not None or settings.CONNECTION_PASSWORD is not None:
        static = StaticCredentialPropertiesProvider(
            user=settings.CONNECTION_USER,
            password=settings.CONNECTION_PASSWORD,
        )
    if settings.USER_CREDENTIAL_KEY or settings.PASSWORD_CREDENTIAL_KEY:
        return ExtraCredentialPropertiesProvider(
            user_credential_key=settings.USER_CREDENTIAL_KEY,
            password_credential_key=settings.PASSWORD_CREDENTIAL_KEY,
            fallback=static,
        )
    if static is not None:
        return static
    return EmptyCredentialPropertiesProvider()
