from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from tenantbridge.packages.common.tenantbridge_common.config import TenantRoutingSettings
from tenantbridge.packages.common.tenantbridge_common.contracts.identity import ConnectorIdentity
from tenantbridge.packages.common.tenantbridge_common.errors.connector_errors import (
    ConnectionInvariantError,
    ConnectorConfigurationError,
    DriverConnectionError,
)

from ..driver import Driver
from ..tracing import TracingDataSource
from ..urls import apply_tenant, mask_url
from .config import TenantConnectionConfig

TENANT_PLACEHOLDER = "{tenant}"
USER_PROPERTY = "user"


@dataclass(frozen=True, slots=True)
class ResolvedConnectionRequest:
    url: str
    properties: dict[str, str]
    tenant: Optional[str] = None


class TenantAwareConnectionFactory:
    """
    Connection factory that rewrites the connection URL (and optionally the user)
    using a tenant id passed via the identity's extra credentials. This routes
    each request to a per-tenant database or proxy without exposing one catalog
    per tenant.

    Without a tenant the fallback URL is used verbatim, typically the shared or
    default database. The factory keeps no per-call state, so one instance can
    serve any number of concurrent requests.
    """

    def __init__(
        self,
        config: TenantConnectionConfig,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if config is None:
            raise ConnectorConfigurationError("config is None")
        self._config = config
        self.logger = logger or logging.getLogger(__name__)

        if TENANT_PLACEHOLDER not in config.connection_url_template:
            self.logger.warning(
                "Connection URL template %s has no %s placeholder; every tenant gets the same URL",
                mask_url(config.connection_url_template),
                TENANT_PLACEHOLDER,
            )
        if config.user_template is not None and TENANT_PLACEHOLDER not in config.user_template:
            self.logger.warning("User template has no %s placeholder", TENANT_PLACEHOLDER)

    @classmethod
    def from_settings(
        cls,
        settings: TenantRoutingSettings,
        driver: Driver,
        **kwargs: Any,
    ) -> "TenantAwareConnectionFactory":
        return cls(TenantConnectionConfig.from_settings(settings, driver, **kwargs))

    @property
    def config(self) -> TenantConnectionConfig:
        return self._config

    @property
    def driver_name(self) -> str:
        return getattr(self._config.driver, "name", None) or repr(self._config.driver)

    def resolve(self, identity: ConnectorIdentity) -> ResolvedConnectionRequest:
        """Work out the URL and properties for this identity without connecting."""
        config = self._config
        tenant = identity.extra_credentials.get(config.tenant_credential_key)
        if tenant is None:
            url = config.fallback_connection_url
        else:
            url = apply_tenant(config.connection_url_template, tenant)

        properties: dict[str, str] = dict(config.connection_properties)
        properties.update(config.credential_properties_provider.get_credential_properties(identity))
        # Explicit or provider supplied users always win over the template.
        if config.user_template is not None and tenant is not None and USER_PROPERTY not in properties:
            properties[USER_PROPERTY] = apply_tenant(config.user_template, tenant)

        return ResolvedConnectionRequest(url=url, properties=properties, tenant=tenant)

    def open_connection(self, identity: ConnectorIdentity) -> Any:
        request = self.resolve(identity)
        masked_url = mask_url(request.url)
        self.logger.debug(
            "Opening connection tenant=%s url=%s driver=%s properties=%s",
            request.tenant,
            masked_url,
            self.driver_name,
            sorted(request.properties),
        )

        data_source = TracingDataSource(self._config.tracing, self._config.driver, request.url)
        try:
            connection = data_source.get_connection(request.properties)
        except Exception as exc:
            self.logger.error("Failed to open connection to %s: %s", masked_url, exc)
            raise DriverConnectionError(
                f"Unable to open connection to '{masked_url}' with driver {self.driver_name}: {exc}",
                url=masked_url,
                driver=self.driver_name,
            ) from exc

        if connection is None:
            raise ConnectionInvariantError(
                f"Driver returned null connection, make sure the connection URL '{masked_url}' "
                f"is valid for the driver {self.driver_name}",
                url=masked_url,
                driver=self.driver_name,
            )
        return connection

    def close(self) -> None:
        # Nothing is held between calls.
        return None

    def __enter__(self) -> "TenantAwareConnectionFactory":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
