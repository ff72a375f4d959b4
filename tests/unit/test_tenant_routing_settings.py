from __future__ import annotations

from typing import Any, Mapping

import pytest

from tenantbridge.packages.common.tenantbridge_common.config import TenantRoutingSettings, load_settings
from tenantbridge.packages.common.tenantbridge_common.contracts.identity import ConnectorIdentity
from tenantbridge.packages.common.tenantbridge_common.errors.connector_errors import ConnectorConfigurationError
from tenantbridge.packages.connectors.tenantbridge_connectors.api.credentials import (
    EmptyCredentialPropertiesProvider,
    ExtraCredentialPropertiesProvider,
    StaticCredentialPropertiesProvider,
)
from tenantbridge.packages.connectors.tenantbridge_connectors.api.tenant import (
    TenantAwareConnectionFactory,
    TenantConnectionConfig,
    build_credential_provider,
)
from tenantbridge.packages.connectors.tenantbridge_connectors.api.tracing import (
    NoopTracingSink,
    OpenTelemetryTracingSink,
)


class _NullDriver:
    name = "null"

    def connect(self, url: str, properties: Mapping[str, str]) -> Any:
        return object()


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch) -> None:
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)


def _settings(**overrides: Any) -> TenantRoutingSettings:
    values: dict[str, Any] = {
        "CONNECTION_URL_TEMPLATE": "postgresql://{tenant}.db.internal/app",
        "FALLBACK_CONNECTION_URL": "postgresql://shared.db.internal/app",
    }
    values.update(overrides)
    return load_settings(**values)


def test_settings_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("TENANT_ROUTING_CONNECTION_URL_TEMPLATE", "postgresql://{tenant}.db/app")
    monkeypatch.setenv("TENANT_ROUTING_FALLBACK_CONNECTION_URL", "postgresql://shared.db/app")
    monkeypatch.setenv("TENANT_ROUTING_CONNECTION_PROPERTIES", '{"sslmode": "require", "connect_timeout": 5}')
    monkeypatch.setenv("TENANT_ROUTING_TENANT_CREDENTIAL_KEY", "org")
    monkeypatch.setenv("TENANT_ROUTING_USER_TEMPLATE", "{tenant}_ro")

    settings = load_settings()

    assert settings.CONNECTION_URL_TEMPLATE == "postgresql://{tenant}.db/app"
    assert settings.FALLBACK_CONNECTION_URL == "postgresql://shared.db/app"
    assert settings.CONNECTION_PROPERTIES == {"sslmode": "require", "connect_timeout": "5"}
    assert settings.TENANT_CREDENTIAL_KEY == "org"
    assert settings.USER_TEMPLATE == "{tenant}_ro"
    assert settings.TRACING_ENABLED is True


def test_settings_default_tenant_key() -> None:
    assert _settings().TENANT_CREDENTIAL_KEY == "tenant"


def test_missing_required_settings_raise_configuration_error(monkeypatch) -> None:
    monkeypatch.delenv("TENANT_ROUTING_CONNECTION_URL_TEMPLATE", raising=False)
    monkeypatch.delenv("TENANT_ROUTING_FALLBACK_CONNECTION_URL", raising=False)

    with pytest.raises(ConnectorConfigurationError, match="CONNECTION_URL_TEMPLATE"):
        load_settings()


def test_blank_tenant_key_is_rejected() -> None:
    with pytest.raises(ConnectorConfigurationError, match="TENANT_CREDENTIAL_KEY"):
        _settings(TENANT_CREDENTIAL_KEY="  ")


def test_factory_from_settings_routes_by_tenant() -> None:
    settings = _settings(
        CONNECTION_PROPERTIES={"sslmode": "require"},
        USER_TEMPLATE="{tenant}_ro",
        TRACING_ENABLED=False,
    )
    factory = TenantAwareConnectionFactory.from_settings(settings, _NullDriver())

    resolved = factory.resolve(ConnectorIdentity.of(tenant="acme"))

    assert resolved.url == "postgresql://acme.db.internal/app"
    assert resolved.properties == {"sslmode": "require", "user": "acme_ro"}
    assert isinstance(factory.config.tracing, NoopTracingSink)


def test_config_from_settings_uses_opentelemetry_when_enabled() -> None:
    config = TenantConnectionConfig.from_settings(_settings(), _NullDriver())

    assert isinstance(config.tracing, OpenTelemetryTracingSink)


def test_explicit_collaborators_override_settings() -> None:
    provider = StaticCredentialPropertiesProvider(user="explicit")
    tracing = NoopTracingSink()

    config = TenantConnectionConfig.from_settings(
        _settings(CONNECTION_USER="from-settings"),
        _NullDriver(),
        credential_properties_provider=provider,
        tracing=tracing,
    )

    assert config.credential_properties_provider is provider
    assert config.tracing is tracing


def test_build_credential_provider_without_credentials() -> None:
    assert isinstance(build_credential_provider(_settings()), EmptyCredentialPropertiesProvider)


def test_build_credential_provider_static() -> None:
    provider = build_credential_provider(_settings(CONNECTION_USER="svc", CONNECTION_PASSWORD="pw"))

    assert isinstance(provider, StaticCredentialPropertiesProvider)
    assert dict(provider.get_credential_properties(ConnectorIdentity())) == {"user": "svc", "password": "pw"}


def test_build_credential_provider_prefers_extra_credentials() -> None:
    provider = build_credential_provider(
        _settings(PASSWORD_CREDENTIAL_KEY="db_password", CONNECTION_USER="svc")
    )

    assert isinstance(provider, ExtraCredentialPropertiesProvider)
    identity = ConnectorIdentity.of(tenant="acme", db_password="session-pw")
    assert provider.get_credential_properties(identity) == {"user": "svc", "password": "session-pw"}
