from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors.connector_errors import ConnectorConfigurationError


class TenantRoutingSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TENANT_ROUTING_",
        env_file=(".env", "tenantbridge/.env"),
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    # e.g. "postgresql://{tenant}.db.internal:5432/app"
    CONNECTION_URL_TEMPLATE: str
    FALLBACK_CONNECTION_URL: str
    CONNECTION_PROPERTIES: dict[str, str] = Field(default_factory=dict)

    TENANT_CREDENTIAL_KEY: str = "tenant"
    # e.g. "{tenant}_user"
    USER_TEMPLATE: str | None = None

    # Extra-credential keys carrying per-session user/password overrides.
    USER_CREDENTIAL_KEY: str | None = None
    PASSWORD_CREDENTIAL_KEY: str | None = None
    CONNECTION_USER: str | None = None
    CONNECTION_PASSWORD: str | None = None

    TRACING_ENABLED: bool = True

    @field_validator("CONNECTION_PROPERTIES", mode="before")
    @classmethod
    def _stringify_properties(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(key): str(item) for key, item in value.items()}
        return value

    @field_validator("TENANT_CREDENTIAL_KEY")
    @classmethod
    def _require_tenant_key(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("TENANT_CREDENTIAL_KEY must not be blank")
        return value


def load_settings(**overrides: Any) -> TenantRoutingSettings:
    """Read settings from the environment, surfacing problems as configuration errors."""
    try:
        return TenantRoutingSettings(**overrides)
    except ValidationError as exc:
        raise ConnectorConfigurationError(f"Invalid tenant routing settings: {exc}") from exc
