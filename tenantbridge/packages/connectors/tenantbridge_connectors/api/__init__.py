from .credentials import (
    CredentialPropertiesProvider,
    EmptyCredentialPropertiesProvider,
    ExtraCredentialPropertiesProvider,
    SecretCredentialPropertiesProvider,
    StaticCredentialPropertiesProvider,
)
from .driver import DbApiDriver, Driver, SqliteDriver
from .tracing import NoopTracingSink, OpenTelemetryTracingSink, TracingDataSource, TracingSink

__all__ = [
    "CredentialPropertiesProvider",
    "DbApiDriver",
    "Driver",
    "EmptyCredentialPropertiesProvider",
    "ExtraCredentialPropertiesProvider",
    "NoopTracingSink",
    "OpenTelemetryTracingSink",
    "SecretCredentialPropertiesProvider",
    "SqliteDriver",
    "StaticCredentialPropertiesProvider",
    "TracingDataSource",
    "TracingSink",
]
