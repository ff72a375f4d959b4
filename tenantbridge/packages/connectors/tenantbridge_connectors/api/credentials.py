"""
Credential property providers.

A provider turns the identity of the current request into connection
properties (typically ``user`` and ``password``) that are layered over the
factory's base properties.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Protocol

from tenantbridge.packages.common.tenantbridge_common.contracts.connectors import SecretReference
from tenantbridge.packages.common.tenantbridge_common.contracts.identity import ConnectorIdentity

from .secrets import SecretProviderRegistry

_EMPTY: Mapping[str, str] = MappingProxyType({})


class CredentialPropertiesProvider(Protocol):
    def get_credential_properties(self, identity: ConnectorIdentity) -> Mapping[str, str]: ...


class EmptyCredentialPropertiesProvider:
    def get_credential_properties(self, identity: ConnectorIdentity) -> Mapping[str, str]:
        return _EMPTY


class StaticCredentialPropertiesProvider:
    """Same user/password for every identity; unset values are left out."""

    def __init__(self, user: Optional[str] = None, password: Optional[str] = None) -> None:
        properties: dict[str, str] = {}
        if user is not None:
            properties["user"] = user
        if password is not None:
            properties["password"] = password
        self._properties = MappingProxyType(properties)

    def get_credential_properties(self, identity: ConnectorIdentity) -> Mapping[str, str]:
        return self._properties


class ExtraCredentialPropertiesProvider:
    """
    Reads user/password from the identity's extra credentials.

    Keys that are not configured, or not present on the identity, fall back to
    the static provider (if any).
    """

    def __init__(
        self,
        user_credential_key: Optional[str] = None,
        password_credential_key: Optional[str] = None,
        fallback: Optional[StaticCredentialPropertiesProvider] = None,
    ) -> None:
        self._keys = {
            "user": user_credential_key,
            "password": password_credential_key,
        }
        self._fallback = fallback or StaticCredentialPropertiesProvider()

    def get_credential_properties(self, identity: ConnectorIdentity) -> Mapping[str, str]:
        properties = dict(self._fallback.get_credential_properties(identity))
        for property_name, credential_key in self._keys.items():
            if credential_key and credential_key in identity.extra_credentials:
                properties[property_name] = identity.extra_credentials[credential_key]
        return properties


class SecretCredentialPropertiesProvider:
    """Resolves each configured property from a secret store on every call."""

    def __init__(
        self,
        references: Mapping[str, SecretReference],
        registry: Optional[SecretProviderRegistry] = None,
    ) -> None:
        self._references = dict(references)
        self._registry = registry or SecretProviderRegistry()

    def get_credential_properties(self, identity: ConnectorIdentity) -> Mapping[str, str]:
        return {
            property_name: self._registry.resolve(reference)
            for property_name, reference in self._references.items()
        }
