from __future__ import annotations

import pytest

from tenantbridge.packages.common.tenantbridge_common.contracts.identity import ConnectorIdentity


def test_identity_is_hashable_and_usable_as_key() -> None:
    first = ConnectorIdentity.of(tenant="acme", user="alice")
    second = ConnectorIdentity.of(tenant="acme", user="alice")

    assert hash(first) == hash(second)
    assert {first: "cached"}[second] == "cached"


def test_identities_with_different_credentials_are_not_equal() -> None:
    assert ConnectorIdentity.of(tenant="acme") != ConnectorIdentity.of(tenant="globex")


def test_of_accepts_credential_named_user_through_mapping() -> None:
    identity = ConnectorIdentity.of({"user": "db_alice", "tenant": "acme"}, user="svc")

    assert identity.user == "svc"
    assert dict(identity.extra_credentials) == {"user": "db_alice", "tenant": "acme"}


def test_of_keyword_credentials_override_mapping() -> None:
    identity = ConnectorIdentity.of({"tenant": "acme", "region": "eu"}, tenant="globex")

    assert list(identity.extra_credentials.items()) == [("tenant", "globex"), ("region", "eu")]


def test_extra_credentials_are_read_only_copies() -> None:
    source = {"tenant": "acme"}
    identity = ConnectorIdentity(extra_credentials=source)
    source["tenant"] = "globex"

    assert identity.extra_credentials["tenant"] == "acme"
    with pytest.raises(TypeError):
        identity.extra_credentials["tenant"] = "other"  # type: ignore[index]
