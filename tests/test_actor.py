import uuid

import pytest

from storecart.domain.actor import (
    AnonymousOwner,
    AuthenticatedOwner,
    owner_from_columns,
    parse_session_token,
    resolve_actor,
)
from storecart.domain.errors import InvalidArgumentError


class TestResolveActor:
    def test_authenticated_user_wins_over_session(self):
        token = uuid.uuid4()
        assert resolve_actor(7, token) == AuthenticatedOwner(7)

    def test_session_token_used_for_guests(self):
        token = uuid.uuid4()
        assert resolve_actor(None, str(token)) == AnonymousOwner(token)

    def test_nothing_to_address_a_cart_with(self):
        assert resolve_actor(None, None) is None
        assert resolve_actor(None, "") is None

    def test_malformed_session_token_rejected(self):
        with pytest.raises(InvalidArgumentError):
            resolve_actor(None, "not-a-uuid")

    def test_malformed_token_ignored_when_authenticated(self):
        assert resolve_actor(3, "not-a-uuid") == AuthenticatedOwner(3)


class TestOwnerColumns:
    def test_owner_survives_storage_columns(self):
        token = uuid.uuid4()
        for owner in (AuthenticatedOwner(11), AnonymousOwner(token)):
            assert owner_from_columns(owner.kind, owner.key) == owner

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            owner_from_columns("robot", "1")

    def test_parse_accepts_uuid_instances(self):
        token = uuid.uuid4()
        assert parse_session_token(token) is token
