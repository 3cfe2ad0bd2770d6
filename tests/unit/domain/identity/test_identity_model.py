"""Unit tests for Identity token bookkeeping."""

from datetime import UTC, datetime, timedelta

from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.token import OAuthToken
from arealink.domain.identity.model.value import UserId, normalize_provider

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def make_identity(**overrides) -> Identity:
    token = OAuthToken(
        access_token="access-1",
        refresh_token="refresh-123",
        scopes=("email", "profile"),
        expires_at=NOW + timedelta(hours=1),
    )
    identity = Identity.create(
        user_id=UserId.generate(),
        provider="zoom",
        subject="zoom-user-1",
        token=token,
        now=NOW - timedelta(days=1),
    )
    return identity.model_copy(update=overrides) if overrides else identity


class TestTokenExpiry:
    def test_future_expiry_is_usable(self):
        identity = make_identity(expires_at=NOW + timedelta(seconds=1))
        assert not identity.token_expired(NOW)
        assert identity.has_usable_token(NOW)

    def test_expiry_equal_to_now_is_expired(self):
        identity = make_identity(expires_at=NOW)
        assert identity.token_expired(NOW)

    def test_missing_expiry_is_never_expired(self):
        """An identity without expiry is valid until a call fails."""
        identity = make_identity(expires_at=None)
        assert not identity.token_expired(NOW + timedelta(days=365))

    def test_empty_access_token_is_not_usable(self):
        identity = make_identity(access_token="")
        assert not identity.has_usable_token(NOW)


class TestWithTokens:
    """Merging newly issued tokens into a stored identity."""

    def test_access_token_always_replaced(self):
        identity = make_identity()
        updated = identity.with_tokens(OAuthToken(access_token="access-2"), NOW)
        assert updated.access_token == "access-2"

    def test_missing_values_keep_stored_ones(self):
        identity = make_identity()
        updated = identity.with_tokens(OAuthToken(access_token="access-2"), NOW)

        assert updated.refresh_token == "refresh-123"
        assert updated.scopes == ["email", "profile"]
        assert updated.expires_at == identity.expires_at
        assert updated.updated_at == NOW

    def test_present_values_replace_stored_ones(self):
        identity = make_identity()
        new_expiry = NOW + timedelta(hours=2)
        updated = identity.with_tokens(
            OAuthToken(
                access_token="access-2",
                refresh_token="refresh-456",
                scopes=("meeting:write",),
                expires_at=new_expiry,
            ),
            NOW,
        )

        assert updated.refresh_token == "refresh-456"
        assert updated.scopes == ["meeting:write"]
        assert updated.expires_at == new_expiry

    def test_original_is_unchanged(self):
        identity = make_identity()
        identity.with_tokens(OAuthToken(access_token="access-2"), NOW)
        assert identity.access_token == "access-1"

    def test_create_stores_empty_refresh_token_as_none(self):
        identity = Identity.create(
            user_id=UserId.generate(),
            provider="zoom",
            subject="s",
            token=OAuthToken(access_token="a", refresh_token=""),
            now=NOW,
        )
        assert identity.refresh_token is None


def test_normalize_provider():
    assert normalize_provider("  Zoom ") == "zoom"
    assert normalize_provider(None) == ""
