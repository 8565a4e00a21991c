"""JWT Identity Provider — bearer token verification.

Tests cover:
    - Valid token yields the `id` claim; `sub` used as fallback
    - Expired, tampered, unsigned, and identity-less tokens → AuthFailureError
    - Authorization header parsing (Bearer prefix, missing header)
"""

from datetime import timedelta

import jwt
import pytest

from crowdledger.core.errors import AuthFailureError
from crowdledger.infrastructure.jwt_identity import JwtIdentityProvider

SECRET = "test-secret"


@pytest.fixture
def provider():
    return JwtIdentityProvider(secret=SECRET)


def test_valid_token_yields_id_claim(provider, token_for):
    assert provider.authenticate(token_for("user-42")) == "user-42"


def test_sub_claim_is_fallback(provider, token_for):
    assert provider.authenticate(token_for("user-7", claim="sub")) == "user-7"


def test_expired_token_rejected(provider, token_for):
    token = token_for("user-1", expires_in=timedelta(seconds=-30))
    with pytest.raises(AuthFailureError, match="expired"):
        provider.authenticate(token)


def test_wrong_secret_rejected(provider, token_for):
    with pytest.raises(AuthFailureError, match="Invalid token"):
        provider.authenticate(token_for("user-1", secret="other-secret"))


def test_garbage_token_rejected(provider):
    with pytest.raises(AuthFailureError):
        provider.authenticate("not-a-jwt")


def test_token_without_expiry_rejected(provider):
    token = jwt.encode({"id": "user-1"}, SECRET, algorithm="HS256")
    with pytest.raises(AuthFailureError):
        provider.authenticate(token)


def test_token_without_identity_rejected(provider, token_for):
    with pytest.raises(AuthFailureError, match="identity"):
        provider.authenticate(token_for("   "))


def test_header_with_bearer_prefix(provider, token_for):
    header = f"Bearer {token_for('user-9')}"
    assert provider.authenticate_header(header) == "user-9"


def test_missing_header_rejected(provider):
    with pytest.raises(AuthFailureError, match="No token"):
        provider.authenticate_header(None)
