"""JWT Identity Provider — verifies bearer tokens and yields the caller's contributor id.

Invariants:
    - Only verifies tokens; issuing them belongs to the external auth service
    - Signature and expiry always checked; an expired or tampered token is an AuthFailureError
    - Contributor id is read from the configured claim, falling back to `sub`; empty ids rejected

Design Decisions:
    - PyJWT over hand-rolled HMAC checks: algorithm allow-list and exp handling come for free
    - Exceptions from PyJWT never leak; message stays generic for the client
"""

import logging

import jwt

from crowdledger.core.domain_types import ContributorId
from crowdledger.core.errors import AuthFailureError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class JwtIdentityProvider:
    """IdentityProvider backed by shared-secret JWTs."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        identity_claim: str = "id",
        leeway_seconds: int = 0,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.identity_claim = identity_claim
        self.leeway_seconds = leeway_seconds

    def authenticate(self, credential_token: str) -> ContributorId:
        if not credential_token:
            raise AuthFailureError("No token provided")
        try:
            payload = jwt.decode(
                credential_token,
                self.secret,
                algorithms=[self.algorithm],
                leeway=self.leeway_seconds,
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthFailureError("Token expired")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected bearer token: {e}")
            raise AuthFailureError("Invalid token")

        subject = payload.get(self.identity_claim) or payload.get("sub")
        if not isinstance(subject, str) or not subject.strip():
            raise AuthFailureError("Token carries no caller identity")
        return ContributorId(subject)

    def authenticate_header(self, authorization: str | None) -> ContributorId:
        """Authenticate an `Authorization: Bearer <token>` header value."""
        if not authorization:
            raise AuthFailureError("No token provided")
        token = authorization
        if token.startswith(BEARER_PREFIX):
            token = token[len(BEARER_PREFIX):]
        return self.authenticate(token.strip())
