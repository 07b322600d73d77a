"""
Identity provider verification.

Bearer credentials are ID tokens issued by the identity provider. They are
checked with the provider's account lookup endpoint, which returns the
account behind a valid token.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)

IDENTITY_LOOKUP_URL = os.getenv(
    "IDENTITY_LOOKUP_URL", "https://identitytoolkit.googleapis.com/v1/accounts:lookup"
)
IDENTITY_API_KEY = os.getenv("IDENTITY_API_KEY", "")
IDENTITY_TIMEOUT = float(os.getenv("IDENTITY_TIMEOUT", "10"))


class AuthError(Exception):
    """The credential is missing, invalid or could not be verified."""


@dataclass(frozen=True)
class IdentityClaims:
    subject_id: str
    email: Optional[str]
    email_verified: bool


class IdentityVerifier:
    """Verifies ID tokens against the identity provider."""

    def __init__(self, lookup_url: str = None, api_key: str = None, timeout: float = None,
                 session: requests.Session = None):
        self.lookup_url = lookup_url or IDENTITY_LOOKUP_URL
        self.api_key = api_key if api_key is not None else IDENTITY_API_KEY
        self.timeout = timeout if timeout is not None else IDENTITY_TIMEOUT
        self.session = session or requests.Session()

    def close(self):
        self.session.close()

    def verify(self, token: str) -> IdentityClaims:
        if not token:
            raise AuthError("No token provided")

        try:
            response = self.session.post(
                self.lookup_url,
                params={"key": self.api_key},
                json={"idToken": token},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Identity provider unreachable: {e}")
            raise AuthError("Identity provider unavailable") from e

        if response.status_code != 200:
            raise AuthError("Invalid token")

        try:
            users = response.json().get("users") or []
        except ValueError as e:
            raise AuthError("Invalid identity provider response") from e

        if not users or not users[0].get("localId"):
            raise AuthError("Invalid token")

        account = users[0]
        return IdentityClaims(
            subject_id=account["localId"],
            email=account.get("email"),
            email_verified=bool(account.get("emailVerified", False)),
        )


def get_identity_verifier():
    """FastAPI dependency for the configured verifier; closed after the request."""
    verifier = IdentityVerifier()
    try:
        yield verifier
    finally:
        verifier.close()
