"""
Bearer-token authentication.

The identity provider vouches for the token; the subject id it returns is the
owner key, mapped to a users row by identity_uid.
"""

import logging

from fastapi import Request, HTTPException, status, Depends
from sqlalchemy.orm import Session

from journal_insights.database import get_db
from journal_insights.models import User
from journal_insights.services.identity import (
    AuthError,
    IdentityClaims,
    IdentityVerifier,
    get_identity_verifier,
)

logger = logging.getLogger(__name__)


def get_bearer_token(request: Request) -> str:
    """Extract the bearer credential from the Authorization header."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")
    return token.strip()


def get_identity(
    token: str = Depends(get_bearer_token),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> IdentityClaims:
    """Verify the bearer credential with the identity provider."""
    try:
        return verifier.verify(token)
    except AuthError as e:
        logger.info(f"Token verification failed: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def get_current_user(
    identity: IdentityClaims = Depends(get_identity),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the authenticated subject to its users row.
    Raises 404 when the account has not been provisioned.
    """
    user = db.query(User).filter(User.identity_uid == identity.subject_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
