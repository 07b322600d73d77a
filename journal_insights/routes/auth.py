"""
Auth Routes

Provision an owner row for a verified identity and confirm a session.
Request bodies accept camelCase keys (firstName, authProvider, ...) as sent
by the web client, as well as snake_case.
"""

import secrets
from typing import Optional

import sqlalchemy as sa
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from journal_insights.auth import get_identity
from journal_insights.database import get_db
from journal_insights.models import User
from journal_insights.services.identity import IdentityClaims

router = APIRouter(prefix="/api/auth", tags=["auth"])


class AuthRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignupRequest(AuthRequest):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    auth_provider: str = "email"


class GoogleAuthRequest(AuthRequest):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    google_id: Optional[str] = None
    google_avatar_url: Optional[str] = None
    auth_provider: str = "google"


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "email_verified": user.email_verified,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "username": user.username,
        "auth_provider": user.auth_provider,
        "google_id": user.google_id,
        "avatar_url": user.avatar_url,
    }


def username_from_email(email: str) -> str:
    """Local part of the address plus a short random suffix."""
    return f"{email.split('@')[0]}{secrets.token_hex(2)}"


def _commit_new_user(db: Session, user: User) -> User:
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Username or email already exists")
    db.refresh(user)
    return user


@router.post("/signup")
async def signup(
    data: SignupRequest,
    identity: IdentityClaims = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Create the users row for the verified identity."""
    email = identity.email or data.email
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")

    clauses = [User.identity_uid == identity.subject_id, User.email == email]
    if data.username:
        clauses.append(User.username == data.username)
    if db.query(User).filter(sa.or_(*clauses)).first():
        raise HTTPException(status_code=400, detail="User already exists")

    user = _commit_new_user(db, User(
        identity_uid=identity.subject_id,
        email=email,
        email_verified=identity.email_verified,
        first_name=data.first_name,
        last_name=data.last_name,
        username=data.username,
        auth_provider=data.auth_provider,
    ))

    return JSONResponse(
        {"message": "User created successfully", "user": serialize_user(user)},
        status_code=201,
    )


@router.post("/google")
async def google_sign_in(
    data: GoogleAuthRequest,
    identity: IdentityClaims = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """
    Sign in with Google: log in the matching account, or create one.

    An account matches on the identity subject or the email address. New
    accounts get a username derived from the email and are marked verified,
    since Google has already confirmed the address.
    """
    email = data.email or identity.email
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")

    user = (
        db.query(User)
        .filter(sa.or_(User.identity_uid == identity.subject_id, User.email == email))
        .first()
    )
    if user:
        user.last_login_at = sa.func.now()
        db.commit()
        db.refresh(user)
        return {"message": "Login successful", "user": serialize_user(user)}

    user = _commit_new_user(db, User(
        identity_uid=identity.subject_id,
        email=email,
        email_verified=True,
        first_name=data.first_name,
        last_name=data.last_name,
        username=username_from_email(email),
        auth_provider=data.auth_provider,
        google_id=data.google_id,
        avatar_url=data.google_avatar_url,
    ))

    return JSONResponse(
        {"message": "User created successfully", "user": serialize_user(user)},
        status_code=201,
    )


@router.get("/verify")
async def verify(
    identity: IdentityClaims = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Confirm the token maps to an account and record the login."""
    user = db.query(User).filter(User.identity_uid == identity.subject_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.last_login_at = sa.func.now()
    db.commit()
    db.refresh(user)

    return {"message": "Token verified", "user": serialize_user(user)}
