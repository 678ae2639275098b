# app/helpers/auth_helper.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict

import jwt
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.helpers.ldap_mapping import AttributeMapping
from app.helpers.user_store import UserStore
from app.models.auth_models import User
from app.services.ldap_service import Ldap
from app.services.ldap_user_provider import LdapAuthUserProvider
from app.services.user_provider import UserProvider


@lru_cache(maxsize=1)
def get_ldap() -> Ldap:
    return Ldap.from_settings(settings)


@lru_cache(maxsize=1)
def get_attribute_mapping() -> AttributeMapping:
    """Parsed once; LDAP_MAPPING changes need a restart."""
    return AttributeMapping.from_string(settings.LDAP_MAPPING)


def get_user_provider(db: Session = Depends(get_db)) -> UserProvider:
    """FastAPI dependency building the request-scoped user provider."""
    return LdapAuthUserProvider(
        ldap=get_ldap(),
        store=UserStore(db),
        mapping=get_attribute_mapping(),
    )


def _get_token_from_header(authorization: str | None) -> str:
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
        )
    scheme, _, token_str = authorization.partition(" ")
    token_str = token_str.strip()
    if scheme.lower() != "bearer" or not token_str:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )
    return token_str


def _build_jwt_payload(user: User) -> Dict[str, Any]:
    """
    Build JWT claims for a user.

    Payload includes:
    - sub: local user id
    - email, name
    - admin flag
    - iat / exp based on ACCESS_TOKEN_EXPIRE_SECONDS
    """
    now = datetime.now(timezone.utc)
    expire_at = now + timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS)

    return {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "admin": bool(user.admin),
        "iat": int(now.timestamp()),
        "exp": int(expire_at.timestamp()),
    }


def create_access_token_for_user(*, user: User) -> str:
    """Create a signed JWT access token for the given user. Nothing is stored."""
    payload = _build_jwt_payload(user)
    return jwt.encode(
        payload,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT access token.

    - Returns payload on success
    - Raises HTTPException(419) if token is expired
    - Raises HTTPException(401) for other validation errors
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=419,
            detail="Access token expired",
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token",
        )


def get_current_user(
    authorization: str | None = Header(None, alias="Authorization"),
    provider: UserProvider = Depends(get_user_provider),
) -> User:
    """
    Dependency that validates the JWT access token and returns the DB user.

    The user is resolved through the provider by local id, so no directory
    round trip happens on authenticated requests.
    """
    token_str = _get_token_from_header(authorization)
    payload = decode_access_token(token_str)

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token missing subject",
        )

    try:
        user_id_int = int(user_id)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user identifier in token",
        )

    user = provider.retrieve_by_id(user_id_int)
    if not user or not user.active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive or invalid user",
        )
    return user
