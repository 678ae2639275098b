# app/auth/routers/login_router.py
from __future__ import annotations

import secrets

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.config import settings
from app.core.logger import app_logger
from app.helpers.auth_helper import (
    create_access_token_for_user,
    get_current_user,
    get_user_provider,
)
from app.helpers.credentials import DirectoryCredentials
from app.models.auth_models import User
from app.schemas import auth_schemas as schemas
from app.services.ldap_service import LdapConnectionError
from app.services.user_provider import UserProvider


router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=schemas.LoginResponse)
def login(
    credentials: schemas.LoginRequest,
    provider: UserProvider = Depends(get_user_provider),
):
    """
    Frontend sends JSON body:
      {
        "email": "jdoe@example.com",
        "password": "xyz"
      }
    """
    creds = DirectoryCredentials(identifier=credentials.email, password=credentials.password)

    try:
        user = provider.retrieve_by_credentials(creds)
        valid = user is not None and provider.validate_credentials(user, creds)
    except LdapConnectionError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Directory service unavailable",
        )

    if not valid:
        app_logger.warning("Login rejected", extra={"identifier": credentials.email})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    app_logger.info("Login succeeded", extra={"user_id": user.id})

    return schemas.LoginResponse(
        access_token=create_access_token_for_user(user=user),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_SECONDS,
        user=user,
    )


@router.get("/me", response_model=schemas.UserRead)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    current_user: User = Depends(get_current_user),
    provider: UserProvider = Depends(get_user_provider),
):
    """
    Access tokens are stateless; the client discards its token. The provider
    is still asked to cycle the remember token.
    """
    provider.update_remember_token(current_user, secrets.token_urlsafe(32))
