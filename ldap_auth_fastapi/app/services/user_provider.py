from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from app.helpers.credentials import Credentials, DirectoryCredentials
from app.models.auth_models import User


class UserProvider(ABC):
    """Lookup and password check used by the login and session endpoints."""

    @abstractmethod
    def retrieve_by_id(self, identifier) -> Optional[User]:
        """Retrieve a user by their unique identifier."""

    @abstractmethod
    def retrieve_by_token(self, identifier, token: str) -> Optional[User]:
        """Retrieve a user by identifier and "remember me" token."""

    @abstractmethod
    def update_remember_token(self, user: User, token: str) -> None:
        """Store a new "remember me" token for ``user``."""

    @abstractmethod
    def retrieve_by_credentials(self, credentials: Credentials) -> Optional[User]:
        """Retrieve a user by the given credentials."""

    @abstractmethod
    def validate_credentials(self, user: User, credentials: DirectoryCredentials) -> bool:
        """Check the submitted password for ``user``."""
