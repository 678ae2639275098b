"""
User provider backed by an LDAP directory.

The directory is the source of truth for identity and passwords. Every
successful lookup refreshes a local shadow record so the rest of the
application has a row (and an integer id) to reference.
"""
from __future__ import annotations

from typing import Dict, Optional

from app.core.logger import app_logger
from app.helpers.credentials import (
    IDENTIFIER_KEY,
    Credentials,
    DirectoryCredentials,
    UserIdCredentials,
    parse_credentials,
)
from app.helpers.ldap_mapping import AttributeMapping
from app.helpers.user_store import UserStore
from app.models.auth_models import User
from app.services.ldap_service import Ldap
from app.services.user_provider import UserProvider


class LdapAuthUserProvider(UserProvider):
    def __init__(self, ldap: Ldap, store: UserStore, mapping: Optional[AttributeMapping] = None) -> None:
        self.ldap = ldap
        self.store = store
        self.mapping = mapping or AttributeMapping()

    def retrieve_by_id(self, identifier) -> Optional[User]:
        if identifier is None:
            return None
        return self.retrieve_by_credentials(
            parse_credentials({IDENTIFIER_KEY: identifier})
        )

    def retrieve_by_token(self, identifier, token: str) -> Optional[User]:
        # user / password live in the directory
        return None

    def update_remember_token(self, user: User, token: str) -> None:
        # user / password live in the directory
        return None

    def retrieve_by_credentials(self, credentials: Credentials) -> Optional[User]:
        if isinstance(credentials, UserIdCredentials):
            return self.store.find_by_primary_key(credentials.user_id)

        username = credentials.identifier
        if not username.strip():
            return None

        result = self.ldap.find(username)
        if result is None:
            app_logger.debug("Directory lookup found no entry", extra={"identifier": username})
            return None

        ldap_mapping = self.mapping.effective()

        user = self.store.find_one_where("email", username)
        if user is None:
            user = self.store.create(email=username, admin=False)
            app_logger.info("Creating shadow user from directory", extra={"identifier": username, "dn": result.dn})

        name = result.first(ldap_mapping["name"])
        user.name = name if name is not None else username
        user.password = result.dn
        user.active = True
        user = self.store.save(user)

        app_logger.debug(
            "Shadow user refreshed from directory",
            extra={"user_id": user.id, "identifier": username, "name_attribute": ldap_mapping["name"]},
        )
        return user

    def validate_credentials(self, user: User, credentials: DirectoryCredentials) -> bool:
        return self.ldap.auth(user.password, credentials.password)

    def get_ldap_mapping(self) -> Dict[str, str]:
        """Return the configured attribute overrides (without defaults)."""
        return dict(self.mapping.overrides)
