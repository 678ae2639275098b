# app/helpers/credentials.py
"""
Typed login credentials.

The host hands the provider either a local primary key (an already
authenticated session) or a directory identifier with an optional password.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

IDENTIFIER_KEY = "email"


@dataclass(frozen=True)
class UserIdCredentials:
    user_id: int


@dataclass(frozen=True)
class DirectoryCredentials:
    identifier: str
    password: Optional[str] = None

    def __repr__(self) -> str:
        # never leak the submitted secret into logs or tracebacks
        return f"DirectoryCredentials(identifier={self.identifier!r}, password=***)"


Credentials = Union[UserIdCredentials, DirectoryCredentials]


def parse_credentials(credentials: Mapping[str, Any]) -> Credentials:
    """
    Build typed credentials from a raw mapping.

    Only the ``email`` key is consulted for the identifier. An ``int`` value
    is a local primary key, a ``str`` is looked up in the directory and any
    other type is rejected.
    """
    identifier = credentials[IDENTIFIER_KEY]
    if isinstance(identifier, int) and not isinstance(identifier, bool):
        return UserIdCredentials(user_id=identifier)
    if not isinstance(identifier, str):
        raise TypeError(f"Unsupported identifier type: {type(identifier).__name__}")
    return DirectoryCredentials(
        identifier=identifier,
        password=credentials.get("password"),
    )
