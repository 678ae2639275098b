from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ldap3.utils.ciDict import CaseInsensitiveDict

from app.core.logger import app_logger


class LdapConnectionError(Exception):
    """The directory could not be reached or refused the service account."""


@dataclass
class DirectoryEntry:
    dn: str
    attributes: Dict[str, List[str]] = field(default_factory=CaseInsensitiveDict)

    def __post_init__(self) -> None:
        # attribute names are case-insensitive in LDAP
        if not isinstance(self.attributes, CaseInsensitiveDict):
            self.attributes = CaseInsensitiveDict(self.attributes)

    def first(self, attribute: str) -> Optional[str]:
        """First value of ``attribute``; further values are ignored."""
        values = self.attributes.get(attribute) or []
        return values[0] if values else None

    def __getitem__(self, attribute: str) -> List[str]:
        if attribute == "dn":
            return [self.dn]
        return self.attributes[attribute]


def _as_strings(value) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [v.decode("utf-8", errors="replace") if isinstance(v, bytes) else str(v) for v in value]
    if isinstance(value, bytes):
        return [value.decode("utf-8", errors="replace")]
    return [str(value)]


class Ldap:
    """
    Thin ldap3 wrapper: look up one user entry and check a password by bind.

    A fresh connection is opened per call; the service account (or an
    anonymous bind when no bind DN is configured) is used for searching.
    """

    def __init__(
        self,
        server_uri: str,
        base_dn: str,
        bind_dn: str = "",
        bind_password: str = "",
        user_attribute: str = "mail",
        object_class: Optional[str] = None,
    ) -> None:
        self.server_uri = server_uri
        self.base_dn = base_dn
        self.bind_dn = bind_dn
        self.bind_password = bind_password
        self.user_attribute = user_attribute
        self.object_class = object_class or None

    @classmethod
    def from_settings(cls, settings) -> "Ldap":
        return cls(
            server_uri=settings.LDAP_SERVER_URI,
            base_dn=settings.LDAP_BASE_DN,
            bind_dn=settings.LDAP_BIND_DN,
            bind_password=settings.LDAP_BIND_PASSWORD,
            user_attribute=settings.LDAP_USER_ATTRIBUTE,
            object_class=settings.LDAP_USER_OBJECT_CLASS,
        )

    def _server(self):
        from ldap3 import Server, NONE

        return Server(self.server_uri, get_info=NONE)

    def _search_filter(self, identifier: str) -> str:
        from ldap3.utils.conv import escape_filter_chars

        user_filter = f"({self.user_attribute}={escape_filter_chars(identifier)})"
        if self.object_class:
            return f"(&(objectClass={self.object_class}){user_filter})"
        return user_filter

    def find(self, identifier: str) -> Optional[DirectoryEntry]:
        """
        Search the subtree under base_dn for ``identifier``.

        Returns None when nothing matches.
        """
        from ldap3 import ALL_ATTRIBUTES, ANONYMOUS, SIMPLE, SUBTREE, Connection
        from ldap3.core.exceptions import LDAPBindError, LDAPException

        search_filter = self._search_filter(identifier)
        try:
            if self.bind_dn:
                conn = Connection(
                    self._server(),
                    user=self.bind_dn,
                    password=self.bind_password,
                    authentication=SIMPLE,
                    auto_bind=True,
                )
            else:
                conn = Connection(self._server(), authentication=ANONYMOUS, auto_bind=True)

            try:
                conn.search(
                    search_base=self.base_dn,
                    search_filter=search_filter,
                    search_scope=SUBTREE,
                    attributes=[ALL_ATTRIBUTES],
                )
                entries = list(conn.entries)
            finally:
                conn.unbind()
        except LDAPBindError as exc:
            app_logger.error(
                "LDAP service bind rejected",
                extra={"server": self.server_uri, "bind_dn": self.bind_dn},
            )
            raise LdapConnectionError(f"Service bind to {self.server_uri} rejected") from exc
        except LDAPException as exc:
            app_logger.exception(
                "LDAP search error",
                extra={"identifier": identifier, "server": self.server_uri, "base_dn": self.base_dn},
            )
            raise LdapConnectionError(f"LDAP search against {self.server_uri} failed") from exc

        if not entries:
            return None

        entry = entries[0]
        attributes = CaseInsensitiveDict(
            {attr: _as_strings(values) for attr, values in entry.entry_attributes_as_dict.items()}
        )
        return DirectoryEntry(dn=entry.entry_dn, attributes=attributes)

    def auth(self, dn: str, password: str) -> bool:
        """Bind as ``dn`` with ``password``; True when the directory accepts it."""
        # An empty password would be an unauthenticated bind, which servers accept
        if not dn or not password:
            return False

        from ldap3 import SIMPLE, Connection
        from ldap3.core.exceptions import LDAPException

        try:
            user_conn = Connection(
                self._server(),
                user=dn,
                password=password,
                authentication=SIMPLE,
            )
            try:
                return bool(user_conn.bind())
            finally:
                user_conn.unbind()
        except LDAPException as exc:
            app_logger.exception(
                "LDAP bind error",
                extra={"dn": dn, "server": self.server_uri},
            )
            raise LdapConnectionError(f"LDAP bind against {self.server_uri} failed") from exc
