import ldap3
import pytest
from ldap3.core.exceptions import LDAPBindError, LDAPSocketOpenError

from app.core.config import Settings
from app.services.ldap_service import DirectoryEntry, Ldap, LdapConnectionError

SERVICE_DN = "cn=svc,dc=example,dc=com"
JDOE_DN = "uid=jdoe,ou=people,dc=example,dc=com"


class DummyEntry:
    def __init__(self, dn, attributes) -> None:
        self.entry_dn = dn
        self.entry_attributes_as_dict = attributes


class DirectoryState:
    """What the fake ldap3.Connection sees and records."""

    def __init__(self) -> None:
        self.entries = []
        self.passwords = {SERVICE_DN: "svc-pw", JDOE_DN: "s3cret"}
        self.connect_error = None
        self.connections = []
        self.searches = []


@pytest.fixture
def directory(monkeypatch):
    state = DirectoryState()

    class DummyConnection:
        def __init__(self, server, user=None, password=None, authentication=None, auto_bind=False, **_):
            self.server = server
            self.user = user
            self.password = password
            self.authentication = authentication
            self.entries = []
            self.unbound = False
            state.connections.append(self)
            if auto_bind and not self.bind():
                raise LDAPBindError("automatic bind not successful - invalidCredentials")

        def bind(self):
            if state.connect_error is not None:
                raise state.connect_error
            if self.authentication == ldap3.ANONYMOUS:
                return True
            return state.passwords.get(self.user) == self.password

        def search(self, search_base, search_filter, search_scope=None, attributes=None):
            state.searches.append(
                {"base": search_base, "filter": search_filter, "scope": search_scope, "attributes": attributes}
            )
            self.entries = list(state.entries)
            return bool(self.entries)

        def unbind(self):
            self.unbound = True

    monkeypatch.setattr(ldap3, "Connection", DummyConnection)
    monkeypatch.setattr(ldap3, "Server", lambda uri, get_info=None: {"uri": uri})
    return state


@pytest.fixture
def ldap_client():
    return Ldap(
        server_uri="ldap://ldap.example.com",
        base_dn="dc=example,dc=com",
        bind_dn=SERVICE_DN,
        bind_password="svc-pw",
        user_attribute="mail",
    )


def test_find_returns_first_entry_as_strings(directory, ldap_client):
    directory.entries = [
        DummyEntry(JDOE_DN, {"cn": ["John Doe", "Johnny"], "uidNumber": [1001], "jpegPhoto": [b"abc"]}),
        DummyEntry("uid=other,dc=example,dc=com", {"cn": ["Other"]}),
    ]

    entry = ldap_client.find("jdoe@example.com")

    assert entry == DirectoryEntry(
        dn=JDOE_DN,
        attributes={"cn": ["John Doe", "Johnny"], "uidNumber": ["1001"], "jpegPhoto": ["abc"]},
    )
    assert entry.first("cn") == "John Doe"
    assert entry["dn"] == [JDOE_DN]


def test_find_attribute_lookup_ignores_case(directory, ldap_client):
    directory.entries = [DummyEntry(JDOE_DN, {"displayName": ["John Doe"]})]

    entry = ldap_client.find("jdoe@example.com")

    assert entry.first("displayname") == "John Doe"
    assert entry["DISPLAYNAME"] == ["John Doe"]


def test_directory_entry_accepts_plain_dict_case_insensitively():
    entry = DirectoryEntry(dn=JDOE_DN, attributes={"CN": ["John Doe"]})

    assert entry.first("cn") == "John Doe"
    assert entry["Cn"] == ["John Doe"]
    assert entry.first("sn") is None


def test_find_searches_subtree_with_service_account(directory, ldap_client):
    ldap_client.find("jdoe@example.com")

    search = directory.searches[0]
    assert search["base"] == "dc=example,dc=com"
    assert search["filter"] == "(mail=jdoe@example.com)"
    assert search["scope"] == ldap3.SUBTREE
    assert search["attributes"] == [ldap3.ALL_ATTRIBUTES]

    conn = directory.connections[0]
    assert conn.user == SERVICE_DN
    assert conn.authentication == ldap3.SIMPLE
    assert conn.unbound is True


def test_find_without_bind_dn_binds_anonymously(directory):
    client = Ldap(server_uri="ldap://ldap.example.com", base_dn="dc=example,dc=com")

    assert client.find("jdoe@example.com") is None
    assert directory.connections[0].authentication == ldap3.ANONYMOUS


def test_find_no_results_returns_none(directory, ldap_client):
    assert ldap_client.find("ghost@example.com") is None


def test_find_escapes_filter_characters(directory, ldap_client):
    ldap_client.find("*)(uid=*")

    search_filter = directory.searches[0]["filter"]
    assert search_filter.startswith("(mail=")
    assert "*" not in search_filter
    assert "\\2a" in search_filter
    assert "\\28" in search_filter and "\\29" in search_filter


def test_find_with_object_class_restriction(directory):
    client = Ldap(
        server_uri="ldap://ldap.example.com",
        base_dn="dc=example,dc=com",
        user_attribute="uid",
        object_class="inetOrgPerson",
    )

    client.find("jdoe")

    assert directory.searches[0]["filter"] == "(&(objectClass=inetOrgPerson)(uid=jdoe))"


def test_find_rejected_service_bind_raises(directory):
    client = Ldap(
        server_uri="ldap://ldap.example.com",
        base_dn="dc=example,dc=com",
        bind_dn=SERVICE_DN,
        bind_password="wrong",
    )

    with pytest.raises(LdapConnectionError) as exc_info:
        client.find("jdoe@example.com")

    assert isinstance(exc_info.value.__cause__, LDAPBindError)


def test_find_transport_failure_raises(directory, ldap_client):
    directory.connect_error = LDAPSocketOpenError("unable to open socket")

    with pytest.raises(LdapConnectionError):
        ldap_client.find("jdoe@example.com")


def test_auth_accepts_correct_password(directory, ldap_client):
    assert ldap_client.auth(JDOE_DN, "s3cret") is True
    assert directory.connections[0].user == JDOE_DN
    assert directory.connections[0].unbound is True


def test_auth_rejects_wrong_password(directory, ldap_client):
    assert ldap_client.auth(JDOE_DN, "nope") is False


@pytest.mark.parametrize("dn, password", [(JDOE_DN, ""), (JDOE_DN, None), ("", "s3cret"), (None, "s3cret")])
def test_auth_empty_values_never_bind(directory, ldap_client, dn, password):
    assert ldap_client.auth(dn, password) is False
    assert directory.connections == []


def test_auth_transport_failure_raises(directory, ldap_client):
    directory.connect_error = LDAPSocketOpenError("unable to open socket")

    with pytest.raises(LdapConnectionError):
        ldap_client.auth(JDOE_DN, "s3cret")


def test_from_settings():
    settings = Settings(
        LDAP_SERVER_URI="ldaps://dir.example.org",
        LDAP_BASE_DN="ou=people,dc=example,dc=org",
        LDAP_BIND_DN=SERVICE_DN,
        LDAP_BIND_PASSWORD="pw",
        LDAP_USER_ATTRIBUTE="uid",
        LDAP_USER_OBJECT_CLASS="",
    )

    client = Ldap.from_settings(settings)

    assert client.server_uri == "ldaps://dir.example.org"
    assert client.base_dn == "ou=people,dc=example,dc=org"
    assert client.bind_dn == SERVICE_DN
    assert client.user_attribute == "uid"
    assert client.object_class is None
