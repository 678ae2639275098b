import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.models import auth_models  # noqa: F401 - registers the user table
from app.services.ldap_service import DirectoryEntry

JDOE_DN = "uid=jdoe,ou=people,dc=example,dc=com"
JDOE_EMAIL = "jdoe@example.com"
JDOE_PASSWORD = "s3cret"


class FakeLdap:
    """In-memory stand-in for the directory client."""

    def __init__(self) -> None:
        self.entries = {}  # identifier -> DirectoryEntry
        self.passwords = {}  # dn -> password
        self.error = None
        self.find_calls = []
        self.auth_calls = []

    def add(self, identifier: str, entry: DirectoryEntry, password: str) -> None:
        self.entries[identifier] = entry
        self.passwords[entry.dn] = password

    def find(self, identifier):
        self.find_calls.append(identifier)
        if self.error is not None:
            raise self.error
        return self.entries.get(identifier)

    def auth(self, dn, password):
        self.auth_calls.append((dn, password))
        if self.error is not None:
            raise self.error
        return bool(password) and self.passwords.get(dn) == password


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def jdoe_entry():
    return DirectoryEntry(
        dn=JDOE_DN,
        attributes={
            "cn": ["John Doe", "Johnny"],
            "mail": [JDOE_EMAIL],
            "name": ["jdoe"],
        },
    )


@pytest.fixture
def fake_ldap(jdoe_entry):
    ldap = FakeLdap()
    ldap.add(JDOE_EMAIL, jdoe_entry, JDOE_PASSWORD)
    return ldap
