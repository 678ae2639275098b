# app/models/auth_models.py
"""
Shadow user table for directory-backed authentication.
Migration: 001_create_ldap_auth_user
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from app.db.base import Base


class User(Base):
    """
    Local copy of a directory user.

    ``password`` holds the directory entry's distinguished name, not a
    password hash; the directory bind is the only way to verify a secret.
    """
    __tablename__ = "ldap_auth_user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(1024), nullable=True)  # directory DN
    active = Column(Boolean, nullable=False, default=False)
    admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
