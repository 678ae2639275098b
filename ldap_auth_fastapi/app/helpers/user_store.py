# app/helpers/user_store.py
"""
Persistence for the shadow user records, on top of a SQLAlchemy session.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import exc
from sqlalchemy.orm import Session

from app.models.auth_models import User


class UserStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_primary_key(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_one_where(self, field: str, value: Any) -> Optional[User]:
        column = getattr(User, field)
        return self.db.query(User).filter(column == value).first()

    def create(self, **fields: Any) -> User:
        """Return a new, not yet persisted, user."""
        fields.setdefault("admin", False)
        fields.setdefault("active", False)
        return User(**fields)

    def save(self, user: User) -> User:
        """
        Insert or update ``user`` and commit.

        The session is rolled back before a database error is re-raised, so
        the caller's session stays usable.
        """
        user.updated_at = datetime.utcnow()
        self.db.add(user)
        try:
            self.db.commit()
        except exc.SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user
