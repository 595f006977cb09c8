from __future__ import annotations

import sqlalchemy as sqla

from tally.core import di
from tally.model import User, UserID, UserRole

from . import Session
from .table import users


def get(user_id: UserID, *, session: Session = di.Provide["storage.persistent.session"]) -> User | None:
    stmt = sqla.select(users.__table__).where(users.user_id == user_id)
    row = session.execute(stmt).mappings().one_or_none()
    return User(**row) if row else None


def get_by_email(email: str, *, session: Session = di.Provide["storage.persistent.session"]) -> User | None:
    stmt = sqla.select(users.__table__).where(users.email == email.lower())
    row = session.execute(stmt).mappings().one_or_none()
    return User(**row) if row else None


def create(
    *,
    email: str,
    name: str,
    role: UserRole = UserRole.Student,
    session: Session = di.Provide["storage.persistent.session"],
) -> User:
    user_id = UserID()
    stmt = sqla.insert(users).values(user_id=user_id, email=email.lower(), name=name, role=role.value)
    session.execute(stmt)
    session.flush()
    result = get(user_id, session=session)
    assert result is not None
    return result
