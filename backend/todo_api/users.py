from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import User


def find_user_by_email(s: Session, email: str) -> User | None:
    return s.execute(select(User).where(User.email == email)).scalars().first()


def create_user(s: Session, email: str, password_hash: str) -> User:
    """Insert a user. Uniqueness is checked by the caller; the column's unique
    constraint raises ``IntegrityError`` if two registrations race."""
    u = User(email=email, password_hash=password_hash)
    s.add(u)
    s.commit()
    s.refresh(u)
    return u
