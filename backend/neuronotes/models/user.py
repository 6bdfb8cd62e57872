"""
NeuroNotes Backend: User SQLAlchemy Model
=========================================

What:  ORM model for the `users` table.
Who:   Written by AuthService.signup(); read by login and the session guard.

Columns:
    - id: opaque UUID string generated in Python
    - email: unique, stored trimmed and lower-cased
    - password_hash: bcrypt hash; the raw password is never stored
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from neuronotes.database import Base


class User(Base):
    """
    A registered account.

    Lifecycle:
        Created at signup, read at login and on every authenticated request.
        Never updated or deleted through the API.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Unique index doubles as the duplicate-signup guard under concurrency
    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
