# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Platform user model."""

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    uuid_pk,
)


class User(Base, TimestampMixin, SoftDeleteMixin):
    """A platform user. Students carry a pointer to their current level."""

    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_institution_id", "institution_id"),
        Index("ix_users_user_type", "user_type"),
    )

    id: Mapped[str] = uuid_pk()
    institution_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("institutions.id", ondelete="CASCADE"),
        nullable=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_type: Mapped[str] = mapped_column(String(20), nullable=False)
    current_level_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("levels.id", ondelete="SET NULL"),
        nullable=True,
    )

    @property
    def full_name(self) -> str:
        """Get the user's display name."""
        return f"{self.first_name} {self.last_name}".strip()
