# examplan/models/users.py

import uuid
from typing import Optional
from sqlalchemy import String, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, CreatedAtMixin


class User(Base, CreatedAtMixin):
    """Authentication account. Carries the tenant and role used for authorization."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    institution_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="SET NULL")
    )
    role: Mapped[str | None] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_superuser: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    profile: Mapped[Optional["DomainUser"]] = relationship(
        back_populates="user", uselist=False
    )


class DomainUser(Base, CreatedAtMixin):
    """Business profile attached to an account; referenced for audit attribution."""

    __tablename__ = "domain_users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True
    )
    institution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="CASCADE"), nullable=False
    )
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    primary_email: Mapped[str] = mapped_column(String, nullable=False)

    user: Mapped[Optional["User"]] = relationship(back_populates="profile")
