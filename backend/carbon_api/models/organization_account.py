# backend/carbon_api/models/organization_account.py
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from carbon_api.core.ids import utcnow
from carbon_api.db.base import Base


class OrganizationAccount(Base):
    __tablename__ = "organization_accounts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    vat: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # starter | premium
    account_type: Mapped[str] = mapped_column(String(30), nullable=False, default="premium")

    nace: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    currency: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)  # ISO-3166-1 alpha-2

    # [{"name": "IMPACT MODEL", "submodules": ["v1.6"]}, ...]
    modules: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class OrganizationAccountChild(Base):
    """Parent -> child link between organization accounts."""

    __tablename__ = "organization_account_children"
    __table_args__ = (
        UniqueConstraint("parent_id", "child_id", name="uq_organization_account_children_parent_child"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    parent_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organization_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    child_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organization_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
