# backend/carbon_api/models/starter_entry.py

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from carbon_api.core.ids import utcnow
from carbon_api.db.base import Base


class StarterEntry(Base):
    __tablename__ = "starter_entries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organization_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_updated_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    last_updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    covered_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    covered_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Ids issued by the normative server
    report_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    data_sources: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # The submission exactly as the client sent it
    raw_client_state: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
