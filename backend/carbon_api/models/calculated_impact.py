# backend/carbon_api/models/calculated_impact.py

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from carbon_api.db.base import Base


class CalculatedImpact(Base):
    """
    One emission estimate for one transaction of a data source.
    Rows are written by the calculation pipeline; this service only reads them.
    """

    __tablename__ = "calculated_impacts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    data_source_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Activity classification; either may be missing
    ghg_scope: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # kg CO2e
    impact_value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    indicator: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
