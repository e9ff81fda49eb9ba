from datetime import datetime

from sqlalchemy import DateTime, Float, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from jobdesk.db import Base


class JobRecord(Base):
    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # Not unique: concurrent creators may mint the same number.
    job_sheet_number: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact_number: Mapped[str] = mapped_column(String(32), nullable=False)
    device_type: Mapped[str] = mapped_column(String(32), nullable=False)
    brand_name: Mapped[str] = mapped_column(String(100), nullable=False)
    issues: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    attended_by: Mapped[str] = mapped_column(String(200), nullable=False)
    estimated_cost: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        server_default=text("0"),
    )
    final_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class StaffRecord(Base):
    __tablename__ = "staff"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        server_default=text("'Technician'"),
    )
