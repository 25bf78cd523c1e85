from sqlalchemy import String, Integer, Boolean, Date, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime
from typing import Optional
from servicefrios.database import Base
from servicefrios.models.enums import Frequency, Priority


class Schedule(Base):
    """Recurring maintenance plan ("programación") that generates service orders."""

    __tablename__ = "schedules"

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), index=True)
    technician_id: Mapped[Optional[int]] = mapped_column(ForeignKey("technicians.id"), nullable=True)

    # Equipment ids; the first one becomes the equipment of generated orders
    equipment_ids: Mapped[list] = mapped_column(JSON, default=list)

    # Recurrence
    frequency: Mapped[str] = mapped_column(String(20), default=Frequency.MONTHLY.value)
    custom_interval_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    days_of_week: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)  # advisory, 0=Monday
    day_of_month: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Scheduling state
    next_run_at: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    last_run_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Template copied onto generated orders
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    service_type: Mapped[str] = mapped_column(String(50), default="programado")
    start_time: Mapped[str] = mapped_column(String(5), default="08:00")
    end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    priority: Mapped[str] = mapped_column(String(20), default=Priority.MEDIUM.value)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)
