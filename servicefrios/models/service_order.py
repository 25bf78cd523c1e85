from sqlalchemy import String, Date, DateTime, Text, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime
from typing import Optional
from servicefrios.database import Base
from servicefrios.models.enums import ServiceState, Priority


class ServiceOrder(Base):
    """A unit of maintenance work, either manual or generated by a schedule."""

    __tablename__ = "service_orders"
    __table_args__ = (
        # One order per schedule occurrence
        UniqueConstraint("schedule_id", "scheduled_day", "start_time", name="uq_service_order_occurrence"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    order_number: Mapped[str] = mapped_column(String(40), unique=True)

    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), index=True)
    technician_id: Mapped[Optional[int]] = mapped_column(ForeignKey("technicians.id"), nullable=True)
    equipment_id: Mapped[Optional[int]] = mapped_column(ForeignKey("equipment.id"), nullable=True)
    schedule_id: Mapped[Optional[int]] = mapped_column(ForeignKey("schedules.id"), nullable=True, index=True)

    scheduled_date: Mapped[datetime] = mapped_column(DateTime)
    scheduled_day: Mapped[date] = mapped_column(Date)
    start_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    end_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    service_type: Mapped[str] = mapped_column(String(50), default="programado")
    state: Mapped[str] = mapped_column(String(20), default=ServiceState.PENDING.value)
    priority: Mapped[str] = mapped_column(String(20), default=Priority.MEDIUM.value)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Generation provenance
    details: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
