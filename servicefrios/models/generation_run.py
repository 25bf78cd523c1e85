from sqlalchemy import String, Integer, Date, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime
from servicefrios.database import Base


class GenerationRun(Base):
    """Logs each service generation run (scheduled or manual)."""

    __tablename__ = "generation_runs"

    id: Mapped[int] = mapped_column(primary_key=True)
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    completed_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)

    trigger: Mapped[str] = mapped_column(String(50))
    horizon: Mapped[date] = mapped_column(Date)

    created_count: Mapped[int] = mapped_column(Integer, default=0)
    processed_count: Mapped[int] = mapped_column(Integer, default=0)
    error_count: Mapped[int] = mapped_column(Integer, default=0)

    status: Mapped[str] = mapped_column(String(50), default="running")
    error_message: Mapped[str] = mapped_column(Text, nullable=True)
