from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from servicefrios.models.enums import Priority

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _check_weekdays(value: Optional[list[int]]) -> Optional[list[int]]:
    if value is not None and any(not 0 <= d <= 6 for d in value):
        raise ValueError("days_of_week values must be between 0 (Monday) and 6 (Sunday)")
    return value


class ScheduleCreate(BaseModel):
    client_id: int
    technician_id: Optional[int] = None
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    service_type: str = "programado"
    # Validated against Frequency by the service so bad values report a configuration error
    frequency: str
    custom_interval_days: Optional[int] = None
    days_of_week: Optional[list[int]] = None
    day_of_month: Optional[int] = None
    start_date: date
    end_date: Optional[date] = None
    start_time: str = Field("08:00", pattern=HHMM_PATTERN)
    end_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    priority: Priority = Priority.MEDIUM
    notes: Optional[str] = None
    equipment_ids: list[int] = Field(default_factory=list)

    @field_validator("days_of_week")
    @classmethod
    def check_weekdays(cls, value):
        return _check_weekdays(value)


class ScheduleUpdate(BaseModel):
    client_id: Optional[int] = None
    technician_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    service_type: Optional[str] = None
    frequency: Optional[str] = None
    custom_interval_days: Optional[int] = None
    days_of_week: Optional[list[int]] = None
    day_of_month: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    end_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    priority: Optional[Priority] = None
    notes: Optional[str] = None
    equipment_ids: Optional[list[int]] = None
    is_active: Optional[bool] = None

    @field_validator("days_of_week")
    @classmethod
    def check_weekdays(cls, value):
        return _check_weekdays(value)


class ScheduleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    technician_id: Optional[int]
    name: str
    description: Optional[str]
    service_type: str
    frequency: str
    custom_interval_days: Optional[int]
    days_of_week: Optional[list[int]]
    day_of_month: Optional[int]
    start_date: date
    end_date: Optional[date]
    start_time: str
    end_time: Optional[str]
    priority: str
    notes: Optional[str]
    equipment_ids: list[int]
    next_run_at: Optional[date]
    last_run_at: Optional[datetime]
    is_active: bool


class ServiceOrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    client_id: int
    technician_id: Optional[int]
    equipment_id: Optional[int]
    schedule_id: Optional[int]
    scheduled_date: datetime
    start_time: Optional[str]
    end_time: Optional[str]
    service_type: str
    state: str
    priority: str
    description: Optional[str]
    notes: Optional[str]
    details: Optional[dict]


class GenerationRunOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    started_at: datetime
    completed_at: Optional[datetime]
    trigger: str
    horizon: date
    created_count: int
    processed_count: int
    error_count: int
    status: str
    error_message: Optional[str]
