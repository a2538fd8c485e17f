# app/schemas/availability.py
from datetime import time
from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator


class SlotOut(BaseModel):
    """A free slot, UTC RFC3339 bounds"""
    start_time: str = Field(..., description="Slot start (UTC)")
    end_time: str = Field(..., description="Slot end (UTC)")


class WeeklyRuleIn(BaseModel):
    """One operating window for one weekday"""
    day_of_week: int = Field(..., description="Day of week (1=Monday, 7=Sunday)", ge=1, le=7)
    open_time: time = Field(..., description="Opening time (HH:MM:SS, local)")
    close_time: time = Field(..., description="Closing time (HH:MM:SS, local)")
    time_zone: str = Field(..., description="IANA time zone id", min_length=1, max_length=64)

    @field_validator("open_time", "close_time")
    @classmethod
    def wall_clock_only(cls, v: time) -> time:
        if v.tzinfo is not None:
            raise ValueError("Times are local wall-clock; put the zone in time_zone")
        return v

    @field_validator("time_zone")
    @classmethod
    def strip_zone(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("time_zone must not be blank")
        return v

    @model_validator(mode="after")
    def open_before_close(self) -> "WeeklyRuleIn":
        if self.open_time >= self.close_time:
            raise ValueError("open_time must be before close_time")
        return self


class WeeklyScheduleIn(BaseModel):
    """Full replacement for a business's weekly schedule"""
    rules: List[WeeklyRuleIn] = Field(default_factory=list)


class WeeklyRuleOut(BaseModel):
    day_of_week: int
    open_time: str
    close_time: str
    time_zone: str
