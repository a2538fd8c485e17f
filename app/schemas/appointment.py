# app/schemas/appointment.py
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.utils.time_utils import to_rfc3339


class AppointmentCreate(BaseModel):
    """Customer booking request"""
    service_id: UUID = Field(..., description="Service being booked")
    business_id: UUID = Field(..., description="Business that offers the service")
    customer_name: str = Field(..., description="Customer name", min_length=1, max_length=200)
    customer_email: Optional[EmailStr] = Field(None, description="Customer email, invited to the event")
    customer_phone: Optional[str] = Field(None, description="Customer phone number", max_length=32)
    appointment_start_time: datetime = Field(..., description="Start instant; naive values are read as UTC")
    notes: Optional[str] = Field(None, description="Additional notes")

    @field_validator("customer_name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("customer_name must not be blank")
        return v


class AppointmentOut(BaseModel):
    id: UUID
    service_id: UUID
    business_id: UUID
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    appointment_start_time: str
    appointment_end_time: str
    notes: Optional[str] = None

    @classmethod
    def from_model(cls, appointment) -> "AppointmentOut":
        return cls(
            id=appointment.id,
            service_id=appointment.service_id,
            business_id=appointment.business_id,
            customer_name=appointment.customer_name,
            customer_email=appointment.customer_email,
            customer_phone=appointment.customer_phone,
            appointment_start_time=to_rfc3339(appointment.appointment_start_time),
            appointment_end_time=to_rfc3339(appointment.appointment_end_time),
            notes=appointment.notes,
        )
