# ===== app/models/appointment.py =====
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_business_window", "business_id", "appointment_start_time", "appointment_end_time"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id"), nullable=False)
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id"), nullable=False)

    # Customer info
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)

    # UTC instants; end is start + service duration, fixed at creation
    appointment_start_time = Column(DateTime(timezone=True), nullable=False)
    appointment_end_time = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Appointment(id={self.id}, business_id={self.business_id}, start={self.appointment_start_time})>"
