# app/models/business.py
"""
Business Model
A business owns services, a weekly schedule and its appointments.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    location = Column(String(255), nullable=True)
    phone_number = Column(String(20), nullable=True)
    description = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    google_is_connected = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    services = relationship("Service", back_populates="business")

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.business_name})>"
