# app/models/service.py
"""
Service Model - a timed service offered by one business
"""
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        UUID(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    service_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)

    # Duration in minutes (nullable, the configured default applies when unset)
    duration_minutes = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    business = relationship("Business", back_populates="services")

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.service_name}, business_id={self.business_id})>"

    def effective_duration(self, default_minutes: int) -> int:
        """Booking length in minutes, falling back to the configured default"""
        return self.duration_minutes or default_minutes

    @property
    def formatted_duration(self):
        """Return human-readable duration string, None when no duration is set"""
        if not self.duration_minutes:
            return None
        hours = self.duration_minutes // 60
        minutes = self.duration_minutes % 60

        if hours > 0 and minutes > 0:
            return f"{hours}h {minutes}m"
        elif hours > 0:
            return f"{hours}h"
        else:
            return f"{minutes}m"
