# ===== app/models/availability.py =====
from sqlalchemy import Column, String, Integer, Time, ForeignKey, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from app.models.base import Base
import uuid


class OperatingHourRule(Base):
    """Declared open/close window for one weekday, in local wall-clock time"""
    __tablename__ = "business_availability"
    __table_args__ = (
        CheckConstraint("open_time < close_time", name="ck_business_availability_open_before_close"),
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_business_availability_day_of_week"),
        Index("ix_business_availability_business_day", "business_id", "day_of_week"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        UUID(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False
    )

    day_of_week = Column(Integer, nullable=False)  # 1=Monday, 7=Sunday
    open_time = Column(Time, nullable=False)
    close_time = Column(Time, nullable=False)
    time_zone = Column(String(64), nullable=False)  # IANA id, e.g. America/New_York

    def __repr__(self):
        return (
            f"<OperatingHourRule(business_id={self.business_id}, day={self.day_of_week}, "
            f"{self.open_time}-{self.close_time} {self.time_zone})>"
        )

    def to_dict(self):
        return {
            "day_of_week": self.day_of_week,
            "open_time": self.open_time.isoformat(),
            "close_time": self.close_time.isoformat(),
            "time_zone": self.time_zone,
        }
