# app/core/context.py
"""
Process-wide dependencies, built once at startup.

Nothing below the entrypoint reads the environment: routes pull the
context from ``app.state.context`` and hand its pieces to the services.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from cryptography.fernet import Fernet
from sqlalchemy.orm import Session, sessionmaker

from app.config.database import create_db_engine, create_session_factory
from app.config.settings import Settings
from app.services.appointment.appointment_service import AppointmentService
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.busy_set import BusySetAggregator
from app.services.availability.slot_generator import SlotGenerator
from app.services.business.business_store import BusinessStore
from app.services.calendar.base import CalendarGateway
from app.services.calendar.google_calendar_service import GoogleCalendarService
from app.utils.encryption import get_cipher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContext:
    settings: Settings
    session_factory: sessionmaker
    calendar_gateway: CalendarGateway
    cipher: Optional[Fernet]
    availability_service: AvailabilityService
    appointment_service: AppointmentService

    def new_session(self) -> Session:
        return self.session_factory()

    def store(self, db: Session) -> BusinessStore:
        return BusinessStore(db, self.cipher)


def build_context(
        settings: Settings,
        session_factory: Optional[sessionmaker] = None,
        calendar_gateway: Optional[CalendarGateway] = None,
) -> AppContext:
    """Wire settings, database and calendar client into one immutable value"""
    if session_factory is None:
        session_factory = create_session_factory(create_db_engine(settings))

    if calendar_gateway is None:
        calendar_gateway = GoogleCalendarService.from_settings(settings)

    cipher = None
    if settings.CALENDAR_ENCRYPTION_KEY:
        cipher = get_cipher(settings.CALENDAR_ENCRYPTION_KEY)
    else:
        logger.warning("CALENDAR_ENCRYPTION_KEY is not set; stored refresh tokens cannot be read")

    availability_service = AvailabilityService(
        aggregator=BusySetAggregator(calendar_gateway, calendar_id=settings.GOOGLE_CALENDAR_ID),
        slot_generator=SlotGenerator(step_minutes=settings.SLOT_STEP_MINUTES),
        default_duration_minutes=settings.DEFAULT_SERVICE_DURATION_MINUTES,
    )
    appointment_service = AppointmentService(
        gateway=calendar_gateway,
        calendar_id=settings.GOOGLE_CALENDAR_ID,
        default_duration_minutes=settings.DEFAULT_SERVICE_DURATION_MINUTES,
        recheck_busy_set=settings.BOOKING_RECHECK_BUSY_SET,
    )

    return AppContext(
        settings=settings,
        session_factory=session_factory,
        calendar_gateway=calendar_gateway,
        cipher=cipher,
        availability_service=availability_service,
        appointment_service=appointment_service,
    )
