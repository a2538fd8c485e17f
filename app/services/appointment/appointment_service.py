# ============================================================================
# app/services/appointment/appointment_service.py
# ============================================================================
"""
Booking workflow.

A booking is validated against declared operating hours, staged in the
open transaction, pushed to the business's Google Calendar and only then
committed. Any failure after the row is staged rolls the whole thing back,
so a committed appointment always has a matching calendar event.

Known tradeoff: the transaction stays open across the calendar calls. A
pending/confirmed saga would decouple store latency from provider latency
at the cost of a visible intermediate state.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from app.core.exceptions import (
    BookingAPIError,
    BookingConflictError,
    CalendarGatewayError,
    StateConflictError,
    UpstreamError,
    ValidationError,
)
from app.models.appointment import Appointment
from app.models.service import Service
from app.services.business.business_store import BusinessStore
from app.services.calendar.base import CalendarGateway
from app.utils.time_utils import ensure_utc, to_rfc3339, utc_to_local

logger = logging.getLogger(__name__)


class BookingState(str, Enum):
    STARTED = "started"
    SERVICE_RESOLVED = "service_resolved"
    AUTH_RESOLVED = "auth_resolved"
    ACTIVE_CHECKED = "active_checked"
    HOURS_VALIDATED = "hours_validated"
    PERSISTED = "persisted"
    CALENDAR_SYNCED = "calendar_synced"
    CALENDAR_SKIPPED = "calendar_skipped"
    COMMITTED = "committed"


class BookingStatus(str, Enum):
    CREATED = "created"
    CALENDAR_NOT_CONNECTED = "calendar_not_connected"


@dataclass
class CustomerDetails:
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class BookingOutcome:
    status: BookingStatus
    message: str
    appointment: Optional[Appointment] = None

    @property
    def status_code(self) -> int:
        return 201 if self.status == BookingStatus.CREATED else 417


def build_event_payload(
        service: Service,
        customer: CustomerDetails,
        start_time: datetime,
        end_time: datetime,
) -> Dict[str, Any]:
    """Google Calendar event body for a booking"""
    event = {
        "summary": f"Appointment Scheduled: {service.service_name} for {customer.name}",
        "description": (
            f"Service: {service.service_name}\n"
            f"Customer Phone: {customer.phone or 'N/A'}\n"
            f"Customer Email: {customer.email or 'N/A'}\n"
            f"Note: {customer.notes or 'N/A'}"
        ),
        "start": {"dateTime": to_rfc3339(start_time), "timeZone": "UTC"},
        "end": {"dateTime": to_rfc3339(end_time), "timeZone": "UTC"},
        "attendees": [],
    }
    # Customer is the only attendee, invited only when reachable
    if customer.email:
        event["attendees"].append({"email": customer.email})
    return event


class AppointmentService:
    """Creates appointments and keeps them in sync with the business calendar"""

    def __init__(
            self,
            gateway: CalendarGateway,
            calendar_id: str = "primary",
            default_duration_minutes: int = 30,
            recheck_busy_set: bool = False,
    ):
        self.gateway = gateway
        self.calendar_id = calendar_id
        self.default_duration_minutes = default_duration_minutes
        self.recheck_busy_set = recheck_busy_set

    @staticmethod
    def _advance(business_id: UUID, state: BookingState) -> BookingState:
        logger.debug(f"Booking for business {business_id}: {state.value}")
        return state

    def create_appointment(
            self,
            store: BusinessStore,
            service_id: UUID,
            business_id: UUID,
            customer: CustomerDetails,
            start_time: datetime,
    ) -> BookingOutcome:
        """
        Validate, persist and sync one appointment.

        Returns a CREATED outcome after commit, or a CALENDAR_NOT_CONNECTED
        outcome (nothing persisted) when the business has no refresh token.
        Raises ValidationError/StateConflictError for rejected requests and
        UpstreamError when the calendar sync fails.
        """
        state = self._advance(business_id, BookingState.STARTED)
        start_time = ensure_utc(start_time)

        try:
            service = store.get_service(service_id)
            if not service or service.business_id != business_id:
                raise ValidationError("Invalid service_id.")
            state = self._advance(business_id, BookingState.SERVICE_RESOLVED)

            credential = store.get_auth_credential(business_id)
            if not credential:
                raise ValidationError("Business not found or not authenticated.")
            state = self._advance(business_id, BookingState.AUTH_RESOLVED)

            if not store.is_business_active(business_id):
                raise StateConflictError("This business is not currently accepting appointments.")
            state = self._advance(business_id, BookingState.ACTIVE_CHECKED)

            duration = service.effective_duration(self.default_duration_minutes)
            end_time = start_time + timedelta(minutes=duration)
            self._check_operating_hours(store, business_id, start_time, end_time)
            state = self._advance(business_id, BookingState.HOURS_VALIDATED)

            if self.recheck_busy_set and store.get_appointments_overlapping(business_id, start_time, end_time):
                raise BookingConflictError("Requested slot overlaps an existing appointment.")

            appointment = store.add_appointment(Appointment(
                service_id=service_id,
                business_id=business_id,
                customer_name=customer.name,
                customer_email=customer.email,
                customer_phone=customer.phone,
                appointment_start_time=start_time,
                appointment_end_time=end_time,
                notes=customer.notes,
            ))
            state = self._advance(business_id, BookingState.PERSISTED)

            refresh_token = store.decrypt_refresh_token(credential)
            if not refresh_token:
                store.rollback()
                self._advance(business_id, BookingState.CALENDAR_SKIPPED)
                logger.info(f"Business {business_id} has no calendar connected, appointment not saved")
                return BookingOutcome(
                    status=BookingStatus.CALENDAR_NOT_CONNECTED,
                    message=f"Business {business_id} has no Google Calendar connected.",
                )

            access_token = self.gateway.refresh_access_token(refresh_token)
            event = build_event_payload(service, customer, start_time, end_time)
            created = self.gateway.insert_event(access_token, event, calendar_id=self.calendar_id)
            state = self._advance(business_id, BookingState.CALENDAR_SYNCED)

            store.commit()
            store.refresh(appointment)
            self._advance(business_id, BookingState.COMMITTED)

        except BookingAPIError:
            store.rollback()
            logger.debug(f"Booking for business {business_id} aborted at {state.value}")
            raise
        except CalendarGatewayError as e:
            store.rollback()
            logger.error(f"Calendar sync failed for business {business_id} at {state.value}, rolled back: {e}")
            raise UpstreamError(f"Calendar sync failed: {e.message}")
        except Exception as e:
            store.rollback()
            logger.error(f"Booking for business {business_id} failed at {state.value}: {e}", exc_info=True)
            raise

        logger.info(
            f"Appointment {appointment.id} booked for business {business_id} "
            f"at {to_rfc3339(start_time)} (event {created.get('id')})"
        )
        return BookingOutcome(
            status=BookingStatus.CREATED,
            message="Appointment created and synced.",
            appointment=appointment,
        )

    @staticmethod
    def _check_operating_hours(
            store: BusinessStore,
            business_id: UUID,
            start_time: datetime,
            end_time: datetime,
    ) -> None:
        schedule_zone = store.get_schedule_zone(business_id)
        if not schedule_zone:
            raise StateConflictError("Business is closed on this day.")

        weekday = utc_to_local(start_time, schedule_zone).isoweekday()
        rules = store.get_weekday_rules(business_id, weekday)
        if not rules:
            raise StateConflictError("Business is closed on this day.")

        zone_name = rules[0].time_zone
        local_start = utc_to_local(start_time, zone_name)
        local_end = utc_to_local(end_time, zone_name)
        day = local_start.date()

        fits = any(
            datetime.combine(day, rule.open_time) <= local_start
            and local_end <= datetime.combine(day, rule.close_time)
            for rule in rules
        )
        if not fits:
            raise StateConflictError("Requested slot is outside operating hours.")
