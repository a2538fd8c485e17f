# app/services/business/business_store.py
"""Store access for services, schedules, credentials and appointments"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy.orm import Session

from app.core.exceptions import AuthError
from app.models.appointment import Appointment
from app.models.auth_credential import AuthCredential
from app.models.availability import OperatingHourRule
from app.models.business import Business
from app.models.service import Service
from app.utils.encryption import decrypt_token
from app.utils.time_utils import get_zone

logger = logging.getLogger(__name__)


class BusinessStore:
    """
    Thin wrapper over one SQLAlchemy session.

    Reads never retry; a failing query propagates to the caller.
    Writes stay inside the session's open transaction until commit().
    """

    def __init__(self, db: Session, cipher: Optional[Fernet] = None):
        self.db = db
        self.cipher = cipher

    # ------------------------------------------------------------------
    # Services / business
    # ------------------------------------------------------------------

    def get_service(self, service_id: UUID) -> Optional[Service]:
        return self.db.query(Service).filter(Service.id == service_id).first()

    def get_business(self, business_id: UUID) -> Optional[Business]:
        return self.db.query(Business).filter(Business.id == business_id).first()

    def is_business_active(self, business_id: UUID) -> bool:
        business = self.get_business(business_id)
        return bool(business and business.is_active)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def get_auth_credential(self, business_id: UUID) -> Optional[AuthCredential]:
        return self.db.query(AuthCredential).filter(
            AuthCredential.business_id == business_id
        ).first()

    def decrypt_refresh_token(self, credential: Optional[AuthCredential]) -> Optional[str]:
        """Plain refresh token, or None when the business holds none"""
        if credential is None or not credential.has_refresh_token:
            return None
        if self.cipher is None:
            raise AuthError("No encryption key configured for stored refresh tokens")
        try:
            return decrypt_token(self.cipher, credential.refresh_token_encrypted)
        except InvalidToken as e:
            raise AuthError(f"Stored refresh token for business {credential.business_id} is unreadable") from e

    # ------------------------------------------------------------------
    # Weekly schedule
    # ------------------------------------------------------------------

    def get_weekday_rules(self, business_id: UUID, day_of_week: int) -> List[OperatingHourRule]:
        return self.db.query(OperatingHourRule).filter(
            OperatingHourRule.business_id == business_id,
            OperatingHourRule.day_of_week == day_of_week
        ).order_by(OperatingHourRule.open_time.asc()).all()

    def get_weekly_schedule(self, business_id: UUID) -> List[OperatingHourRule]:
        return self.db.query(OperatingHourRule).filter(
            OperatingHourRule.business_id == business_id
        ).order_by(
            OperatingHourRule.day_of_week.asc(),
            OperatingHourRule.open_time.asc()
        ).all()

    def get_schedule_zone(self, business_id: UUID) -> Optional[str]:
        """Zone of the business's first weekly rule, if it has any"""
        rule = self.db.query(OperatingHourRule).filter(
            OperatingHourRule.business_id == business_id
        ).order_by(
            OperatingHourRule.day_of_week.asc(),
            OperatingHourRule.open_time.asc()
        ).first()
        return rule.time_zone if rule else None

    def replace_weekly_schedule(
            self,
            business_id: UUID,
            rules: Sequence[OperatingHourRule],
    ) -> List[OperatingHourRule]:
        """
        Swap the whole weekly rule set in one transaction.

        Zones are validated before anything is touched, so a bad rule
        leaves the previous schedule in place.
        """
        for rule in rules:
            get_zone(rule.time_zone)
            rule.business_id = business_id

        try:
            self.db.query(OperatingHourRule).filter(
                OperatingHourRule.business_id == business_id
            ).delete(synchronize_session=False)
            self.db.add_all(list(rules))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Replaced weekly schedule for business {business_id} with {len(rules)} rules")
        return self.get_weekly_schedule(business_id)

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------

    def get_appointments_overlapping(
            self,
            business_id: UUID,
            window_start: datetime,
            window_end: datetime,
    ) -> List[Appointment]:
        """Appointments whose [start, end) intersects [window_start, window_end)"""
        return self.db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.appointment_start_time < window_end,
            Appointment.appointment_end_time > window_start
        ).order_by(Appointment.appointment_start_time.asc()).all()

    def add_appointment(self, appointment: Appointment) -> Appointment:
        """Stage a new row inside the open transaction"""
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def get_appointment(self, appointment_id: UUID, business_id: Optional[UUID] = None) -> Optional[Appointment]:
        query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
        if business_id is not None:
            query = query.filter(Appointment.business_id == business_id)
        return query.first()

    def list_appointments(
            self,
            business_id: Optional[UUID] = None,
            skip: int = 0,
            limit: int = 50,
    ) -> List[Appointment]:
        """Newest first; all businesses when business_id is None"""
        query = self.db.query(Appointment)
        if business_id is not None:
            query = query.filter(Appointment.business_id == business_id)
        return query.order_by(
            Appointment.appointment_start_time.desc()
        ).offset(skip).limit(limit).all()

    # ------------------------------------------------------------------
    # Transaction control
    # ------------------------------------------------------------------

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def refresh(self, instance) -> None:
        self.db.refresh(instance)
