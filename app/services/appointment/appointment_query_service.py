# ============================================================================
# app/services/appointment/appointment_query_service.py
# Read-only appointment lookups, no FastAPI dependencies
# ============================================================================
from typing import Any, Dict, List, Optional
from uuid import UUID

from app.core.exceptions import NotFoundError
from app.models.appointment import Appointment
from app.schemas.appointment import AppointmentOut
from app.services.business.business_store import BusinessStore


class AppointmentQueryService:
    """Service layer for reading appointments."""

    @staticmethod
    def get_appointment(store: BusinessStore, appointment_id: UUID) -> Dict[str, Any]:
        appointment = store.get_appointment(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return AppointmentQueryService._serialize_appointment(appointment)

    @staticmethod
    def list_appointments(
            store: BusinessStore,
            business_id: Optional[UUID] = None,
            skip: int = 0,
            limit: int = 50,
    ) -> List[Dict[str, Any]]:
        """Newest first, optionally scoped to one business"""
        if business_id is not None and not store.get_business(business_id):
            raise NotFoundError("Business not found")

        appointments = store.list_appointments(business_id=business_id, skip=skip, limit=limit)
        return [AppointmentQueryService._serialize_appointment(appt) for appt in appointments]

    @staticmethod
    def _serialize_appointment(appointment: Appointment) -> Dict[str, Any]:
        return AppointmentOut.from_model(appointment).model_dump(mode="json")
