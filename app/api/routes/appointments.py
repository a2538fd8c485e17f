# app/api/routes/appointments.py
"""
Appointment API Endpoints
Booking plus read-only lookups
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.api.dependencies import get_context, get_store
from app.core.context import AppContext
from app.schemas.appointment import AppointmentCreate, AppointmentOut
from app.schemas.common import ApiResponse, fail, ok
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.appointment.appointment_service import BookingStatus, CustomerDetails
from app.services.business.business_store import BusinessStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", status_code=201, response_model=ApiResponse[AppointmentOut])
def create_appointment(
        body: AppointmentCreate,
        context: AppContext = Depends(get_context),
        store: BusinessStore = Depends(get_store),
):
    """
    Book an appointment and sync it to the business's Google Calendar.

    201 on success, 417 when the business has no calendar connected
    (nothing is saved), 400 on validation or schedule conflicts.
    """
    outcome = context.appointment_service.create_appointment(
        store,
        service_id=body.service_id,
        business_id=body.business_id,
        customer=CustomerDetails(
            name=body.customer_name,
            email=body.customer_email,
            phone=body.customer_phone,
            notes=body.notes,
        ),
        start_time=body.appointment_start_time,
    )

    if outcome.status == BookingStatus.CALENDAR_NOT_CONNECTED:
        return JSONResponse(status_code=outcome.status_code, content=fail(outcome.message))

    data = AppointmentOut.from_model(outcome.appointment).model_dump(mode="json")
    return JSONResponse(status_code=outcome.status_code, content=ok(data, outcome.message))


@router.get("")
def list_appointments(
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=500),
        store: BusinessStore = Depends(get_store),
):
    appointments = AppointmentQueryService.list_appointments(store, skip=skip, limit=limit)
    return ok(appointments, "Appointments retrieved successfully")


@router.get("/{appointment_id}")
def get_appointment(appointment_id: UUID, store: BusinessStore = Depends(get_store)):
    return ok(AppointmentQueryService.get_appointment(store, appointment_id))
