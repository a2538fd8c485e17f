# app/api/routes/businesses.py
"""
Business scheduling endpoints: free slots, weekly hours, appointments.

The /me routes are declared before the /{business_id} routes so that
"me" is never parsed as a business id.
"""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_context, get_current_business_id, get_store
from app.core.context import AppContext
from app.schemas.availability import SlotOut, WeeklyRuleOut, WeeklyScheduleIn
from app.schemas.common import ApiResponse, ok
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.availability.schedule_service import ScheduleService
from app.services.business.business_store import BusinessStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/businesses", tags=["businesses"])


def _serialize_rules(rules):
    return [rule.to_dict() for rule in rules]


# ============================================================================
# Authenticated business (JWT)
# ============================================================================

@router.post("/me/availability", response_model=ApiResponse[List[WeeklyRuleOut]])
def replace_my_availability(
        body: WeeklyScheduleIn,
        business_id: UUID = Depends(get_current_business_id),
        store: BusinessStore = Depends(get_store),
):
    """Replace the caller's entire weekly schedule"""
    rules = ScheduleService.replace_weekly_schedule(store, business_id, body.rules)
    return ok(_serialize_rules(rules), "Availability updated successfully")


@router.get("/me/availability", response_model=ApiResponse[List[WeeklyRuleOut]])
def get_my_availability(
        business_id: UUID = Depends(get_current_business_id),
        store: BusinessStore = Depends(get_store),
):
    rules = ScheduleService.get_weekly_schedule(store, business_id)
    return ok(_serialize_rules(rules), "Availability retrieved successfully")


# ============================================================================
# Public
# ============================================================================

@router.get("/{business_id}/slots", response_model=ApiResponse[List[SlotOut]])
def get_available_slots(
        business_id: UUID,
        date: str = Query(..., description="Day to check, YYYY-MM-DD"),
        service_id: UUID = Query(..., description="Service being booked"),
        context: AppContext = Depends(get_context),
        store: BusinessStore = Depends(get_store),
):
    """Free slots for one service on one day, ascending by start"""
    result = context.availability_service.get_available_slots(store, business_id, service_id, date)
    return ok([slot.to_dict() for slot in result.slots], result.message)


@router.get("/{business_id}/availability", response_model=ApiResponse[List[WeeklyRuleOut]])
def get_business_availability(business_id: UUID, store: BusinessStore = Depends(get_store)):
    rules = ScheduleService.get_weekly_schedule(store, business_id)
    return ok(_serialize_rules(rules), "Availability retrieved successfully")


@router.get("/{business_id}/appointments")
def get_business_appointments(
        business_id: UUID,
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=500),
        store: BusinessStore = Depends(get_store),
):
    appointments = AppointmentQueryService.list_appointments(
        store, business_id=business_id, skip=skip, limit=limit
    )
    return ok(appointments, "Appointments retrieved successfully")
