from fastapi import APIRouter, Depends

from pulsedesk.api.deps import get_store
from pulsedesk.schemas import Appointment
from pulsedesk.store import DashboardStore, filter_appointments

router = APIRouter()


@router.get("", response_model=list[Appointment])
async def list_appointments(status: str = "All", store: DashboardStore = Depends(get_store)):
    return filter_appointments(store.state, status)
