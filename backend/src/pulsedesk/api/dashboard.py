from fastapi import APIRouter, Depends

from pulsedesk.api.deps import get_log_client, get_store
from pulsedesk.log_client import LogServiceClient
from pulsedesk.schemas import DashboardStats
from pulsedesk.store import DashboardStore, dashboard_stats

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def stats(store: DashboardStore = Depends(get_store)):
    return dashboard_stats(store.state)


@router.post("/refresh", response_model=DashboardStats)
async def refresh(
    store: DashboardStore = Depends(get_store),
    client: LogServiceClient = Depends(get_log_client),
):
    """Discard local state and reload everything from the log service."""
    await store.refresh(client)
    return dashboard_stats(store.state)
