from fastapi import Request

from pulsedesk.log_client import LogServiceClient
from pulsedesk.store import DashboardStore


def get_store(request: Request) -> DashboardStore:
    return request.app.state.store


def get_log_client(request: Request) -> LogServiceClient:
    return request.app.state.log_client
