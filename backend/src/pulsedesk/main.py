import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pulsedesk.core.config import settings
from pulsedesk.api import appointments, conversations, dashboard, patients
from pulsedesk.log_client import LogServiceClient
from pulsedesk.store import DashboardStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("pulsedesk")

app = FastAPI(title="PulseDesk Front Desk")

# CORS (browser-safe)
if settings.CORS_ORIGINS:
    allow_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    allow_credentials = True
else:
    allow_origins = ["*"]
    allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(patients.router, prefix="/patients", tags=["patients"])
app.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
app.include_router(conversations.router, prefix="/conversations", tags=["conversations"])
app.include_router(dashboard.router, tags=["dashboard"])


@app.on_event("startup")
async def on_startup():
    client = LogServiceClient()
    store = DashboardStore()

    app.state.log_client = client
    app.state.store = store

    if settings.LOAD_ON_STARTUP:
        await store.refresh(client)
    logger.info("Dashboard ready (log service %s)", client.base_url)
