import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pulsedesk.core.config import settings
from pulsedesk.logstore.router import router
from pulsedesk.logstore.seed import seed_if_empty
from pulsedesk.logstore.session import close_db, init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("pulsedesk-logstore")

app = FastAPI(title="PulseDesk Conversation Log Store")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/log", tags=["log"])


@app.on_event("startup")
async def on_startup():
    await init_db()
    if settings.LOG_STORE_SEED:
        await seed_if_empty()
    logger.info("Log store ready")


@app.on_event("shutdown")
async def on_shutdown():
    await close_db()
