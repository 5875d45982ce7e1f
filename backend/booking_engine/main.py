"""
FastAPI app entrypoint.

Owns the table auto-assignment scheduler: built in the lifespan from AssignmentConfig,
started when ASSIGNMENT_ENABLED (one immediate run, then every interval), stopped on shutdown.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from booking_engine.api.routes import admission, assignment
from booking_engine.config import settings
from booking_engine.core.assignment_config import get_assignment_config
from booking_engine.core.logging_config import setup_logging
from booking_engine.scheduler.assignment_scheduler import AssignmentScheduler
from booking_engine.services.assignment.audit import SqlAlchemyAuditSink
from booking_engine.services.storage.sqlalchemy_store import SqlAlchemyBookingStore

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_assignment_config()
    store = SqlAlchemyBookingStore()
    scheduler = AssignmentScheduler(store, config, audit_sink=SqlAlchemyAuditSink())
    app.state.store = store
    app.state.scheduler = scheduler
    if config.enabled:
        scheduler.start()
    else:
        logger.info("Auto-assignment disabled (ASSIGNMENT_ENABLED=0); use POST /assignment/run")
    yield
    scheduler.stop()


app = FastAPI(title="Booking Engine", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS (comma-separated) for the admin frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admission.router, tags=["admission"])
app.include_router(assignment.router, tags=["assignment"])


@app.get("/", include_in_schema=False)
def root():
    return {"message": "Booking Engine", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
