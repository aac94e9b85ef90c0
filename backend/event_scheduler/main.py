"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from event_scheduler.config import settings
from event_scheduler.database import Base, engine
from event_scheduler.errors import ConflictError, InternalError, ServiceError

# Import routers
from event_scheduler.routers import profiles, events, logs
from event_scheduler.services.timezones import TimezoneRegistry

# Import all models so Base.metadata knows about them
from event_scheduler.models.profile import Profile                    # noqa: F401
from event_scheduler.models.event import Event, EventParticipant      # noqa: F401
from event_scheduler.models.audit_log import AuditLogEntry            # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Event Scheduler",
    description="Timezone-aware shared events with an append-only change log",
    version="0.1.0",
)

app.state.timezones = TimezoneRegistry.from_settings(settings)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(logs.router, prefix="/api/logs", tags=["Logs"])


def _error_response(error: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """A unique or foreign-key constraint rejected the write."""
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return _error_response(ConflictError("Conflicting or dangling reference"))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Persistence failures are reported once, never retried."""
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(InternalError("Database unavailable"))


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
