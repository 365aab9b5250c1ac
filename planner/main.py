"""Event Planner API application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from planner.core.config import settings
from planner.core.database import create_db_and_tables
from planner.core.errors import Conflict, PlannerError
from planner.routes import events, invitations, messages, participants, rooms

# Configure logging
log_dir = Path(settings.log_dir).expanduser()
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    logger.info("Starting Event Planner application")
    create_db_and_tables()
    yield
    logger.info("Event Planner application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Collaborative event planning with role-based rooms and cascading lifecycle",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlannerError)
async def planner_error_handler(request: Request, exc: PlannerError):
    """Render typed errors as ``{"error": kind, "message": text}``."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """A unique index caught a concurrent duplicate insert."""
    logger.warning(f"{request.method} {request.url.path} integrity error: {exc.orig}")
    error = Conflict("Duplicate entry detected")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Include routers
app.include_router(events.router)
app.include_router(rooms.router)
app.include_router(participants.router)
app.include_router(messages.router)
app.include_router(invitations.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
