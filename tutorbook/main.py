"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

import tutorbook.modules  # noqa: F401
from tutorbook.core.config import get_settings
from tutorbook.core.database import SessionLocal, close_engine
from tutorbook.core.metrics import build_metrics_response, instrument_http_request
from tutorbook.modules.admin.router import router as admin_router
from tutorbook.modules.appointments.router import router as appointments_router
from tutorbook.modules.identity.repository import IdentityRepository
from tutorbook.modules.identity.router import router as identity_router
from tutorbook.modules.identity.service import IdentityService
from tutorbook.modules.messaging.router import router as messaging_router
from tutorbook.modules.scheduling.router import router as scheduling_router
from tutorbook.modules.students.repository import StudentsRepository
from tutorbook.modules.students.router import router as students_router
from tutorbook.modules.teachers.repository import TeachersRepository
from tutorbook.modules.teachers.router import router as teachers_router
from tutorbook.shared.exceptions import register_exception_handlers
from tutorbook.shared.utils import utc_now

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Application startup and shutdown hooks."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("Starting %s", settings.app_name)

    async with SessionLocal() as session:
        try:
            service = IdentityService(
                IdentityRepository(session),
                TeachersRepository(session),
                StudentsRepository(session),
            )
            await service.ensure_default_roles()
            await service.ensure_bootstrap_admin(settings.admin_email, settings.admin_password)
            await session.commit()
            logger.info("Default roles ensured")
        except Exception:
            await session.rollback()
            logger.exception("Failed during startup initialization")
            raise

    yield

    logger.info("Shutting down %s", settings.app_name)
    await close_engine()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(instrument_http_request)

register_exception_handlers(app)

app.include_router(identity_router, prefix=settings.api_prefix)
app.include_router(teachers_router, prefix=settings.api_prefix)
app.include_router(students_router, prefix=settings.api_prefix)
app.include_router(scheduling_router, prefix=settings.api_prefix)
app.include_router(appointments_router, prefix=settings.api_prefix)
app.include_router(messaging_router, prefix=settings.api_prefix)
app.include_router(admin_router, prefix=settings.api_prefix)


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    """Liveness endpoint."""
    return {"status": "ok", "service": settings.app_name}


async def _is_database_ready() -> bool:
    """Return True if DB accepts basic queries."""
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database readiness check failed")
        return False


@app.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Readiness endpoint with DB dependency check."""
    if not await _is_database_ready():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not ready",
        )
    return {
        "status": "ready",
        "database": "ok",
        "timestamp": utc_now().isoformat(),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics_endpoint(_: Request) -> Response:
    """Prometheus metrics endpoint."""
    return build_metrics_response()
