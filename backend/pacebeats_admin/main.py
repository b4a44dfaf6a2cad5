import logging
import sys

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pacebeats_admin.api.analytics import router as analytics_router
from pacebeats_admin.api.diagnostics import router as diagnostics_router
from pacebeats_admin.api.monitor import router as monitor_router
from pacebeats_admin.api.sessions import router as sessions_router
from pacebeats_admin.core.config import settings
from pacebeats_admin.core.errors import ConfigurationError, NotFoundError, UpstreamQueryError
from pacebeats_admin.models.user import User  # noqa: F401  (import ensures table is registered)
from pacebeats_admin.models.running_session import RunningSession  # noqa: F401

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


app = FastAPI(title="Pacebeats Admin API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Missing database configuration", "details": str(exc)},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning("%s on %s %s", exc, request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": str(exc)},
    )


@app.exception_handler(UpstreamQueryError)
async def upstream_error_handler(request: Request, exc: UpstreamQueryError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc), "details": exc.details},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "message": str(exc)},
    )


app.include_router(monitor_router)
app.include_router(sessions_router)
app.include_router(analytics_router)
app.include_router(diagnostics_router)


@app.get("/")
def root():
    return {"message": "Pacebeats admin backend is running"}
