# type: ignore
# pyright: reportGeneralTypeIssues=false
"""
Project Portfolio Service
=========================
Manages projects and the managers / staff assigned to them: staffing
limits, forward-only status progression and automatic risk classification.

Enforces a strict status state-machine:
    under_review ─► review_completed ─► review_approved ─► started
        ─► planned ─► in_progress ─► completed
    any non-cancelled status ─► cancelled

Port: 8005
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from portfolio.controllers import member_controller, project_controller, system_controller
from portfolio.core.config import settings
from portfolio.core.dependencies import get_project_repo, get_project_service
from portfolio.core.logging import get_logger
from portfolio.middleware import MetricsMiddleware, RequestIDMiddleware
from portfolio.schemas import ErrorResponse

logger = get_logger("portfolio")


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    repo = get_project_repo()
    try:
        if settings.CREATE_SCHEMA:
            repo.create_schema()
        get_project_service().seed_gauges()
    except SQLAlchemyError:
        logger.warning("Could not prepare database; it may not be ready yet", exc_info=True)
    yield
    repo.dispose()
    logger.info("Shutting down, connection pool disposed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Project Portfolio Service",
    description="Project lifecycle, staff allocation and risk classification.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    body = ErrorResponse(
        error="internal_server_error",
        detail=str(exc),
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=500, content=body.model_dump())


app.include_router(system_controller.router)
app.include_router(member_controller.router)
app.include_router(project_controller.router)


# ── Entrypoint ────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
