from __future__ import annotations
import asyncio
import uuid
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from photocontest.config import settings
from photocontest.errors import ContestError, Transient
from photocontest.logging_setup import configure_logging
from photocontest.jobs.finalize_contests import start_scheduler
from photocontest.routes.system import router as system_router
from photocontest.routes.contests import router as contests_router
from photocontest.routes.votes import router as votes_router
from photocontest.routes.xp import router as xp_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    scheduler = start_scheduler(settings.scheduler_interval_seconds) if settings.scheduler_enabled else None
    yield
    # Shutdown
    if scheduler is not None:
        scheduler.cancel()
        with suppress(asyncio.CancelledError):
            await scheduler
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for contest phases, voting and XP rewards",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(ContestError)
async def contest_error_handler(request: Request, exc: ContestError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})

@app.exception_handler(OperationalError)
async def operational_error_handler(request: Request, exc: OperationalError):
    log.warning("db.unavailable", path=request.url.path, error=str(exc.orig))
    return JSONResponse(
        status_code=Transient.status_code,
        content={"detail": "storage temporarily unavailable, retry", "code": Transient.code},
    )

# Include routers
app.include_router(system_router)
app.include_router(contests_router)
app.include_router(votes_router)
app.include_router(xp_router)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    structlog.contextvars.clear_contextvars()
    return response

def serve():
    import uvicorn
    uvicorn.run("photocontest.main:app", host=settings.api_host, port=settings.api_port)
