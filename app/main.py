"""
app/main.py

Purpose: Application entry point

- Builds the FastAPI app, middleware and exception handlers
- Mounts the feature routers, generic table routes last
- Lifespan: config check, MongoDB, indexes, background jobs
- Health, readiness and liveness endpoints
"""

from contextlib import asynccontextmanager
from typing import List
import asyncio
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger, LogContext
from app.db.mongo import connect_to_mongo, close_mongo_connection, check_database_health
from app.db.indexes import create_indexes
from app.services.maintenance_service import maintenance_loop
from app.services.telegram_poller import telegram_poller
from app.api import (
    auth,
    chatbot,
    courses,
    payments,
    query,
    resume,
    telegram,
    telegram_files,
    uploads,
)

setup_logging()
logger = get_logger(__name__)

APP_VERSION = "1.0.0"
SLOW_REQUEST_SECONDS = 5.0


def _start_background_jobs() -> List[asyncio.Task]:
    tasks = [asyncio.create_task(maintenance_loop(), name="maintenance")]

    if not settings.telegram_enabled:
        logger.warning("⚠️ TELEGRAM_BOT_TOKEN not set, Telegram features disabled")
    elif settings.TELEGRAM_POLLING:
        tasks.append(asyncio.create_task(telegram_poller.run(), name="telegram-poller"))
    else:
        logger.info("Telegram bot in webhook mode")

    return tasks


async def _stop_background_jobs(tasks: List[asyncio.Task]):
    telegram_poller.stop()
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Starting LivAbhi API v{APP_VERSION} ({settings.ENVIRONMENT})")

    try:
        validate_settings()
        await connect_to_mongo()
        await create_indexes()
    except Exception as e:
        logger.critical(f"Startup aborted: {e}", exc_info=True)
        raise

    if not await check_database_health():
        logger.warning("⚠️ Database health check failed during startup")

    tasks = _start_background_jobs()
    logger.info("🎉 LivAbhi API ready")

    yield

    logger.info("🛑 Shutting down LivAbhi API")
    try:
        await _stop_background_jobs(tasks)
        await close_mongo_connection()
    except Exception as e:
        logger.error(f"Error during shutdown: {e}", exc_info=True)


app = FastAPI(
    title="LivAbhi API",
    description="Content marketplace and e-learning backend with a Telegram upload bot",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """
    Tags every log line of the request with a short request id and
    reports it back in X-Request-ID along with X-Process-Time.
    """
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    started = time.perf_counter()

    with LogContext(request_id=request_id):
        response = await call_next(request)
        elapsed = time.perf_counter() - started
        if elapsed > SLOW_REQUEST_SECONDS:
            logger.warning(f"Slow request: {request.method} {request.url.path} took {elapsed:.2f}s")

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    return response


add_exception_handlers(app)

prefix = settings.API_PREFIX
app.include_router(uploads.router, prefix=prefix, tags=["Uploads"])
app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["Auth"])
app.include_router(payments.router, prefix=f"{prefix}/razorpay", tags=["Payments"])
app.include_router(chatbot.router, prefix=f"{prefix}/chatbot", tags=["Chatbot"])
app.include_router(telegram.router, prefix=f"{prefix}/telegram", tags=["Telegram Bot"])
app.include_router(courses.router, prefix=f"{prefix}/courses", tags=["Courses"])
app.include_router(telegram_files.router, prefix=f"{prefix}/telegram-files", tags=["Telegram Files"])
app.include_router(resume.router, prefix=f"{prefix}/resume", tags=["Resume"])
# Matches /api/{table_name}/..., so it must stay after the fixed prefixes
app.include_router(query.router, prefix=f"{prefix}/{{table_name}}", tags=["Tables"])


@app.get("/", tags=["Health"])
async def root():
    return {
        "name": "LivAbhi API",
        "version": APP_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Database connectivity plus the state of the Telegram integration.
    503 when the database is unreachable.
    """
    db_healthy = await check_database_health()
    checks = {
        "database": "healthy" if db_healthy else "unhealthy",
        "telegram": "configured" if settings.telegram_enabled else "disabled",
        "telegram_polling": "running" if telegram_poller.running else "off",
    }
    report = {
        "status": "healthy" if db_healthy else "degraded",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": APP_VERSION,
        "checks": checks,
    }
    return JSONResponse(content=report, status_code=200 if db_healthy else 503)


@app.get("/ready", tags=["Health"])
async def readiness_check():
    if await check_database_health():
        return {"status": "ready"}
    return JSONResponse(status_code=503, content={"status": "not_ready", "reason": "database_unavailable"})


@app.get("/live", tags=["Health"])
async def liveness_check():
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
    )
