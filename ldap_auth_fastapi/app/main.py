# app/main.py
from contextlib import asynccontextmanager
import asyncio
from time import perf_counter

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.core.config import load_environment, get_env_load_state, settings
from app.core.middleware import LoggingMiddleware

load_environment()

from app.auth.routers.login_router import router as login_router  # noqa: E402

APP_VERSION = "1.0.0"


def _ping_database() -> None:
    from app.db.session import get_engine

    with get_engine().connect() as conn:
        conn.execute(text("SELECT 1"))


async def _prewarm_database(app_logger):
    """Ping the database in a worker thread; log but do not block startup."""
    try:
        await asyncio.to_thread(_ping_database)
    except Exception as exc:
        app_logger.warning("Database prewarm failed", extra={"error": str(exc)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    from app.core.logger import app_logger

    env_state = get_env_load_state()
    if env_state["warning"]:
        app_logger.warning(
            "Environment file missing",
            extra={"warning": env_state["warning"]},
        )

    startup_start = perf_counter()
    db_task = asyncio.create_task(_prewarm_database(app_logger))

    app_logger.info(
        "LDAP auth application started",
        extra={
            "version": APP_VERSION,
            "startup_ms": round((perf_counter() - startup_start) * 1000, 2),
            "environment": settings.ENVIRONMENT,
            "ldap_server": settings.LDAP_SERVER_URI,
            "log_level": settings.LOG_LEVEL,
            "log_format": settings.LOG_FORMAT,
        },
    )

    yield

    await db_task
    app_logger.info("LDAP auth application shutting down")


app = FastAPI(
    title="LDAP Auth Backend",
    description="Directory-backed login with a local shadow user table",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

cors_origins = settings.CORS_ORIGINS
if cors_origins == "*":
    allow_origins = ["*"]
else:
    allow_origins = [origin.strip() for origin in cors_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)

app.include_router(login_router)


@app.get("/")
def read_root():
    return {
        "message": "LDAP auth backend is running",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Quick DB ping plus runtime metadata."""
    db_status = "unknown"
    overall_status = "degraded"

    try:
        await asyncio.to_thread(_ping_database)
        db_status = "up"
        overall_status = "ok"
    except Exception as exc:
        db_status = f"down ({type(exc).__name__})"

    return {
        "status": overall_status,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": db_status,
    }
