import asyncio
import logging
import os
from dotenv import load_dotenv  # load .env variables

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sqlalchemy.exc import DBAPIError, OperationalError

import capacity_ledger.database as database

# ----- Load environment variables -----
load_dotenv()

# ----- Logging -----
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger("capacity_ledger")

# ----- Routers -----
from capacity_ledger.routes.teams import router as team_router
from capacity_ledger.routes.sprints import router as sprint_router
from capacity_ledger.routes.capacities import router as capacity_router
from capacity_ledger.routes.capacity_roles import router as capacity_role_router
from capacity_ledger.routes.roles import router as role_router


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


API_PREFIX = os.getenv("API_PREFIX", "/api").rstrip("/")

# ----- FastAPI app -----
app = FastAPI(
    title="Capacity Ledger",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# ----- CORS (open by default; ALLOWED_ORIGINS="" disables it) -----
raw_origins = os.getenv("ALLOWED_ORIGINS", "*").strip()
if raw_origins:
    allowed_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
        max_age=86400,
    )

# ----- Include routers -----
app.include_router(team_router, prefix=API_PREFIX)
app.include_router(sprint_router, prefix=API_PREFIX)
app.include_router(capacity_router, prefix=API_PREFIX)
app.include_router(capacity_role_router, prefix=API_PREFIX)
app.include_router(role_router, prefix=API_PREFIX)


def sqlite_fallback_allowed() -> bool:
    """Decide if we may fall back to the bundled SQLite database."""

    configured = os.getenv("DB_ALLOW_SQLITE_FALLBACK")
    if configured is not None:
        return configured.lower() in {"1", "true", "yes", "on"}

    # Only local development (already on SQLite) falls back by default, so a
    # misconfigured deployment fails fast instead of writing to a local file.
    return database.CURRENT_DATABASE_URL == database.DEFAULT_SQLITE_URL


async def bootstrap_database() -> None:
    """Ensure the schema exists, retrying while the database comes up."""

    max_attempts = int(os.getenv("DB_INIT_MAX_ATTEMPTS", "10"))
    base_delay = float(os.getenv("DB_INIT_RETRY_SECONDS", "1.0"))

    attempt = 0
    while True:
        attempt += 1
        try:
            await database.init_models()
        except (OperationalError, DBAPIError, OSError) as exc:  # pragma: no cover - depends on timing
            if attempt >= max_attempts:
                if sqlite_fallback_allowed() and (
                    database.CURRENT_DATABASE_URL != database.DEFAULT_SQLITE_URL
                ):
                    logger.error(
                        "Database not reachable at %s after %s attempts: %s."
                        " Falling back to local SQLite for development.",
                        database.describe_database_url(database.CURRENT_DATABASE_URL),
                        attempt,
                        exc,
                    )
                    await database.engine.dispose()
                    database.configure_engine(database.DEFAULT_SQLITE_URL)
                    attempt = 0
                    continue

                logger.exception("Database not reachable after %s attempts", attempt)
                raise

            wait_time = base_delay * min(2 ** (attempt - 1), 8)
            logger.warning(
                "Database not ready (attempt %s/%s): %s. Retrying in %.1f seconds...",
                attempt,
                max_attempts,
                exc,
                wait_time,
            )
            await asyncio.sleep(wait_time)
        else:
            return


@app.on_event("startup")
async def on_startup():
    logger.info(
        "Using DB: %s", database.describe_database_url(database.CURRENT_DATABASE_URL)
    )
    if not _env_flag("DB_AUTO_CREATE", "true"):
        logger.info("DB_AUTO_CREATE disabled; expecting schema from scripts/init_db.py")
        return
    await bootstrap_database()
    logger.info("Capacity ledger API started under prefix %r", API_PREFIX or "/")


@app.on_event("shutdown")
async def on_shutdown():
    await database.engine.dispose()


# ----- Health check endpoint -----
@app.get("/health", tags=["meta"])
async def health():
    return {"ok": True}
