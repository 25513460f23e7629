import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.database import init_db
from app.exceptions import LedgerError
from app.logging_config import configure_logging
from app.routers import history, imports, positions, sessions, stats, users
from app.services.session_store import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)


async def sweep_sessions(store: SessionStore, interval_seconds: float) -> None:
    """Periodically drop expired sessions."""
    while True:
        await asyncio.sleep(interval_seconds)
        store.expire()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    configure_logging()
    init_db()

    settings = get_settings()
    sweeper = asyncio.create_task(
        sweep_sessions(app.state.session_store, settings.session_sweep_interval_seconds)
    )
    logger.info("Position ledger started")
    yield
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Map ledger errors to JSON responses with their HTTP status."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


def create_app(session_store: SessionStore | None = None) -> FastAPI:
    settings = get_settings()

    app = FastAPI(title="Position Ledger", lifespan=lifespan)
    app.state.session_store = session_store or InMemorySessionStore(
        ttl=timedelta(hours=settings.session_ttl_hours)
    )
    app.add_exception_handler(LedgerError, ledger_error_handler)

    # Routers
    app.include_router(users.router, prefix="/users", tags=["users"])
    app.include_router(sessions.router, prefix="/session", tags=["session"])
    app.include_router(positions.router, prefix="/positions", tags=["positions"])
    app.include_router(history.router, prefix="/history", tags=["history"])
    app.include_router(imports.router, prefix="/imports", tags=["imports"])
    app.include_router(stats.router, prefix="/stats", tags=["stats"])

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
