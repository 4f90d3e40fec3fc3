"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.mm_admin.api.router import router as admin_router
from src.mm_admin.application.service import AdminService
from src.mm_common.database import async_session_factory, create_tables, engine
from src.mm_common.errors import AppError
from src.mm_common.response import error_response
from src.mm_gateway.api.router import router as auth_router
from src.mm_gateway.middleware.request_log import RequestLogMiddleware
from src.mm_ledger.api.admin_router import router as ledger_admin_router
from src.mm_ledger.api.router import router as member_ledger_router
from src.mm_ledger.application.service import LedgerReadService
from src.mm_ledger.domain.cache import ReadCache
from src.mm_member.api.router import router as member_admin_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, create tables, build the read cache, seed. Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.CREATE_TABLES_ON_STARTUP:
        await create_tables()

    app.state.read_cache = ReadCache(ttl_seconds=settings.CACHE_TTL_SECONDS)

    async with async_session_factory() as db:
        await AdminService().seed_defaults(db)
        if settings.CACHE_WARM_ON_STARTUP:
            await LedgerReadService().reload_cache(db, app.state.read_cache)

    logger.info("%s started", settings.APP_NAME)
    yield
    app.state.read_cache.clear()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(member_ledger_router, prefix="/api/v1")
app.include_router(ledger_admin_router, prefix="/api/v1")
app.include_router(member_admin_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
