from __future__ import annotations

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from api_manager import console_api, dth22_api
from api_manager.config import get_settings
from api_manager.db import get_session, init_db

logger = logging.getLogger("api_manager.api")


def _validate_runtime_configuration(settings) -> None:
    safety_errors = settings.production_safety_errors()
    if not safety_errors:
        return

    for error in safety_errors:
        logger.error("unsafe_production_config error=%s", error)
    raise RuntimeError("Unsafe production configuration; see logs for details")


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    _validate_runtime_configuration(settings)
    init_db()

    logger.info("API Connection Manager startup complete")
    yield
    logger.info("API Connection Manager shutdown complete")


app = FastAPI(
    title="API Connection Manager",
    version="0.1.0",
    description=(
        "Connect to any REST API, probe the HTTP methods it accepts, browse its JSON "
        "as a table and send POST/PUT/DELETE requests. Also serves the DTH22 sensor "
        "readings API."
    ),
    lifespan=lifespan,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID", "").strip() or uuid.uuid4().hex
    start = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception:
        duration_ms = (time.perf_counter() - start) * 1000.0
        logger.exception(
            "request_failed method=%s path=%s request_id=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            request_id,
            duration_ms,
        )
        raise

    duration_ms = (time.perf_counter() - start) * 1000.0
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "request_completed method=%s path=%s status=%s request_id=%s duration_ms=%.2f",
        request.method,
        request.url.path,
        response.status_code,
        request_id,
        duration_ms,
    )
    return response


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health/live")
def health_live() -> dict[str, str]:
    return {"status": "live"}


@app.get("/health/ready")
def health_ready(db: Session = Depends(get_session)) -> dict[str, str]:
    try:
        db.execute(text("SELECT 1"))
    except Exception:
        raise HTTPException(status_code=503, detail="Database not ready")
    return {"status": "ready"}


app.include_router(dth22_api.router)
app.include_router(console_api.router)
