"""Storefront settlement FastAPI application.

Commands are processed synchronously per request inside the storefront
domain context. The domain (and every element registered on it) is
initialized once at import time.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.exceptions import ProteanException

from shared.config import get_settings
from shared.domain import init_domain
from shared.exceptions import messages_for, status_code_for
from shared.logging import get_logger

storefront = init_domain()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the background jobs in-process when STOREFRONT_SCHEDULER_ENABLED is set."""
    scheduler = None
    if get_settings().scheduler_enabled:
        from server import build_scheduler

        scheduler = build_scheduler()
        scheduler.start()
        logger.info("Scheduler started", jobs=[job.id for job in scheduler.get_jobs()])
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    lifespan=lifespan,
    title="Storefront Settlement API",
    description="Cart pricing, checkout, payment verification, order lifecycle, and wallet ledger",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context for each request."""
    with storefront.domain_context():
        response = await call_next(request)
    return response


@app.exception_handler(ProteanException)
async def domain_error_handler(request: Request, exc: ProteanException):
    """Render domain errors as ``{"error": <type>, "messages": {...}}``."""
    status_code = status_code_for(exc)
    messages = messages_for(exc)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=type(exc).__name__, messages=messages)
    return JSONResponse(status_code=status_code, content={"error": type(exc).__name__, "messages": messages})


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from ordering.api import cart_router, order_router  # noqa: E402
from wallet.api import router as wallet_router  # noqa: E402

app.include_router(cart_router)
app.include_router(order_router)
app.include_router(wallet_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": storefront.name,
        }
    )
