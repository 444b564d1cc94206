"""
Mamata Nepal Payments — FastAPI Application Entry Point

Aggregates all routers, configures middleware, serves the static frontend
build, and validates gateway configuration on startup.
"""
import logging
import time
from datetime import datetime
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from mamata.config import get_esewa_config, get_settings
from mamata.exceptions import ConfigurationError
from mamata.logging_config import configure_logging
from mamata.routes import payment_router, esewa_router, checkout_router, pages_router
from mamata.schemas.schemas import HealthResponse
from mamata.services.idempotency_service import get_idempotency_service

settings = get_settings()
logger = logging.getLogger("mamata.main")

# ─── Application Instance ───────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Payment API for the Mamata Nepal shop: signed eSewa payment initiation, "
        "gateway callback verification, and the browser hand-off to the eSewa form."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# ─── Startup ─────────────────────────────────────────────────────────
BOOT_TIME = time.time()


@app.on_event("startup")
def on_startup():
    """Validate gateway config, prepare the idempotency store, log boot info."""
    configure_logging(settings)

    try:
        esewa = get_esewa_config()
    except ConfigurationError as exc:
        logger.critical("Refusing to start: %s", exc.message)
        raise

    store = get_idempotency_service()
    if store is not None:
        store.purge_expired()

    logger.info(
        "\n%s\n  %s v%s\n  TIME: %s\n  ESEWA MERCHANT: %s\n  PAYMENT URL: %s\n"
        "  CALLBACKS: %s\n  IDEMPOTENCY: %s\n  DEBUG: %s\n%s",
        "=" * 60,
        settings.APP_NAME, settings.APP_VERSION,
        datetime.now().isoformat(),
        esewa.merchant_code,
        esewa.payment_url,
        settings.site_origin,
        f"{settings.IDEMPOTENCY_WINDOW_SECONDS}s" if store else "disabled",
        settings.DEBUG,
        "=" * 60,
    )


# ─── Middleware ──────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with timing."""
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 1)

    if request.url.path.startswith(("/api", "/.netlify", "/checkout")):
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration)

    return response


# ─── API Routers ─────────────────────────────────────────────────────
app.include_router(payment_router)
app.include_router(esewa_router)
app.include_router(checkout_router)
app.include_router(pages_router)


@app.get("/health", tags=["Health"], response_model=HealthResponse)
def deep_health():
    """Detailed health check including dependency statuses."""
    from mamata.database import SessionLocal
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    try:
        get_esewa_config()
        esewa_ok = True
    except ConfigurationError:
        esewa_ok = False

    db_ok = False
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        logger.warning("Health check could not reach the database")

    return HealthResponse(
        status="healthy" if esewa_ok and db_ok else "degraded",
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        esewa="configured" if esewa_ok else "missing",
        database="connected" if db_ok else "disconnected",
        uptime_seconds=round(time.time() - BOOT_TIME, 1),
    )


# ─── Serve Frontend (Static Files) ──────────────────────────────────
FRONTEND_DIR = Path(__file__).resolve().parent.parent.parent / "frontend" / "dist"

if FRONTEND_DIR.exists():
    # Mounted last: API routes and result pages take precedence.
    app.mount("/", StaticFiles(directory=str(FRONTEND_DIR), html=True), name="frontend")
