"""
Duofu Intake Bot — FastAPI Application Entry Point

Aggregates the LINE webhook and operator routers, configures middleware,
and initializes the intake ledger on startup.
"""
import os
import time
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from intakebot.config import get_settings
from intakebot.database import SessionLocal, init_db
from intakebot.routes import webhook_router, admin_router
from intakebot.services.conversation_service import get_conversation_service
from intakebot.utils.logger import log

settings = get_settings()

# ─── Application Instance ───────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "LINE chatbot for Duofu senior courses and accessible transport. "
        "Routes chat events to guided intake flows (course enrollment, shuttle ride, "
        "vehicle rental) or to an AI assistant, with human handoff."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# ─── Startup ─────────────────────────────────────────────────────────
BOOT_TIME = time.time()


@app.on_event("startup")
def on_startup():
    """Initialize the ledger tables and log boot info."""
    init_db()

    os.makedirs(settings.LOG_DIR, exist_ok=True)

    boot_msg = (
        f"\n{'='*60}\n"
        f"  {settings.APP_NAME} v{settings.APP_VERSION}\n"
        f"  TIME: {datetime.now().isoformat()}\n"
        f"  LINE TOKEN: {'[OK] Loaded' if settings.LINE_CHANNEL_ACCESS_TOKEN else '[!] Missing'}\n"
        f"  LINE SECRET: {'[OK] Loaded' if settings.LINE_CHANNEL_SECRET else '[!] Missing'}\n"
        f"  GEMINI KEY: {'[OK] Loaded' if settings.GEMINI_API_KEY else '[!] Missing'}\n"
        f"  LEDGER DB: {settings.DATABASE_URL}\n"
        f"  DEBUG: {settings.DEBUG}\n"
        f"{'='*60}"
    )
    log("BOOT", boot_msg, filename="server.log")


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
    """Log every API and webhook request with timing."""
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 1)

    if request.url.path.startswith(("/api", "/webhook")):
        log("HTTP", f"{request.method} {request.url.path} -> {response.status_code} ({duration}ms)")

    return response


# ─── Routers ─────────────────────────────────────────────────────────
app.include_router(webhook_router)
app.include_router(admin_router)


@app.get("/health", tags=["Health"])
def deep_health():
    """Detailed health check including dependency statuses."""
    db_ok = False
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db_ok = True
        db.close()
    except Exception as e:
        log("HEALTH", f"Ledger DB check failed: {e}")

    return {
        "status": "healthy" if db_ok else "degraded",
        "ledger_db": "connected" if db_ok else "disconnected",
        "line_channel": "configured" if settings.LINE_CHANNEL_SECRET and settings.LINE_CHANNEL_ACCESS_TOKEN else "unconfigured",
        "ai_assistant": "available" if settings.GEMINI_API_KEY else "unavailable",
        "active_sessions": len(get_conversation_service().store),
        "uptime_seconds": round(time.time() - BOOT_TIME, 1),
        "version": settings.APP_VERSION,
    }
