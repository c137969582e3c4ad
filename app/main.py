"""StayQuote FastAPI application."""
# Load .env before any app code that might read config
from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.database import Base, engine
# Import models so Base.metadata has all tables before create_all (schema source of truth)
from app.models import (  # noqa: F401
    Property, PropertyCustomPrice, PropertyBlockedDate, Reservation, Holiday, AuditLog,
)
from app.routers import properties, price_calendar, quotes, reservations, holidays, audit_logs

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(properties.router)
app.include_router(price_calendar.router)
app.include_router(quotes.router)
app.include_router(reservations.router)
app.include_router(holidays.router)
app.include_router(audit_logs.router)

_scheduler = None


def _create_tables_and_seed() -> None:
    Base.metadata.create_all(bind=engine)
    from app.database import SessionLocal
    from app.seed import seed_holidays
    db = SessionLocal()
    try:
        seed_holidays(db, settings.default_holiday_region)
    finally:
        db.close()


@app.on_event("startup")
def startup():
    global _scheduler
    try:
        _create_tables_and_seed()
    except Exception as e:
        logger.warning("Database startup failed (tables/seed skipped). Check DATABASE_URL and network. Error: %s", e)

    if settings.reservation_expiry_enabled:
        try:
            from apscheduler.schedulers.background import BackgroundScheduler
            from app.services.reservation_expiry import run_pending_reservation_expiry_job
            _scheduler = BackgroundScheduler()
            _scheduler.add_job(run_pending_reservation_expiry_job, "interval", hours=1)
            _scheduler.start()
            logger.info("Scheduler started: pending reservation expiry every hour")
        except Exception as e:
            logger.warning("Scheduler not started: %s", e)


@app.on_event("shutdown")
def shutdown():
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)


@app.get("/")
def root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.post("/db-setup")
def db_setup():
    """Dev/demo only: create tables and seed holidays if DB is now available."""
    from fastapi.responses import JSONResponse
    try:
        _create_tables_and_seed()
        return {"status": "ok", "message": "Tables created and holidays seeded."}
    except Exception as e:
        logger.exception("db-setup failed")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "message": str(e)},
        )
