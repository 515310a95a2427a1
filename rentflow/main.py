import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from rentflow.core.config import settings
from rentflow.core.database import SessionLocal
from rentflow.core.errors import RentFlowError
from rentflow.core.events import build_event_bus
from rentflow.core.settings_store import LocalOverlayStore, SettingsStore
from rentflow.api.routes.ai import router as ai_router
from rentflow.api.routes.auth import router as auth_router
from rentflow.api.routes.data import router as data_router
from rentflow.api.routes.deposits import router as deposits_router
from rentflow.api.routes.documents import router as documents_router
from rentflow.api.routes.expenses import router as expenses_router
from rentflow.api.routes.notices import router as notices_router
from rentflow.api.routes.rent_entries import router as rent_entries_router
from rentflow.api.routes.reports import router as reports_router
from rentflow.api.routes.rollover import router as rollover_router
from rentflow.api.routes.settings import router as settings_router
from rentflow.api.routes.tenants import router as tenants_router
from rentflow.api.routes.whatsapp import router as whatsapp_router
from rentflow.api.routes.work_details import router as work_details_router
from rentflow.api.routes.zakat import router as zakat_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# 1) Create the app FIRST
app = FastAPI(title="RentFlow Backend")

# Process-wide settings store and tenant-update event bus
app.state.settings_store = SettingsStore(
    LocalOverlayStore(settings.LOCAL_SETTINGS_PATH, settings.LOCAL_SETTINGS_KEY),
    settings.SETTINGS_ROW_ID,
)
app.state.event_bus = build_event_bus()

# 2) Add CORS Middleware BEFORE routes
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 3) Map domain errors to JSON responses
@app.exception_handler(RentFlowError)
async def rentflow_error_handler(request: Request, exc: RentFlowError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "field": exc.field})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=502, content={"detail": f"Database error: {exc.__class__.__name__}", "field": None})


# 4) Include routers AFTER app is created
app.include_router(auth_router)
app.include_router(data_router)
app.include_router(tenants_router)
app.include_router(rent_entries_router)
app.include_router(expenses_router)
app.include_router(rollover_router)
app.include_router(deposits_router)
app.include_router(notices_router)
app.include_router(work_details_router)
app.include_router(zakat_router)
app.include_router(documents_router)
app.include_router(settings_router)
app.include_router(reports_router)
app.include_router(whatsapp_router)
app.include_router(ai_router)


# 5) Health check endpoints
@app.get("/health")
def health():
    return {"ok": True, "service": "rentflow"}


@app.get("/db-health")
def db_health():
    db = SessionLocal()
    try:
        db.execute(text("select 1"))
        return {"ok": True, "db": "connected"}
    finally:
        db.close()
