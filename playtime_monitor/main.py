from dotenv import load_dotenv
load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from playtime_monitor import config
from playtime_monitor.database import Base, SessionLocal, engine
from playtime_monitor.models import *  # register every model before create_all
from playtime_monitor.routers import admin, auth, children, playtime, users
from playtime_monitor.services.scheduler_service import SchedulerService
from playtime_monitor.services.user_service import ensure_admin

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# FastAPI APP
app = FastAPI(
    title="Steam Playtime Monitor",
    description="Checks children's Steam playtime against weekly limits and notifies parents",
    version="1.0.0"
)


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# DB initialisation
def init_db():
    logger.info("Creating DB tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("DB table creation completed.")

    db = SessionLocal()
    try:
        ensure_admin(db)
    finally:
        db.close()


@app.on_event("startup")
def on_startup():
    init_db()
    if config.SCHEDULER_ENABLED:
        SchedulerService.start()


@app.on_event("shutdown")
def on_shutdown():
    SchedulerService.stop()


# Routers (endpoint prefix: /api)
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/user", tags=["User"])
app.include_router(children.router, prefix="/api/children", tags=["Children"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(playtime.router, prefix="/api", tags=["Playtime"])


# Health checks
@app.get("/")
def root():
    return {"status": "ok", "message": "Backend is running."}


@app.get("/api/health")
def health():
    return {"status": "ok"}
