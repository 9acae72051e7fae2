from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from playtime_monitor.config import DATABASE_URL


def build_engine(url: str, **kwargs):
    if url.startswith("sqlite"):
        # SQLite only enforces ON DELETE CASCADE with foreign_keys enabled
        new_engine = create_engine(url, connect_args={"check_same_thread": False}, **kwargs)

        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return new_engine

    # pool_pre_ping=True → reconnect dropped connections
    # pool_recycle=3600 → recycle connections every hour
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=10,
        max_overflow=20,
        **kwargs,
    )


# Engine
engine = build_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Base class for all models
Base = declarative_base()


# Dependency - open/close a DB session per request
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
