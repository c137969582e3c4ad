"""Engine, session factory and declarative base.

Tables are created from app.models at startup (Base.metadata.create_all).
"""
from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import get_settings

settings = get_settings()

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    connect_args=_connect_args,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests and local dev)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
