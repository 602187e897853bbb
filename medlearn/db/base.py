"""
Database engine, session factory and the declarative base.
"""
from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from medlearn.core.config import settings


def engine_options(database_url: str, env: str) -> Dict[str, Any]:
    """
    Pool and driver options for ``create_engine``.

    SQLite is used for local runs and tests and is shared across FastAPI's
    worker threads. Production sits behind an external connection pooler,
    so SQLAlchemy keeps no connections of its own there.
    """
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    if env == "production":
        return {
            "poolclass": NullPool,
            "pool_pre_ping": True,
            "connect_args": {"options": "-c statement_timeout=30000"},  # 30s
        }
    return {"pool_size": 5, "max_overflow": 0, "pool_pre_ping": True, "pool_recycle": 3600}


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL, settings.ENV))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a session for one request and always close it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
