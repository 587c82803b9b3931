# keyrelay/infra/database.py

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from keyrelay import config
from keyrelay.models.base import Base

logger = logging.getLogger(__name__)

# =========================
# ENGINE CONFIGURATION
# =========================


def build_engine(url: str = None, **kwargs):
    """Create an engine for ``url`` with pool settings suited to its dialect."""
    url = url or config.DATABASE_URL

    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)  # Check connections before using them
        kwargs.setdefault("pool_size", 5)
        kwargs.setdefault("max_overflow", 10)
        kwargs.setdefault("pool_recycle", 3600)

    return create_engine(url, echo=False, **kwargs)


engine = build_engine()

# =========================
# SESSION CONFIGURATION
# =========================

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# =========================
# DATABASE FUNCTIONS
# =========================


def get_db():
    """Per-request session; closed once the response has been sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables for the registered models."""
    # Importing the models registers them with Base
    from keyrelay.models import message, user  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ready")


def drop_db(bind=None):
    from keyrelay.models import message, user  # noqa: F401

    Base.metadata.drop_all(bind=bind or engine)
    logger.warning("Database tables dropped")


def test_connection(bind=None) -> bool:
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except Exception:
        logger.exception("Database connection failed")
        return False
