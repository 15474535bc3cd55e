import logging
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool

from auto_api.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    options = {
        "poolclass":     QueuePool,
        "pool_size":     settings.DATABASE_POOL_SIZE,
        "max_overflow":  settings.DATABASE_MAX_OVERFLOW,
        "pool_timeout":  settings.DATABASE_POOL_TIMEOUT,
        "pool_pre_ping": True,
        "echo":          settings.DATABASE_ECHO,
    }
    if settings.is_sqlite:
        # sessions are handed to FastAPI's threadpool
        options["connect_args"] = {"check_same_thread": False}
    return options


# ─── Engine / Sessions ─────────────────────────────────────────────────────────
engine = create_engine(settings.DATABASE_URL, **_engine_options())

# objects stay readable after commit; the services refresh explicitly
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base of the auto, modell, bild and auto_file tables."""


def get_db() -> Iterator[Session]:
    """
    One session per request. An exception escaping the endpoint rolls back
    whatever the session still holds.

        @router.get("/autos/{auto_id}")
        def get_auto(auto_id: int, db: Session = Depends(get_db)): ...
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_db_connection() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
    return True
