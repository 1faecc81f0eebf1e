import importlib.util
import logging
from urllib.parse import urlparse

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, get_settings


class Base(DeclarativeBase):
    pass


settings = get_settings()
logger = logging.getLogger(__name__)

# Floors for the PostgreSQL pool; every wager holds a connection for its whole transition.
MIN_POOL_SIZE = 5
MIN_POOL_TIMEOUT = 8


def _resolve_database_url(database_url: str) -> str:
    if not database_url.startswith("postgresql://"):
        return database_url
    if importlib.util.find_spec("psycopg2") is None and importlib.util.find_spec("psycopg") is not None:
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return database_url


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:")


def engine_options(database_url: str, config: Settings) -> dict:
    """Keyword arguments for ``create_engine`` on the given backend."""
    scheme = urlparse(database_url).scheme
    if scheme.startswith("sqlite"):
        # Sync endpoints and deposit confirmations run on worker threads.
        options = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(database_url):
            # One shared connection, otherwise each thread sees an empty database.
            options["poolclass"] = StaticPool
        return options
    if not scheme.startswith("postgresql"):
        return {}

    pool_size = max(MIN_POOL_SIZE, int(config.db_pool_size))
    max_overflow = max(MIN_POOL_SIZE, int(config.db_max_overflow))
    pool_timeout = max(MIN_POOL_TIMEOUT, int(config.db_pool_timeout))
    if (pool_size, max_overflow, pool_timeout) != (config.db_pool_size, config.db_max_overflow, config.db_pool_timeout):
        logger.warning(
            "Raised DB pool settings to pool_size=%s max_overflow=%s pool_timeout=%s",
            pool_size,
            max_overflow,
            pool_timeout,
        )

    connect_args = {
        "keepalives": 1,
        "keepalives_idle": 30,
        "keepalives_interval": 10,
        "keepalives_count": 5,
    }
    if urlparse(database_url).hostname not in {"localhost", "127.0.0.1", "db"}:
        connect_args["sslmode"] = "require"

    return {
        "connect_args": connect_args,
        "pool_pre_ping": config.db_pool_pre_ping,
        "pool_recycle": config.db_pool_recycle,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_timeout": pool_timeout,
        "pool_use_lifo": True,
    }


database_url = _resolve_database_url(str(settings.database_url))
engine = create_engine(database_url, **engine_options(database_url, settings))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
