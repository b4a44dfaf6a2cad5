import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import sessionmaker, declarative_base

from pacebeats_admin.core.config import settings
from pacebeats_admin.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

# SQLAlchemy Base class for models to inherit
Base = declarative_base()


def build_store_url(db_url: str | None, key: str | None, *, key_name: str) -> URL:
    """Combine the store endpoint and a credential into one connection URL.

    Logs which of the two values is present so a misconfigured deployment is
    easy to diagnose, then raises ``ConfigurationError`` if either is missing.
    """
    if not db_url or not key:
        logger.error("Missing database configuration")
        logger.error("  - SUPABASE_DB_URL: %s", "present" if db_url else "MISSING")
        logger.error("  - %s: %s", key_name, "present" if key else "MISSING")
        raise ConfigurationError(
            f"SUPABASE_DB_URL and {key_name} must both be set"
        )
    url = make_url(db_url)
    # Only network databases take a password; sqlite urls are used as-is
    if url.host:
        url = url.set(password=key)
    return url


def create_admin_engine(db_url: str | None, service_key: str | None) -> Engine:
    """Engine authenticated with the privileged service key."""
    url = build_store_url(db_url, service_key, key_name="SUPABASE_SERVICE_ROLE_KEY")
    logger.info("Admin engine initialized for %s", url.render_as_string(hide_password=True))
    return create_engine(
        url,
        pool_pre_ping=True,   # helps avoid stale connections
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    # Nothing survives a request: no autoflush, no expiry-driven reloads
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


@lru_cache(maxsize=4)
def _admin_session_factory(db_url: str | None, service_key: str | None) -> sessionmaker:
    return make_session_factory(create_admin_engine(db_url, service_key))


def get_admin_session_factory() -> sessionmaker:
    # Read settings on every call so a fixed configuration reuses its engine
    return _admin_session_factory(settings.supabase_db_url, settings.supabase_service_role_key)


# Dependency we will use in FastAPI routes
def get_db():
    db = get_admin_session_factory()()
    try:
        yield db
    finally:
        db.close()
