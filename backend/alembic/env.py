from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from pacebeats_admin.core.config import settings
from pacebeats_admin.db import Base, build_store_url
# Register every table on Base.metadata
from pacebeats_admin.models import (  # noqa: F401
    gps_point,
    heart_rate,
    music_history,
    pace_interval,
    running_session,
    session_alert,
    user,
)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _url():
    return build_store_url(
        settings.supabase_db_url,
        settings.supabase_service_role_key,
        key_name="SUPABASE_SERVICE_ROLE_KEY",
    )


def run_migrations_offline() -> None:
    context.configure(
        url=_url().render_as_string(hide_password=False),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(_url(), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
