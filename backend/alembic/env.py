"""Alembic environment for the SQL blob backend (STORAGE_BACKEND=sql). URL comes from DATABASE_URL."""
from logging.config import fileConfig

from dotenv import load_dotenv
from alembic import context

from whentomeet.config import settings
from whentomeet.db.base import Base
from whentomeet.db.session import make_engine
from whentomeet.db.tables import ALL_TABLE_NAMES
from whentomeet.models.kv_blob import KvBlob  # noqa: F401

load_dotenv()

_registered = set(Base.metadata.tables)
_expected = set(ALL_TABLE_NAMES)
assert _registered == _expected, (
    f"Model tables {_registered} must match whentomeet.db.tables.ALL_TABLE_NAMES {_expected}."
)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
# SQLite cannot ALTER most columns in place; batch mode rebuilds the table instead
_render_as_batch = settings.database_url.startswith("sqlite")


def run_migrations_offline() -> None:
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=_render_as_batch,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = make_engine(settings.database_url)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                render_as_batch=_render_as_batch,
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
