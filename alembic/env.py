import logging
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from lms_gradebook.core.config import DATABASE_URL
from lms_gradebook.db.base import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

log = logging.getLogger("alembic.env")

x_args = context.get_x_argument(as_dictionary=True)
config.set_main_option("sqlalchemy.url", x_args.get("sqlalchemy_url", DATABASE_URL))

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        # batch mode so ALTERs work on SQLite
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()


log.info("Running migrations against %s", config.get_main_option("sqlalchemy.url").split("@")[-1])

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
