from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from configs import Config, db
from db.models import *  # noqa: F401,F403

config = context.config

# same resolution as the app: DATABASE_URL from .env, else the local sqlite file
db_url = Config.SQLALCHEMY_DATABASE_URI
config.set_main_option("sqlalchemy.url", db_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = db.metadata


def _configure_kw(url: str) -> dict:
    return dict(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        # sqlite cannot ALTER constraints in place
        render_as_batch=url.startswith("sqlite"),
    )


def run_migrations_offline() -> None:
    context.configure(
        url=db_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kw(db_url)
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
        context.configure(connection=connection, **_configure_kw(db_url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
