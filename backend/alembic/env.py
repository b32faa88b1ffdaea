from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
import os
import sys

# Ensure backend root is on sys.path so we can import inventario.*
BASE_DIR = os.path.dirname(os.path.abspath(__file__))  # backend/alembic
BACKEND_ROOT = os.path.dirname(BASE_DIR)               # backend/
if BACKEND_ROOT not in sys.path:
	sys.path.insert(0, BACKEND_ROOT)

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
# This line sets up loggers basically.
if config.config_file_name is not None:
	fileConfig(config.config_file_name)

# import target_metadata from inventario
from inventario.db import Base, _import_all_models  # type: ignore
from inventario.config import settings  # type: ignore

# set the sqlalchemy.url from settings
config.set_main_option("sqlalchemy.url", settings.database_url)

_import_all_models()
target_metadata = Base.metadata

def run_migrations_offline() -> None:
	url = config.get_main_option("sqlalchemy.url")
	context.configure(
		url=url,
		target_metadata=target_metadata,
		literal_binds=True,
		compare_type=True,
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
		context.configure(
			connection=connection,
			target_metadata=target_metadata,
			compare_type=True,
		)

		with context.begin_transaction():
			context.run_migrations()

if context.is_offline_mode():
	run_migrations_offline()
else:
	run_migrations_online()
