from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
import os
import sys

# backend/ en sys.path para importar inventario.*
BASE_DIR = os.path.dirname(os.path.abspath(__file__))  # backend/alembic
BACKEND_ROOT = os.path.dirname(BASE_DIR)               # backend/
if BACKEND_ROOT not in sys.path:
	sys.path.insert(0, BACKEND_ROOT)

config = context.config

if config.config_file_name is not None:
	fileConfig(config.config_file_name)

from inventario.db import Base, _import_all_models  # type: ignore
from inventario.config import settings  # type: ignore

_import_all_models()

# La URL sale de la configuración, no del .ini
config.set_main_option("sqlalchemy.url", settings.database_url)

target_metadata = Base.metadata

# SQLite no altera ni borra columnas con restricciones en sitio; en modo batch
# alembic copia la tabla, aplica el cambio y la renombra.

def run_migrations_offline() -> None:
	url = config.get_main_option("sqlalchemy.url")
	context.configure(
		url=url,
		target_metadata=target_metadata,
		literal_binds=True,
		compare_type=True,
		render_as_batch=settings.is_sqlite,
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
			render_as_batch=settings.is_sqlite,
		)

		with context.begin_transaction():
			context.run_migrations()

if context.is_offline_mode():
	run_migrations_offline()
else:
	run_migrations_online()
