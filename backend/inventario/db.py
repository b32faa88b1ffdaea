import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings


def _sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str):
    """Crea el engine. En SQLite: conexiones compartidas entre hilos y claves foráneas activas."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False, future=True, pool_pre_ping=True)
    if database_url.startswith("sqlite:///./"):
        os.makedirs("./data", exist_ok=True)
    sqlite_engine = create_engine(database_url, echo=False, future=True, connect_args={"check_same_thread": False})
    event.listen(sqlite_engine, "connect", _sqlite_foreign_keys)
    return sqlite_engine


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def _import_all_models():
    """Importa todos los modelos para que Base.metadata los registre."""
    from .domain import models  # noqa: F401 - Categoria, Proveedor, Producto, Movimiento, Usuario, Rol, Permiso, Historial


def init_db(bind=None):
    """Crear tablas si no existen (arranque normal)."""
    _import_all_models()
    Base.metadata.create_all(bind=bind or engine)


def recreate_schema_from_models(bind=None):
    """Elimina todas las tablas y las recrea desde los modelos."""
    _import_all_models()
    Base.metadata.drop_all(bind=bind or engine)
    Base.metadata.create_all(bind=bind or engine)
