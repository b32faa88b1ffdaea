"""
Configuración global de pytest.

Cada test usa su propia base SQLite en archivo (tmp_path); la app se conecta
a ella mediante overrides de get_db y get_session_factory.
"""
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Agregar el directorio raíz (backend/) y qa/ al path para imports
qa_dir = Path(__file__).parent
root_dir = qa_dir.parent
sys.path.insert(0, str(root_dir))
sys.path.insert(0, str(qa_dir))

# Antes de importar la app: base, logs y clave de pruebas
_tmp = tempfile.mkdtemp(prefix="inventario_qa_")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_tmp}/arranque.db")
os.environ.setdefault("LOG_DIR", f"{_tmp}/logs")
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas-no-usar-en-produccion-0123456789")

from sqlalchemy.orm import sessionmaker

from inventario.db import build_engine, init_db
from inventario.domain.models import Categoria, Proveedor
from inventario.application.seed_inicial import PERMISOS_ALMACENERO, seed_permisos, seed_rol
from factories import crear_producto, crear_usuario


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path}/inventario_test.db")
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def roles(db):
    """Catálogo de permisos y roles ADMIN / ALMACENERO."""
    permisos = seed_permisos(db)
    admin = seed_rol(db, "ADMIN", "Administrador del sistema", permisos.values())
    almacenero = seed_rol(db, "ALMACENERO", "Almacén", [permisos[n] for n in PERMISOS_ALMACENERO])
    db.commit()
    return {"ADMIN": admin, "ALMACENERO": almacenero}


@pytest.fixture
def admin(db, roles):
    return crear_usuario(db, roles["ADMIN"], "admin@abasto.com", "Administrador")


@pytest.fixture
def almacenero(db, roles):
    return crear_usuario(db, roles["ALMACENERO"], "almacen@abasto.com", "Almacenero")


@pytest.fixture
def categoria(db):
    cat = Categoria(nombre="Bebidas", descripcion="Gaseosas y aguas")
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


@pytest.fixture
def proveedor(db):
    prov = Proveedor(nombre="Distribuidora Central", email="ventas@distcentral.com")
    db.add(prov)
    db.commit()
    db.refresh(prov)
    return prov


@pytest.fixture
def producto(db, categoria):
    """BEB001: stock 10, stock mínimo 24 (stock bajo)."""
    return crear_producto(db, categoria)
