"""
Fixtures para tests de integración API.
Usa TestClient de FastAPI contra la app real, con la base del test
inyectada mediante overrides de dependencias.
"""
import pytest
from fastapi.testclient import TestClient

from inventario.main import app
from inventario.dependencies import get_db, get_session_factory

from factories import headers_para


@pytest.fixture
def client(session_factory):
    """Cliente HTTP sin autenticación, conectado a la base del test."""
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(db, admin):
    return headers_para(db, admin)


@pytest.fixture
def almacenero_headers(db, almacenero):
    return headers_para(db, almacenero)
