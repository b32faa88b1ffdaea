"""
Tests de API - Subida de imágenes

Las funciones del SDK (cloudinary.uploader.upload / destroy) se reemplazan
con monkeypatch: no sale ninguna petición a internet.
"""
import io

import cloudinary.uploader
import pytest
from cloudinary.exceptions import Error as CloudinaryError
from PIL import Image

from inventario.api.routers.upload import get_image_host
from inventario.config import settings
from inventario.infrastructure.image_host import CloudinaryClient
from inventario.main import app


def _png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


def _subir(client, headers, archivo=("gaseosa.png", None, "image/png")):
    nombre, contenido, tipo = archivo
    return client.post(
        "/api/upload/imagen",
        files={"imagen": (nombre, contenido if contenido is not None else _png(), tipo)},
        headers=headers,
    )


@pytest.fixture
def llamadas(monkeypatch):
    """Registra las llamadas al SDK y responde como Cloudinary."""
    registro = []

    def fake_upload(file, **options):
        registro.append(("upload", file.read(), options))
        return {
            "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/inventario/productos/abc.png",
            "public_id": "inventario/productos/abc",
        }

    def fake_destroy(public_id, **options):
        registro.append(("destroy", public_id, options))
        return {"result": "ok"}

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    monkeypatch.setattr(cloudinary.uploader, "destroy", fake_destroy)
    return registro


@pytest.fixture
def host(client):
    cliente = CloudinaryClient("demo", "clave", "secreto")
    app.dependency_overrides[get_image_host] = lambda: cliente
    return cliente


class TestSubirImagen:
    def test_subida_valida(self, client, admin_headers, host, llamadas):
        contenido = _png()
        r = _subir(client, admin_headers, ("gaseosa.png", contenido, "image/png"))
        assert r.status_code == 200
        assert r.json() == {
            "url": "https://res.cloudinary.com/demo/image/upload/v1/inventario/productos/abc.png",
            "public_id": "inventario/productos/abc",
        }
        assert len(llamadas) == 1
        accion, enviado, options = llamadas[0]
        assert accion == "upload"
        assert enviado == contenido
        assert options["folder"] == "inventario/productos"
        assert options["resource_type"] == "image"
        assert (options["cloud_name"], options["api_key"], options["api_secret"]) == ("demo", "clave", "secreto")

    def test_sin_archivo(self, client, admin_headers, host, llamadas):
        r = client.post("/api/upload/imagen", headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "No se proporcionó ninguna imagen"
        assert llamadas == []

    def test_no_es_imagen(self, client, admin_headers, host, llamadas):
        r = _subir(client, admin_headers, ("lista.txt", b"hola", "text/plain"))
        assert r.status_code == 400
        assert r.json()["error"] == "Solo se permiten archivos de imagen"
        assert llamadas == []

    def test_contenido_corrupto(self, client, admin_headers, host, llamadas):
        r = _subir(client, admin_headers, ("falsa.png", b"no soy un png", "image/png"))
        assert r.status_code == 400
        assert r.json()["error"].startswith("Archivo de imagen inválido")
        assert llamadas == []

    def test_archivo_demasiado_grande(self, client, admin_headers, host, llamadas, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_size_mb", 0)
        r = _subir(client, admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "Archivo demasiado grande. Máximo: 0MB"
        assert llamadas == []

    def test_error_del_host(self, client, admin_headers, host, monkeypatch):
        def falla(file, **options):
            raise CloudinaryError("Invalid Signature")

        monkeypatch.setattr(cloudinary.uploader, "upload", falla)
        r = _subir(client, admin_headers)
        assert r.status_code == 500
        assert r.json() == {"error": "Error del servicio de imágenes: Invalid Signature"}

    def test_host_sin_configurar(self, client, admin_headers, llamadas):
        app.dependency_overrides[get_image_host] = lambda: CloudinaryClient(None, None, None)
        r = _subir(client, admin_headers)
        assert r.status_code == 500
        assert r.json()["error"] == "El servicio de imágenes no está configurado"
        assert llamadas == []

    def test_requiere_autenticacion(self, client, host, llamadas):
        r = _subir(client, {})
        assert r.status_code == 401
        assert llamadas == []


class TestEliminarImagen:
    def test_eliminar(self, client, admin_headers, host, llamadas):
        r = client.request(
            "DELETE", "/api/upload/imagen",
            json={"public_id": "inventario/productos/abc"},
            headers=admin_headers,
        )
        assert r.status_code == 200
        assert r.json() == {"message": "Imagen eliminada exitosamente"}
        assert llamadas[0][:2] == ("destroy", "inventario/productos/abc")

    def test_sin_public_id(self, client, admin_headers, host, llamadas):
        r = client.request("DELETE", "/api/upload/imagen", json={}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "Se requiere public_id"
        assert llamadas == []

    def test_error_del_host(self, client, admin_headers, host, monkeypatch):
        def falla(public_id, **options):
            raise CloudinaryError("Resource not found")

        monkeypatch.setattr(cloudinary.uploader, "destroy", falla)
        r = client.request("DELETE", "/api/upload/imagen", json={"public_id": "x"}, headers=admin_headers)
        assert r.status_code == 500
        assert r.json() == {"error": "Error del servicio de imágenes: Resource not found"}
