"""
Tests de API - Roles, permisos y usuarios
"""
import pytest

from inventario.application import services_roles
from inventario.domain.errors import ConflictoError
from inventario.domain.models import Rol, Usuario

from factories import PASSWORD, crear_usuario


def _permisos_por_nombre(client, headers):
    r = client.get("/api/permisos", headers=headers)
    assert r.status_code == 200
    return {p["nombre"]: p["id"] for p in r.json()}


class TestPermisosAPI:
    def test_catalogo_ordenado(self, client, admin_headers):
        nombres = list(_permisos_por_nombre(client, admin_headers))
        assert nombres == sorted(nombres)
        assert "MOVIMIENTO_CREAR" in nombres

    def test_solo_admin(self, client, almacenero_headers):
        r = client.get("/api/permisos", headers=almacenero_headers)
        assert r.status_code == 403
        assert r.json()["error"] == "No tienes permisos para realizar esta acción."


class TestRolesAPI:
    def test_crear_rol_en_mayusculas(self, client, admin_headers):
        permisos = _permisos_por_nombre(client, admin_headers)
        r = client.post("/api/roles", json={
            "nombre": "cajero",
            "descripcion": "Registra salidas",
            "permisos": [permisos["PRODUCTO_VER"], permisos["MOVIMIENTO_CREAR"]],
        }, headers=admin_headers)
        assert r.status_code == 201
        data = r.json()
        assert data["nombre"] == "CAJERO"
        assert {p["nombre"] for p in data["permisos"]} == {"PRODUCTO_VER", "MOVIMIENTO_CREAR"}
        assert data["_count"] == {"usuarios": 0}

    def test_nombre_duplicado(self, client, admin_headers):
        r = client.post("/api/roles", json={"nombre": "almacenero"}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "Ya existe un rol con ese nombre"

    def test_permiso_inexistente(self, client, admin_headers):
        r = client.post("/api/roles", json={"nombre": "CAJERO", "permisos": [9999]}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "Permisos no encontrados: 9999"

    def test_reemplaza_conjunto_de_permisos(self, client, admin_headers, roles):
        permisos = _permisos_por_nombre(client, admin_headers)
        rol_id = roles["ALMACENERO"].id
        r = client.put(f"/api/roles/{rol_id}", json={"permisos": [permisos["DASHBOARD_VER"]]}, headers=admin_headers)
        assert r.status_code == 200
        assert [p["nombre"] for p in r.json()["permisos"]] == ["DASHBOARD_VER"]
        assert r.json()["nombre"] == "ALMACENERO"

    def test_no_renombrar_admin(self, client, admin_headers, roles):
        r = client.put(f"/api/roles/{roles['ADMIN'].id}", json={"nombre": "JEFE"}, headers=admin_headers)
        assert r.status_code == 400

    def test_listar_con_conteo_de_usuarios(self, client, admin_headers, almacenero):
        r = client.get("/api/roles", headers=admin_headers)
        conteos = {rol["nombre"]: rol["_count"]["usuarios"] for rol in r.json()}
        assert conteos == {"ADMIN": 1, "ALMACENERO": 1}

    def test_rol_con_usuarios_no_se_elimina(self, client, admin_headers, db, almacenero, roles):
        r = client.delete(f"/api/roles/{roles['ALMACENERO'].id}", headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "No se puede eliminar un rol que tiene usuarios asignados"
        db.expire_all()
        assert db.get(Rol, roles["ALMACENERO"].id) is not None

    def test_eliminar_rol_libre(self, client, admin_headers, db, roles):
        rol_id = roles["ALMACENERO"].id
        r = client.delete(f"/api/roles/{rol_id}", headers=admin_headers)
        assert r.status_code == 200
        db.expire_all()
        assert db.get(Rol, rol_id) is None

    def test_rol_admin_no_se_elimina(self, db, roles):
        with pytest.raises(ConflictoError) as exc:
            services_roles.eliminar_rol(db, roles["ADMIN"].id)
        assert exc.value.message == "No se puede eliminar el rol de Administrador"

    def test_almacenero_sin_acceso(self, client, almacenero_headers):
        assert client.get("/api/roles", headers=almacenero_headers).status_code == 403


class TestUsuariosAPI:
    def test_crear_usuario_sin_exponer_password(self, client, admin_headers, roles):
        r = client.post("/api/usuarios", json={
            "nombre": "Carla Ríos",
            "email": "Carla@Abasto.com",
            "password": "clave123",
            "rolId": roles["ALMACENERO"].id,
        }, headers=admin_headers)
        assert r.status_code == 201
        data = r.json()
        assert data["email"] == "carla@abasto.com"
        assert data["rol"]["nombre"] == "ALMACENERO"
        assert "password" not in data

        r = client.post("/api/auth/login", json={"email": "carla@abasto.com", "password": "clave123"})
        assert r.status_code == 200

    def test_email_duplicado(self, client, admin_headers, admin, roles):
        r = client.post("/api/usuarios", json={
            "nombre": "Otro Admin", "email": admin.email, "password": "clave123", "rolId": roles["ADMIN"].id,
        }, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "El email ya está registrado"

    def test_rol_inexistente(self, client, admin_headers):
        r = client.post("/api/usuarios", json={
            "nombre": "Sin Rol", "email": "sinrol@abasto.com", "password": "clave123", "rolId": 999,
        }, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "Rol no encontrado"

    def test_password_corta(self, client, admin_headers, roles):
        r = client.post("/api/usuarios", json={
            "nombre": "Corto", "email": "corto@abasto.com", "password": "123", "rolId": roles["ADMIN"].id,
        }, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "La contraseña debe tener al menos 6 caracteres"

    def test_cambiar_password(self, client, admin_headers, almacenero):
        r = client.put(f"/api/usuarios/{almacenero.id}", json={"password": "nueva-clave"}, headers=admin_headers)
        assert r.status_code == 200
        def login(pwd):
            return client.post("/api/auth/login", json={"email": almacenero.email, "password": pwd})

        assert login("nueva-clave").status_code == 200
        assert login(PASSWORD).status_code == 401

    def test_no_eliminarse_a_si_mismo(self, client, admin_headers, db, admin):
        r = client.delete(f"/api/usuarios/{admin.id}", headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "No puedes eliminar tu propio usuario"
        db.expire_all()
        assert db.get(Usuario, admin.id) is not None

    def test_eliminar_otro_usuario(self, client, admin_headers, db, roles):
        otro = crear_usuario(db, roles["ALMACENERO"], "temporal@abasto.com")
        otro_id = otro.id
        r = client.delete(f"/api/usuarios/{otro_id}", headers=admin_headers)
        assert r.status_code == 200
        db.expire_all()
        assert db.get(Usuario, otro_id) is None

    def test_listar_requiere_permiso(self, client, almacenero_headers):
        r = client.get("/api/usuarios", headers=almacenero_headers)
        assert r.status_code == 403
        assert r.json()["error"] == "Requiere permiso: USUARIO_VER"
