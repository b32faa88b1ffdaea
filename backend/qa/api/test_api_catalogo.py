"""
Tests de API - Categorías, proveedores y productos
"""
from inventario.domain.models import Categoria, Movimiento, Producto, Proveedor

from factories import crear_producto


class TestCategoriasAPI:
    def test_crear_y_listar_con_conteo(self, client, admin_headers, db, categoria):
        crear_producto(db, categoria, codigo="P1")
        r = client.post("/api/categorias", json={"nombre": "Limpieza"}, headers=admin_headers)
        assert r.status_code == 201
        assert r.json()["nombre"] == "Limpieza"

        r = client.get("/api/categorias", headers=admin_headers)
        assert r.status_code == 200
        conteos = {c["nombre"]: c["_count"]["productos"] for c in r.json()}
        assert conteos == {"Bebidas": 1, "Limpieza": 0}
        assert "createdAt" in r.json()[0]

    def test_nombre_duplicado(self, client, admin_headers, categoria):
        r = client.post("/api/categorias", json={"nombre": "Bebidas"}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "Ya existe una categoría con ese nombre"

    def test_detalle_con_productos(self, client, admin_headers, db, categoria):
        crear_producto(db, categoria, codigo="P1")
        r = client.get(f"/api/categorias/{categoria.id}", headers=admin_headers)
        assert r.status_code == 200
        assert [p["codigo"] for p in r.json()["productos"]] == ["P1"]

    def test_eliminar_con_productos_falla(self, client, admin_headers, db, categoria):
        crear_producto(db, categoria, codigo="P1")
        r = client.delete(f"/api/categorias/{categoria.id}", headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "No se puede eliminar: hay productos asociados"
        db.expire_all()
        assert db.get(Categoria, categoria.id) is not None
        assert db.query(Producto).count() == 1

    def test_eliminar_sin_productos(self, client, admin_headers, db, categoria):
        categoria_id = categoria.id
        r = client.delete(f"/api/categorias/{categoria_id}", headers=admin_headers)
        assert r.status_code == 200
        db.expire_all()
        assert db.get(Categoria, categoria_id) is None

    def test_update_con_nombre_nulo(self, client, admin_headers, categoria):
        r = client.put(f"/api/categorias/{categoria.id}", json={"nombre": None}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "El campo nombre no puede ser nulo"

    def test_nombre_obligatorio(self, client, admin_headers):
        r = client.post("/api/categorias", json={}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "El nombre es un dato obligatorio"

    def test_inexistente(self, client, admin_headers):
        r = client.put("/api/categorias/999", json={"nombre": "X"}, headers=admin_headers)
        assert r.status_code == 404

    def test_almacenero_solo_lectura(self, client, almacenero_headers, categoria):
        assert client.get("/api/categorias", headers=almacenero_headers).status_code == 200
        r = client.post("/api/categorias", json={"nombre": "Nueva"}, headers=almacenero_headers)
        assert r.status_code == 403
        assert r.json()["error"] == "Requiere permiso: CATEGORIA_CREAR"


class TestProveedoresAPI:
    def test_crear_y_actualizar(self, client, admin_headers):
        r = client.post("/api/proveedores", json={
            "nombre": "Comercial del Norte",
            "contacto": "Lucía Vega",
            "email": "Pedidos@ComNorte.com",
        }, headers=admin_headers)
        assert r.status_code == 201
        data = r.json()
        assert data["email"] == "pedidos@comnorte.com"
        assert data["activo"] is True

        r = client.put(f"/api/proveedores/{data['id']}", json={"activo": False}, headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["activo"] is False
        assert r.json()["nombre"] == "Comercial del Norte"

    def test_email_invalido(self, client, admin_headers):
        r = client.post("/api/proveedores", json={"nombre": "X", "email": "sin-arroba"}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "El email no es válido"

    def test_eliminar_con_productos_falla(self, client, admin_headers, db, categoria, proveedor):
        crear_producto(db, categoria, codigo="P1", proveedor=proveedor)
        r = client.delete(f"/api/proveedores/{proveedor.id}", headers=admin_headers)
        assert r.status_code == 400
        db.expire_all()
        assert db.get(Proveedor, proveedor.id) is not None

    def test_eliminar_sin_productos(self, client, admin_headers, db, proveedor):
        proveedor_id = proveedor.id
        r = client.delete(f"/api/proveedores/{proveedor_id}", headers=admin_headers)
        assert r.status_code == 200
        db.expire_all()
        assert db.get(Proveedor, proveedor_id) is None


def _payload_producto(categoria_id, **extra):
    data = {
        "codigo": "BEB001",
        "nombre": "Gaseosa 500ml",
        "precio": 2.5,
        "costo": 1.8,
        "stock": 10,
        "stockMinimo": 24,
        "categoriaId": categoria_id,
    }
    data.update(extra)
    return data


class TestProductosAPI:
    def test_crear_producto(self, client, admin_headers, categoria, proveedor):
        r = client.post("/api/productos", json=_payload_producto(categoria.id, proveedorId=proveedor.id), headers=admin_headers)
        assert r.status_code == 201
        data = r.json()
        assert data["stock"] == 10
        assert data["stockMinimo"] == 24
        assert data["stockBajo"] is True
        assert data["categoria"]["nombre"] == "Bebidas"
        assert data["proveedor"]["nombre"] == "Distribuidora Central"

    def test_valores_por_defecto(self, client, admin_headers, categoria):
        payload = _payload_producto(categoria.id)
        del payload["stock"], payload["stockMinimo"]
        data = client.post("/api/productos", json=payload, headers=admin_headers).json()
        assert data["stock"] == 0
        assert data["stockMinimo"] == 5
        assert data["activo"] is True

    def test_codigo_duplicado(self, client, admin_headers, db, categoria):
        r1 = client.post("/api/productos", json=_payload_producto(categoria.id), headers=admin_headers)
        r2 = client.post("/api/productos", json=_payload_producto(categoria.id, nombre="Otro"), headers=admin_headers)
        assert r1.status_code == 201
        assert r2.status_code == 400
        assert r2.json()["error"] == "Ya existe un producto con ese código"
        db.expire_all()
        productos = db.query(Producto).all()
        assert len(productos) == 1
        assert productos[0].nombre == "Gaseosa 500ml"

    def test_categoria_inexistente(self, client, admin_headers):
        r = client.post("/api/productos", json=_payload_producto(999), headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "Categoría o proveedor no encontrado"

    def test_precio_negativo(self, client, admin_headers, categoria):
        r = client.post("/api/productos", json=_payload_producto(categoria.id, precio=-1), headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "El precio debe ser mayor o igual a 0"

    def test_update_no_acepta_stock(self, client, admin_headers, db, producto):
        r = client.put(f"/api/productos/{producto.id}", json={"stock": 500}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "El stock solo puede modificarse registrando movimientos"
        db.expire_all()
        assert db.get(Producto, producto.id).stock == 10

    def test_update_parcial(self, client, admin_headers, producto):
        r = client.put(f"/api/productos/{producto.id}", json={"stockMinimo": 5, "precio": 3}, headers=admin_headers)
        assert r.status_code == 200
        data = r.json()
        assert data["stockMinimo"] == 5
        assert data["stockBajo"] is False
        assert data["codigo"] == "BEB001"

    def test_update_rechaza_nulos(self, client, admin_headers, db, producto):
        r = client.put(f"/api/productos/{producto.id}", json={"nombre": None}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "El campo nombre no puede ser nulo"

        r = client.put(f"/api/productos/{producto.id}", json={"stockMinimo": None}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["error"] == "El campo stockMinimo no puede ser nulo"

        db.expire_all()
        p = db.get(Producto, producto.id)
        assert (p.nombre, p.stock_minimo) == ("Producto BEB001", 24)

    def test_update_permite_quitar_proveedor(self, client, admin_headers, db, categoria, proveedor):
        p = crear_producto(db, categoria, codigo="LIM001", proveedor=proveedor)
        r = client.put(f"/api/productos/{p.id}", json={"proveedorId": None}, headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["proveedorId"] is None

    def test_filtros(self, client, admin_headers, db, categoria, proveedor):
        crear_producto(db, categoria, codigo="BAJO", stock=1, stock_minimo=5, proveedor=proveedor)
        crear_producto(db, categoria, codigo="OK", stock=50, stock_minimo=5)
        crear_producto(db, categoria, codigo="INACT", stock=50, stock_minimo=5, activo=False)

        def codigos(params):
            r = client.get("/api/productos", params=params, headers=admin_headers)
            assert r.status_code == 200
            return {p["codigo"] for p in r.json()}

        assert codigos({}) == {"BAJO", "OK", "INACT"}
        assert codigos({"stockBajo": "true"}) == {"BAJO"}
        assert codigos({"stockBajo": "false"}) == {"OK", "INACT"}
        assert codigos({"activo": "false"}) == {"INACT"}
        assert codigos({"proveedorId": proveedor.id}) == {"BAJO"}
        assert codigos({"buscar": "baj"}) == {"BAJO"}

    def test_detalle_con_ultimos_movimientos(self, client, admin_headers, producto):
        for _ in range(12):
            client.post("/api/movimientos", json={"productoId": producto.id, "tipo": "ENTRADA", "cantidad": 1}, headers=admin_headers)
        r = client.get(f"/api/productos/{producto.id}", headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["stock"] == 22
        assert len(r.json()["movimientos"]) == 10

    def test_eliminar_borra_sus_movimientos(self, client, admin_headers, db, producto):
        producto_id = producto.id
        client.post("/api/movimientos", json={"productoId": producto_id, "tipo": "ENTRADA", "cantidad": 5}, headers=admin_headers)
        r = client.delete(f"/api/productos/{producto_id}", headers=admin_headers)
        assert r.status_code == 200
        db.expire_all()
        assert db.get(Producto, producto_id) is None
        assert db.query(Movimiento).count() == 0

    def test_eliminar_inexistente(self, client, admin_headers):
        assert client.delete("/api/productos/999", headers=admin_headers).status_code == 404
