"""
Tests de API - Dashboard
"""
from datetime import date

from inventario.domain.models import Historial

from factories import crear_producto


class TestDashboardAPI:
    def test_estructura_de_respuesta(self, client, almacenero_headers, db, categoria):
        crear_producto(db, categoria, codigo="A1", stock=10, stock_minimo=20, costo="2.00", precio="3.00")
        r = client.get("/api/dashboard", headers=almacenero_headers)
        assert r.status_code == 200
        data = r.json()
        assert set(data) == {"resumen", "alertas", "ultimosMovimientos", "productosPorCategoria", "historial"}
        resumen = data["resumen"]
        assert resumen["totalProductos"] == 1
        assert resumen["totalCategorias"] == 1
        assert resumen["productosConStockBajo"] == 1
        assert resumen["valorizacionInventario"] == 20.0
        assert resumen["valorVentaPotencial"] == 30.0
        assert resumen["margenPotencial"] == 10.0
        assert resumen["rentabilidad"] == 50.0
        assert data["alertas"]["stockBajo"][0]["categoria"] == {"nombre": "Bebidas"}
        assert data["productosPorCategoria"][0]["_count"] == {"productos": 1}

    def test_guarda_foto_diaria_despues_de_responder(self, client, admin_headers, db, categoria):
        crear_producto(db, categoria, codigo="A1", stock=10, stock_minimo=20, costo="2.00", precio="3.00")
        assert client.get("/api/dashboard", headers=admin_headers).status_code == 200

        db.expire_all()
        fila = db.query(Historial).filter(Historial.fecha == date.today()).one()
        assert fila.total_productos == 1
        assert fila.stock_bajo == 1

        # la segunda consulta del día ya incluye la foto y no duplica
        r = client.get("/api/dashboard", headers=admin_headers)
        assert [h["fecha"] for h in r.json()["historial"]] == [date.today().isoformat()]
        assert db.query(Historial).count() == 1

    def test_requiere_autenticacion(self, client):
        r = client.get("/api/dashboard")
        assert r.status_code == 401
        assert "error" in r.json()
