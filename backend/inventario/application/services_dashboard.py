"""
Servicio de Dashboard
=====================

Estadísticas del inventario para la pantalla principal:
- Conteos (productos activos, categorías, proveedores activos)
- Alertas de stock bajo (top 10, stock ascendente)
- Últimos 10 movimientos y productos por categoría
- Valorización: SUM(stock * costo) y SUM(stock * precio) sobre productos activos
- Historial diario (últimos 30 días)

Cada consulta corre en su propio hilo y con su propia sesión. Si el día de hoy
no tiene foto en el historial, el llamador recibe los valores a guardar y los
persiste fuera del request con guardar_snapshot().
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import func, text
from sqlalchemy.orm import Session, joinedload, sessionmaker

from ..domain.models import Categoria, Movimiento, Producto, Proveedor
from ..infrastructure.unit_of_work import UnitOfWork
from .dtos import (
    AlertasOut,
    CategoriaConteo,
    ConteoProductos,
    DashboardOut,
    HistorialOut,
    MovimientoOut,
    ProductoStockBajo,
    ResumenOut,
)

logger = logging.getLogger(__name__)

TOP_STOCK_BAJO = 10
ULTIMOS_MOVIMIENTOS = 10
DIAS_HISTORIAL = 30

SQL_VALORIZACION = text(
    "SELECT COALESCE(SUM(stock * costo), 0) AS valorizacion, "
    "COALESCE(SUM(stock * precio), 0) AS valor_venta "
    "FROM productos WHERE activo = :activo"
)


def calcular_rentabilidad(valorizacion: float, valor_venta: float) -> float:
    """Margen sobre el costo, en porcentaje. 0 si no hay inventario valorizado."""
    if valorizacion <= 0:
        return 0.0
    return (valor_venta - valorizacion) / valorizacion * 100


# ===== Consultas (una sesión cada una) =====

def _total_productos(db: Session) -> int:
    return db.query(func.count(Producto.id)).filter(Producto.activo.is_(True)).scalar() or 0

def _total_categorias(db: Session) -> int:
    return db.query(func.count(Categoria.id)).scalar() or 0

def _total_proveedores(db: Session) -> int:
    return db.query(func.count(Proveedor.id)).filter(Proveedor.activo.is_(True)).scalar() or 0

def _total_stock_bajo(db: Session) -> int:
    return (
        db.query(func.count(Producto.id))
        .filter(Producto.activo.is_(True), Producto.stock_bajo)
        .scalar()
        or 0
    )

def _productos_stock_bajo(db: Session) -> List[ProductoStockBajo]:
    rows = (
        db.query(Producto)
        .options(joinedload(Producto.categoria))
        .filter(Producto.activo.is_(True), Producto.stock_bajo)
        .order_by(Producto.stock.asc(), Producto.id)
        .limit(TOP_STOCK_BAJO)
        .all()
    )
    return [ProductoStockBajo.model_validate(p) for p in rows]

def _ultimos_movimientos(db: Session) -> List[MovimientoOut]:
    rows = (
        db.query(Movimiento)
        .options(joinedload(Movimiento.producto))
        .order_by(Movimiento.created_at.desc(), Movimiento.id.desc())
        .limit(ULTIMOS_MOVIMIENTOS)
        .all()
    )
    return [MovimientoOut.model_validate(m) for m in rows]

def _productos_por_categoria(db: Session) -> List[CategoriaConteo]:
    rows = (
        db.query(Categoria, func.count(Producto.id))
        .outerjoin(Producto, Producto.categoria_id == Categoria.id)
        .group_by(Categoria.id)
        .order_by(Categoria.nombre)
        .all()
    )
    return [
        CategoriaConteo(id=c.id, nombre=c.nombre, imagen_url=c.imagen_url, count=ConteoProductos(productos=n))
        for c, n in rows
    ]

def _historial(db: Session) -> List[HistorialOut]:
    return [HistorialOut.model_validate(h) for h in UnitOfWork(db).historial.ultimos(DIAS_HISTORIAL)]

def _finanzas(db: Session) -> Tuple[float, float]:
    row = db.execute(SQL_VALORIZACION, {"activo": True}).one()
    return float(row.valorizacion or 0), float(row.valor_venta or 0)


class DashboardService:
    def __init__(self, session_factory: sessionmaker, max_workers: int = 8):
        self.session_factory = session_factory
        self.max_workers = max_workers

    def _en_sesion(self, consulta: Callable[[Session], Any]) -> Any:
        db = self.session_factory()
        try:
            return consulta(db)
        finally:
            db.close()

    def obtener_estadisticas(self, hoy: Optional[date] = None) -> Tuple[DashboardOut, Optional[Dict[str, Any]]]:
        """
        Devuelve el dashboard y, si hoy no tiene fila en el historial, los
        valores de la foto diaria pendiente de guardar (None si ya existe).
        """
        hoy = hoy or date.today()
        consultas = {
            "total_productos": _total_productos,
            "total_categorias": _total_categorias,
            "total_proveedores": _total_proveedores,
            "total_stock_bajo": _total_stock_bajo,
            "stock_bajo": _productos_stock_bajo,
            "ultimos_movimientos": _ultimos_movimientos,
            "por_categoria": _productos_por_categoria,
            "historial": _historial,
            "finanzas": _finanzas,
        }
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futuros = {k: pool.submit(self._en_sesion, fn) for k, fn in consultas.items()}
            r = {k: f.result() for k, f in futuros.items()}

        valorizacion, valor_venta = r["finanzas"]
        margen = valor_venta - valorizacion
        rentabilidad = calcular_rentabilidad(valorizacion, valor_venta)

        dashboard = DashboardOut(
            resumen=ResumenOut(
                total_productos=r["total_productos"],
                total_categorias=r["total_categorias"],
                total_proveedores=r["total_proveedores"],
                productos_con_stock_bajo=r["total_stock_bajo"],
                valorizacion_inventario=valorizacion,
                valor_venta_potencial=valor_venta,
                margen_potencial=margen,
                rentabilidad=rentabilidad,
            ),
            alertas=AlertasOut(stock_bajo=r["stock_bajo"]),
            ultimos_movimientos=r["ultimos_movimientos"],
            productos_por_categoria=r["por_categoria"],
            historial=r["historial"],
        )

        snapshot = None
        if not any(h.fecha == hoy for h in r["historial"]):
            snapshot = {
                "fecha": hoy,
                "total_productos": r["total_productos"],
                "stock_bajo": r["total_stock_bajo"],
                "valorizacion": _a_decimal(valorizacion),
                "valor_venta": _a_decimal(valor_venta),
                "rentabilidad": _a_decimal(rentabilidad),
            }
        return dashboard, snapshot

    def guardar_snapshot(self, valores: Dict[str, Any]) -> None:
        """
        Upsert de la foto diaria en su propia sesión. Corre como tarea de fondo:
        un fallo se registra en el log y no se propaga.
        """
        valores = dict(valores)
        fecha = valores.pop("fecha")
        uow = UnitOfWork(self.session_factory())
        try:
            with uow.transaction():
                uow.historial.upsert(fecha, valores)
            logger.info("Historial del %s guardado", fecha.isoformat())
        except Exception:
            logger.exception("Error actualizando historial diario (%s)", fecha.isoformat())
        finally:
            uow.close()


def _a_decimal(valor: float) -> Decimal:
    return Decimal(str(round(valor, 2)))
