"""
Servicio de Movimientos de Stock
================================

Registro de ENTRADA / SALIDA / AJUSTE y consulta del kardex.

Producto.stock es la suma de sus movimientos desde la creación del producto:
- ENTRADA suma la cantidad
- SALIDA la resta, nunca por debajo de cero
- AJUSTE fija el stock al valor indicado (no es un delta)

El registro es el único camino que modifica el stock. Movimiento y stock se
escriben en la misma transacción: o quedan ambos o ninguno.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from ..domain.enums import TipoMovimiento
from ..domain.errors import DatosInvalidosError, NoEncontradoError, StockInsuficienteError
from ..domain.models import Movimiento, Producto
from ..infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def calcular_nuevo_stock(stock_actual: int, tipo: TipoMovimiento, cantidad: int) -> int:
    """Stock resultante de aplicar un movimiento. Lanza StockInsuficienteError si una SALIDA lo dejaría negativo."""
    if tipo == TipoMovimiento.ENTRADA:
        return stock_actual + cantidad
    if tipo == TipoMovimiento.SALIDA:
        if stock_actual < cantidad:
            raise StockInsuficienteError(f"Stock insuficiente. Stock actual: {stock_actual}")
        return stock_actual - cantidad
    return cantidad


@dataclass
class MovimientoRegistrado:
    movimiento: Movimiento
    stock_anterior: int
    stock_nuevo: int


class MovimientoService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @staticmethod
    def _validar(tipo, cantidad) -> Tuple[TipoMovimiento, int]:
        try:
            tipo = TipoMovimiento(tipo)
        except ValueError:
            raise DatosInvalidosError("Tipo inválido. Use: ENTRADA, SALIDA o AJUSTE")
        if isinstance(cantidad, bool) or not isinstance(cantidad, int) or cantidad <= 0:
            raise DatosInvalidosError("La cantidad debe ser un entero mayor a 0")
        return tipo, cantidad

    def registrar(
        self,
        producto_id: int,
        tipo: TipoMovimiento | str,
        cantidad: int,
        descripcion: Optional[str] = None,
    ) -> MovimientoRegistrado:
        """
        Registra un movimiento y actualiza el stock del producto.

        La fila del producto se lee con bloqueo y el stock se escribe con un
        UPDATE condicional (para SALIDA: ``WHERE stock >= cantidad``), de modo
        que dos SALIDAs simultáneas no pueden dejar el stock en negativo.
        """
        tipo, cantidad = self._validar(tipo, cantidad)

        with self.uow.transaction():
            producto = self.uow.productos.get_for_update(producto_id)
            if not producto:
                raise NoEncontradoError("Producto no encontrado")

            stock_anterior = producto.stock
            calcular_nuevo_stock(stock_anterior, tipo, cantidad)

            if not self.uow.productos.aplicar_movimiento(producto_id, tipo, cantidad):
                # Otra transacción dejó el stock por debajo de la cantidad pedida
                self.uow.db.refresh(producto)
                raise StockInsuficienteError(f"Stock insuficiente. Stock actual: {producto.stock}")

            movimiento = self.uow.movimientos.add(Movimiento(
                producto_id=producto_id,
                tipo=tipo,
                cantidad=cantidad,
                descripcion=descripcion,
            ))
            self.uow.db.flush()

            self.uow.db.refresh(producto, attribute_names=["stock"])
            stock_nuevo = producto.stock
            movimiento_id = movimiento.id

        logger.info(
            "Movimiento %s registrado: producto=%s %s %s (stock %s -> %s)",
            movimiento_id, producto_id, tipo.value, cantidad, stock_anterior, stock_nuevo,
        )
        return MovimientoRegistrado(movimiento=movimiento, stock_anterior=stock_anterior, stock_nuevo=stock_nuevo)

    def listar(
        self,
        producto_id: Optional[int] = None,
        tipo: Optional[TipoMovimiento] = None,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Movimiento]:
        return self.uow.movimientos.list(
            producto_id=producto_id,
            tipo=tipo,
            desde=desde,
            hasta=hasta,
            limit=limit or 100,
        )

    def obtener_kardex(self, producto_id: int) -> Tuple[Producto, List[Movimiento]]:
        """Producto (con su categoría) y todos sus movimientos, el más reciente primero."""
        producto = self.uow.productos.get(producto_id)
        if not producto:
            raise NoEncontradoError("Producto no encontrado")
        movimientos = self.uow.movimientos.list(producto_id=producto_id, limit=None)
        return producto, movimientos
