"""
Servicios de Productos
======================
CRUD del catálogo. El stock se fija al crear el producto; después solo lo
modifica el registro de movimientos (ver services_movimientos).
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ..domain.errors import ConflictoError, DatosInvalidosError, NoEncontradoError
from ..domain.models import Categoria, Movimiento, Producto, Proveedor
from ..infrastructure.unit_of_work import UnitOfWork
from .dtos import ProductoIn, ProductoUpdate
from .services import commit_o_error

logger = logging.getLogger(__name__)

MSG_CODIGO_DUPLICADO = "Ya existe un producto con ese código"
MSG_REFERENCIA = "Categoría o proveedor no encontrado"
ULTIMOS_MOVIMIENTOS = 10


def listar_productos(
    db: Session,
    categoria_id: Optional[int] = None,
    proveedor_id: Optional[int] = None,
    activo: Optional[bool] = None,
    buscar: Optional[str] = None,
    stock_bajo: Optional[bool] = None,
) -> List[Producto]:
    q = db.query(Producto).options(joinedload(Producto.categoria), joinedload(Producto.proveedor))
    if categoria_id:
        q = q.filter(Producto.categoria_id == categoria_id)
    if proveedor_id:
        q = q.filter(Producto.proveedor_id == proveedor_id)
    if activo is not None:
        q = q.filter(Producto.activo == activo)
    if buscar:
        patron = f"%{buscar.strip()}%"
        q = q.filter(or_(
            Producto.nombre.ilike(patron),
            Producto.codigo.ilike(patron),
            Producto.descripcion.ilike(patron),
        ))
    if stock_bajo is not None:
        q = q.filter(Producto.stock_bajo if stock_bajo else ~Producto.stock_bajo)
    return q.order_by(Producto.nombre).all()


def obtener_producto(db: Session, producto_id: int) -> Tuple[Producto, List[Movimiento]]:
    """Producto con categoría, proveedor y sus últimos movimientos."""
    producto = (
        db.query(Producto)
        .options(joinedload(Producto.categoria), joinedload(Producto.proveedor))
        .filter(Producto.id == producto_id)
        .first()
    )
    if not producto:
        raise NoEncontradoError("Producto no encontrado")
    movimientos = UnitOfWork(db).movimientos.list(producto_id=producto_id, limit=ULTIMOS_MOVIMIENTOS)
    return producto, movimientos


def _validar_referencias(db: Session, categoria_id: Optional[int], proveedor_id: Optional[int]) -> None:
    if categoria_id is not None and db.get(Categoria, categoria_id) is None:
        raise DatosInvalidosError(MSG_REFERENCIA)
    if proveedor_id is not None and db.get(Proveedor, proveedor_id) is None:
        raise DatosInvalidosError(MSG_REFERENCIA)


def crear_producto(db: Session, payload: ProductoIn) -> Producto:
    if UnitOfWork(db).productos.by_codigo(payload.codigo):
        raise ConflictoError(MSG_CODIGO_DUPLICADO)
    _validar_referencias(db, payload.categoria_id, payload.proveedor_id)

    producto = Producto(**payload.model_dump())
    db.add(producto)
    commit_o_error(db, MSG_CODIGO_DUPLICADO, msg_fk=MSG_REFERENCIA)
    logger.info("Producto %s creado (id=%s, stock inicial %s)", producto.codigo, producto.id, producto.stock)
    return _recargar(db, producto.id)


def actualizar_producto(db: Session, producto_id: int, payload: ProductoUpdate) -> Producto:
    producto = db.get(Producto, producto_id)
    if not producto:
        raise NoEncontradoError("Producto no encontrado")
    cambios = payload.model_dump(exclude_unset=True)

    if "codigo" in cambios and cambios["codigo"] != producto.codigo:
        otro = UnitOfWork(db).productos.by_codigo(cambios["codigo"])
        if otro and otro.id != producto_id:
            raise ConflictoError(MSG_CODIGO_DUPLICADO)
    _validar_referencias(db, cambios.get("categoria_id"), cambios.get("proveedor_id"))

    for k, v in cambios.items():
        setattr(producto, k, v)
    commit_o_error(db, MSG_CODIGO_DUPLICADO, msg_fk=MSG_REFERENCIA)
    return _recargar(db, producto_id)


def eliminar_producto(db: Session, producto_id: int) -> None:
    """Elimina el producto y su kardex en una sola transacción."""
    uow = UnitOfWork(db)
    with uow.transaction():
        producto = uow.productos.get(producto_id)
        if not producto:
            raise NoEncontradoError("Producto no encontrado")
        borrados = uow.movimientos.delete_por_producto(producto_id)
        db.delete(producto)
    logger.info("Producto %s eliminado junto con %s movimientos", producto_id, borrados)


def _recargar(db: Session, producto_id: int) -> Producto:
    return (
        db.query(Producto)
        .options(joinedload(Producto.categoria), joinedload(Producto.proveedor))
        .filter(Producto.id == producto_id)
        .populate_existing()
        .one()
    )
