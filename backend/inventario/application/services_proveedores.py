"""
Servicios de Proveedores
"""
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..domain.errors import ConflictoError, NoEncontradoError
from ..domain.models import Producto, Proveedor
from .dtos import ProveedorIn, ProveedorUpdate
from .services import commit_o_error

MSG_CONFLICTO = "No se pudo guardar el proveedor"


def listar_proveedores(db: Session, activo: Optional[bool] = None) -> List[Tuple[Proveedor, int]]:
    q = (
        db.query(Proveedor, func.count(Producto.id))
        .outerjoin(Producto, Producto.proveedor_id == Proveedor.id)
    )
    if activo is not None:
        q = q.filter(Proveedor.activo == activo)
    return q.group_by(Proveedor.id).order_by(Proveedor.nombre).all()


def obtener_proveedor(db: Session, proveedor_id: int) -> Proveedor:
    proveedor = (
        db.query(Proveedor)
        .options(selectinload(Proveedor.productos))
        .filter(Proveedor.id == proveedor_id)
        .first()
    )
    if not proveedor:
        raise NoEncontradoError("Proveedor no encontrado")
    return proveedor


def crear_proveedor(db: Session, payload: ProveedorIn) -> Proveedor:
    proveedor = Proveedor(**payload.model_dump())
    db.add(proveedor)
    commit_o_error(db, MSG_CONFLICTO)
    db.refresh(proveedor)
    return proveedor


def actualizar_proveedor(db: Session, proveedor_id: int, payload: ProveedorUpdate) -> Proveedor:
    proveedor = db.get(Proveedor, proveedor_id)
    if not proveedor:
        raise NoEncontradoError("Proveedor no encontrado")
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(proveedor, k, v)
    commit_o_error(db, MSG_CONFLICTO)
    db.refresh(proveedor)
    return proveedor


def eliminar_proveedor(db: Session, proveedor_id: int) -> Proveedor:
    proveedor = db.get(Proveedor, proveedor_id)
    if not proveedor:
        raise NoEncontradoError("Proveedor no encontrado")
    asociados = db.query(func.count(Producto.id)).filter(Producto.proveedor_id == proveedor_id).scalar() or 0
    if asociados > 0:
        raise ConflictoError("No se puede eliminar: hay productos asociados")
    db.delete(proveedor)
    commit_o_error(db, MSG_CONFLICTO, msg_fk="No se puede eliminar: hay productos asociados")
    return proveedor
