"""
Servicios de Categorías
=======================
CRUD de categorías. No se elimina una categoría con productos asociados.
"""
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..domain.errors import ConflictoError, NoEncontradoError
from ..domain.models import Categoria, Producto
from .dtos import CategoriaIn, CategoriaUpdate
from .services import commit_o_error

MSG_NOMBRE_DUPLICADO = "Ya existe una categoría con ese nombre"


def listar_categorias(db: Session) -> List[Tuple[Categoria, int]]:
    """Categorías por nombre, cada una con su cantidad de productos."""
    return (
        db.query(Categoria, func.count(Producto.id))
        .outerjoin(Producto, Producto.categoria_id == Categoria.id)
        .group_by(Categoria.id)
        .order_by(Categoria.nombre)
        .all()
    )


def obtener_categoria(db: Session, categoria_id: int) -> Categoria:
    categoria = (
        db.query(Categoria)
        .options(selectinload(Categoria.productos))
        .filter(Categoria.id == categoria_id)
        .first()
    )
    if not categoria:
        raise NoEncontradoError("Categoría no encontrada")
    return categoria


def crear_categoria(db: Session, payload: CategoriaIn) -> Categoria:
    categoria = Categoria(**payload.model_dump())
    db.add(categoria)
    commit_o_error(db, MSG_NOMBRE_DUPLICADO)
    db.refresh(categoria)
    return categoria


def actualizar_categoria(db: Session, categoria_id: int, payload: CategoriaUpdate) -> Categoria:
    categoria = db.get(Categoria, categoria_id)
    if not categoria:
        raise NoEncontradoError("Categoría no encontrada")
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(categoria, k, v)
    commit_o_error(db, MSG_NOMBRE_DUPLICADO)
    db.refresh(categoria)
    return categoria


def contar_productos(db: Session, categoria_id: int) -> int:
    return db.query(func.count(Producto.id)).filter(Producto.categoria_id == categoria_id).scalar() or 0


def eliminar_categoria(db: Session, categoria_id: int) -> Categoria:
    categoria = db.get(Categoria, categoria_id)
    if not categoria:
        raise NoEncontradoError("Categoría no encontrada")
    if contar_productos(db, categoria_id) > 0:
        raise ConflictoError("No se puede eliminar: hay productos asociados")
    db.delete(categoria)
    commit_o_error(db, MSG_NOMBRE_DUPLICADO, msg_fk="No se puede eliminar: hay productos asociados")
    return categoria
