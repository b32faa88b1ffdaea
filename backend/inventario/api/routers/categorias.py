from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...application import services_categorias as svc
from ...application.dtos import (
    CategoriaDetalleOut,
    CategoriaIn,
    CategoriaOut,
    CategoriaUpdate,
    ConteoProductos,
    MensajeOut,
    ProductoOut,
)
from ...dependencies import get_db
from ...security.auth import require_permission

router = APIRouter(prefix="/categorias", tags=["categorias"])


def _out(categoria, productos: int) -> CategoriaOut:
    out = CategoriaOut.model_validate(categoria)
    out.count = ConteoProductos(productos=productos)
    return out


@router.get("", response_model=List[CategoriaOut], dependencies=[Depends(require_permission("CATEGORIA_VER"))])
def list_categorias(db: Session = Depends(get_db)):
    return [_out(c, n) for c, n in svc.listar_categorias(db)]


@router.get("/{categoria_id}", response_model=CategoriaDetalleOut, dependencies=[Depends(require_permission("CATEGORIA_VER"))])
def get_categoria(categoria_id: int, db: Session = Depends(get_db)):
    categoria = svc.obtener_categoria(db, categoria_id)
    productos = sorted(categoria.productos, key=lambda p: p.nombre)
    return CategoriaDetalleOut(
        **CategoriaOut.model_validate(categoria).model_dump(exclude={"count"}),
        count=ConteoProductos(productos=len(productos)),
        productos=[ProductoOut.model_validate(p) for p in productos],
    )


@router.post("", response_model=CategoriaOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_permission("CATEGORIA_CREAR"))])
def create_categoria(payload: CategoriaIn, db: Session = Depends(get_db)):
    return _out(svc.crear_categoria(db, payload), 0)


@router.put("/{categoria_id}", response_model=CategoriaOut, dependencies=[Depends(require_permission("CATEGORIA_EDITAR"))])
def update_categoria(categoria_id: int, payload: CategoriaUpdate, db: Session = Depends(get_db)):
    categoria = svc.actualizar_categoria(db, categoria_id, payload)
    return _out(categoria, svc.contar_productos(db, categoria_id))


@router.delete("/{categoria_id}", response_model=MensajeOut, dependencies=[Depends(require_permission("CATEGORIA_ELIMINAR"))])
def delete_categoria(categoria_id: int, db: Session = Depends(get_db)):
    svc.eliminar_categoria(db, categoria_id)
    return {"message": "Categoría eliminada"}
