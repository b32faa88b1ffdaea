from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...application import services_productos as svc
from ...application.dtos import (
    MensajeOut,
    MovimientoOut,
    ProductoDetalleOut,
    ProductoIn,
    ProductoOut,
    ProductoUpdate,
)
from ...dependencies import get_db
from ...security.auth import require_permission

router = APIRouter(prefix="/productos", tags=["productos"])


@router.get("", response_model=List[ProductoOut], dependencies=[Depends(require_permission("PRODUCTO_VER"))])
def list_productos(
    categoria_id: Optional[int] = Query(None, alias="categoriaId"),
    proveedor_id: Optional[int] = Query(None, alias="proveedorId"),
    activo: Optional[bool] = None,
    buscar: Optional[str] = None,
    stock_bajo: Optional[bool] = Query(None, alias="stockBajo"),
    db: Session = Depends(get_db),
):
    """Catálogo ordenado por nombre. stockBajo=true filtra los productos con stock <= stockMinimo."""
    return svc.listar_productos(
        db,
        categoria_id=categoria_id,
        proveedor_id=proveedor_id,
        activo=activo,
        buscar=buscar,
        stock_bajo=stock_bajo,
    )


@router.get("/{producto_id}", response_model=ProductoDetalleOut, dependencies=[Depends(require_permission("PRODUCTO_VER"))])
def get_producto(producto_id: int, db: Session = Depends(get_db)):
    producto, movimientos = svc.obtener_producto(db, producto_id)
    return ProductoDetalleOut(
        **ProductoOut.model_validate(producto).model_dump(),
        movimientos=[MovimientoOut.model_validate(m) for m in movimientos],
    )


@router.post("", response_model=ProductoOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_permission("PRODUCTO_CREAR"))])
def create_producto(payload: ProductoIn, db: Session = Depends(get_db)):
    return svc.crear_producto(db, payload)


@router.put("/{producto_id}", response_model=ProductoOut, dependencies=[Depends(require_permission("PRODUCTO_EDITAR"))])
def update_producto(producto_id: int, payload: ProductoUpdate, db: Session = Depends(get_db)):
    return svc.actualizar_producto(db, producto_id, payload)


@router.delete("/{producto_id}", response_model=MensajeOut, dependencies=[Depends(require_permission("PRODUCTO_ELIMINAR"))])
def delete_producto(producto_id: int, db: Session = Depends(get_db)):
    svc.eliminar_producto(db, producto_id)
    return {"message": "Producto eliminado"}
