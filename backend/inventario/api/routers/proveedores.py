from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...application import services_proveedores as svc
from ...application.dtos import (
    ConteoProductos,
    MensajeOut,
    ProductoOut,
    ProveedorDetalleOut,
    ProveedorIn,
    ProveedorOut,
    ProveedorUpdate,
)
from ...dependencies import get_db
from ...security.auth import require_permission

router = APIRouter(prefix="/proveedores", tags=["proveedores"])


@router.get("", response_model=List[ProveedorOut], dependencies=[Depends(require_permission("PROVEEDOR_VER"))])
def list_proveedores(activo: Optional[bool] = None, db: Session = Depends(get_db)):
    result = []
    for proveedor, productos in svc.listar_proveedores(db, activo=activo):
        out = ProveedorOut.model_validate(proveedor)
        out.count = ConteoProductos(productos=productos)
        result.append(out)
    return result


@router.get("/{proveedor_id}", response_model=ProveedorDetalleOut, dependencies=[Depends(require_permission("PROVEEDOR_VER"))])
def get_proveedor(proveedor_id: int, db: Session = Depends(get_db)):
    proveedor = svc.obtener_proveedor(db, proveedor_id)
    productos = sorted(proveedor.productos, key=lambda p: p.nombre)
    return ProveedorDetalleOut(
        **ProveedorOut.model_validate(proveedor).model_dump(exclude={"count"}),
        count=ConteoProductos(productos=len(productos)),
        productos=[ProductoOut.model_validate(p) for p in productos],
    )


@router.post("", response_model=ProveedorOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_permission("PROVEEDOR_CREAR"))])
def create_proveedor(payload: ProveedorIn, db: Session = Depends(get_db)):
    return svc.crear_proveedor(db, payload)


@router.put("/{proveedor_id}", response_model=ProveedorOut, dependencies=[Depends(require_permission("PROVEEDOR_EDITAR"))])
def update_proveedor(proveedor_id: int, payload: ProveedorUpdate, db: Session = Depends(get_db)):
    return svc.actualizar_proveedor(db, proveedor_id, payload)


@router.delete("/{proveedor_id}", response_model=MensajeOut, dependencies=[Depends(require_permission("PROVEEDOR_ELIMINAR"))])
def delete_proveedor(proveedor_id: int, db: Session = Depends(get_db)):
    svc.eliminar_proveedor(db, proveedor_id)
    return {"message": "Proveedor eliminado"}
