"""
Movimientos de Stock
====================
Registro de ENTRADA / SALIDA / AJUSTE y consulta del kardex.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...application.dtos import (
    KardexOut,
    MovimientoIn,
    MovimientoOut,
    MovimientoRegistradoOut,
    ProductoOut,
)
from ...application.services_movimientos import MovimientoService
from ...dependencies import get_db
from ...domain.enums import TipoMovimiento
from ...infrastructure.unit_of_work import UnitOfWork
from ...security.auth import require_permission

router = APIRouter(prefix="/movimientos", tags=["movimientos"])


def get_movimiento_service(db: Session = Depends(get_db)) -> MovimientoService:
    return MovimientoService(UnitOfWork(db))


@router.get("", response_model=List[MovimientoOut], dependencies=[Depends(require_permission("MOVIMIENTO_VER"))])
def list_movimientos(
    producto_id: Optional[int] = Query(None, alias="productoId"),
    tipo: Optional[TipoMovimiento] = None,
    desde: Optional[datetime] = None,
    hasta: Optional[datetime] = None,
    limit: int = Query(100, ge=1, le=1000),
    service: MovimientoService = Depends(get_movimiento_service),
):
    """Movimientos más recientes primero, con el resumen del producto."""
    return service.listar(producto_id=producto_id, tipo=tipo, desde=desde, hasta=hasta, limit=limit)


@router.post("", response_model=MovimientoRegistradoOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_permission("MOVIMIENTO_CREAR"))])
def create_movimiento(payload: MovimientoIn, service: MovimientoService = Depends(get_movimiento_service)):
    """
    Registra un movimiento y actualiza el stock del producto en la misma transacción.
    Una SALIDA mayor al stock disponible se rechaza sin modificar nada.
    """
    registrado = service.registrar(
        producto_id=payload.producto_id,
        tipo=payload.tipo,
        cantidad=payload.cantidad,
        descripcion=payload.descripcion,
    )
    return MovimientoRegistradoOut(
        **MovimientoOut.model_validate(registrado.movimiento).model_dump(),
        stock_anterior=registrado.stock_anterior,
        stock_nuevo=registrado.stock_nuevo,
    )


@router.get("/producto/{producto_id}", response_model=KardexOut, dependencies=[Depends(require_permission("MOVIMIENTO_VER"))])
def kardex(producto_id: int, service: MovimientoService = Depends(get_movimiento_service)):
    producto, movimientos = service.obtener_kardex(producto_id)
    return KardexOut(
        **ProductoOut.model_validate(producto).model_dump(),
        movimientos=[MovimientoOut.model_validate(m) for m in movimientos],
    )
