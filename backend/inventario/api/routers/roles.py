"""
Gestión Dinámica de Roles
==========================
API para crear, editar y eliminar roles y su conjunto de permisos.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...application import services_roles as svc
from ...application.dtos import MensajeOut, RolIn, RolOut, RolUpdate
from ...dependencies import get_db
from ...security.auth import require_permission

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=List[RolOut], dependencies=[Depends(require_permission("ROL_VER"))])
def list_roles(db: Session = Depends(get_db)):
    """Roles con sus permisos y la cantidad de usuarios asignados."""
    return svc.listar_roles(db)


@router.get("/{rol_id}", response_model=RolOut, dependencies=[Depends(require_permission("ROL_VER"))])
def get_rol(rol_id: int, db: Session = Depends(get_db)):
    return svc.obtener_rol(db, rol_id)


@router.post("", response_model=RolOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_permission("ROL_CREAR"))])
def create_rol(payload: RolIn, db: Session = Depends(get_db)):
    """Crea un rol. El nombre se guarda en mayúsculas; permisos es la lista de IDs."""
    return svc.crear_rol(db, payload)


@router.put("/{rol_id}", response_model=RolOut, dependencies=[Depends(require_permission("ROL_EDITAR"))])
def update_rol(rol_id: int, payload: RolUpdate, db: Session = Depends(get_db)):
    """Actualiza el rol; si viene permisos, reemplaza el conjunto completo."""
    return svc.actualizar_rol(db, rol_id, payload)


@router.delete("/{rol_id}", response_model=MensajeOut, dependencies=[Depends(require_permission("ROL_ELIMINAR"))])
def delete_rol(rol_id: int, db: Session = Depends(get_db)):
    svc.eliminar_rol(db, rol_id)
    return {"message": "Rol eliminado correctamente"}
