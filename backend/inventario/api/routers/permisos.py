from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...application.dtos import PermisoOut
from ...application.services_roles import listar_permisos
from ...dependencies import get_db
from ...domain.enums import RolSistema
from ...security.auth import require_role

router = APIRouter(prefix="/permisos", tags=["permisos"])


@router.get("", response_model=List[PermisoOut], dependencies=[Depends(require_role([RolSistema.ADMIN.value]))])
def list_permisos(db: Session = Depends(get_db)):
    """Catálogo de permisos, ordenado por nombre."""
    return listar_permisos(db)
