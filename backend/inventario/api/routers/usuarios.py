from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...application import services_usuarios as svc
from ...application.dtos import MensajeOut, UsuarioIn, UsuarioOut, UsuarioUpdate
from ...dependencies import get_db
from ...security.auth import TokenUsuario, require_permission

router = APIRouter(prefix="/usuarios", tags=["usuarios"])


@router.get("", response_model=List[UsuarioOut], dependencies=[Depends(require_permission("USUARIO_VER"))])
def list_usuarios(db: Session = Depends(get_db)):
    return svc.listar_usuarios(db)


@router.get("/{usuario_id}", response_model=UsuarioOut, dependencies=[Depends(require_permission("USUARIO_VER"))])
def get_usuario(usuario_id: int, db: Session = Depends(get_db)):
    return svc.obtener_usuario(db, usuario_id)


@router.post("", response_model=UsuarioOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_permission("USUARIO_CREAR"))])
def create_usuario(payload: UsuarioIn, db: Session = Depends(get_db)):
    return svc.crear_usuario(db, payload)


@router.put("/{usuario_id}", response_model=UsuarioOut, dependencies=[Depends(require_permission("USUARIO_EDITAR"))])
def update_usuario(usuario_id: int, payload: UsuarioUpdate, db: Session = Depends(get_db)):
    """Actualización parcial. La contraseña solo se cambia si viene en el payload."""
    return svc.actualizar_usuario(db, usuario_id, payload)


@router.delete("/{usuario_id}", response_model=MensajeOut)
def delete_usuario(
    usuario_id: int,
    db: Session = Depends(get_db),
    token: TokenUsuario = Depends(require_permission("USUARIO_ELIMINAR")),
):
    svc.eliminar_usuario(db, usuario_id, solicitante_id=token.id)
    return {"message": "Usuario eliminado"}
