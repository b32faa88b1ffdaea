from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...application.dtos import LoginIn, LoginOut, PerfilOut
from ...application.services_auth import login as login_usuario, obtener_perfil, renovar_token
from ...dependencies import get_db
from ...security.auth import TokenUsuario, get_token_usuario

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    """
    Autenticación con email y contraseña.

    Devuelve el token (Bearer) y el perfil con los permisos del rol. Email
    desconocido y contraseña incorrecta responden igual (401).
    """
    return login_usuario(db, payload.email, payload.password)


@router.get("/me", response_model=PerfilOut)
def me(db: Session = Depends(get_db), token: TokenUsuario = Depends(get_token_usuario)):
    """Perfil del usuario actual, leído de la base (no de los claims del token)."""
    return obtener_perfil(db, token.id)


@router.post("/refresh", response_model=LoginOut)
def refresh(db: Session = Depends(get_db), token: TokenUsuario = Depends(get_token_usuario)):
    """Emite un token nuevo con el rol y los permisos vigentes."""
    return renovar_token(db, token.id)
