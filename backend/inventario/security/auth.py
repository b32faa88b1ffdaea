from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional
import jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..domain.errors import CredencialesInvalidasError, PermisoDenegadoError
from ..domain.models import Usuario, Rol, RolPermiso

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


class TokenUsuario(BaseModel):
    """Identidad embebida en el token. Los permisos son los vigentes al emitirlo."""
    id: int
    email: str
    rol: str
    permisos: List[str] = []


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def create_access_token(data: dict, expires_minutes: int = settings.access_token_expire_minutes) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + timedelta(minutes=expires_minutes)})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)

def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise CredencialesInvalidasError("Token expirado")
    except jwt.PyJWTError:
        raise CredencialesInvalidasError("Token inválido")


def get_token_usuario(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenUsuario:
    """Valida el header Authorization: Bearer <token> y devuelve la identidad embebida."""
    if credentials is None or not credentials.credentials:
        raise CredencialesInvalidasError("Acceso denegado. Token no proporcionado.")
    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    if not sub:
        raise CredencialesInvalidasError("Token inválido")
    return TokenUsuario(
        id=int(sub),
        email=payload.get("email", ""),
        rol=payload.get("rol", ""),
        permisos=payload.get("permisos") or [],
    )


def cargar_usuario(db: Session, user_id: int) -> Optional[Usuario]:
    """Usuario con su rol y permisos (una sola ida a la base)."""
    return (
        db.query(Usuario)
        .options(joinedload(Usuario.rol).joinedload(Rol.permisos).joinedload(RolPermiso.permiso))
        .filter(Usuario.id == user_id)
        .first()
    )


def require_role(roles: Iterable[str]):
    """Dependencia: el rol del token debe estar en la lista permitida."""
    permitidos = set(roles)

    def _check(token: TokenUsuario = Depends(get_token_usuario)) -> TokenUsuario:
        if token.rol not in permitidos:
            raise PermisoDenegadoError("No tienes permisos para realizar esta acción.")
        return token

    return _check


def require_permission(permission: str):
    """Dependencia: el permiso debe figurar en la lista embebida en el token.

    No se vuelve a consultar la base: un permiso revocado sigue valiendo hasta
    que el token expira o el cliente llama a /auth/refresh.
    """
    def _check(token: TokenUsuario = Depends(get_token_usuario)) -> TokenUsuario:
        if permission not in token.permisos:
            raise PermisoDenegadoError(f"Requiere permiso: {permission}")
        return token

    return _check
