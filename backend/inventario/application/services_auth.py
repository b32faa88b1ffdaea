"""
Servicio de Autenticación
=========================
Login con email y contraseña, perfil del usuario actual y renovación del token.

El token lleva embebidos el rol y los nombres de permisos del usuario al
momento de emitirlo; /auth/refresh emite uno nuevo con los permisos vigentes.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ..domain.errors import CredencialesInvalidasError, NoEncontradoError
from ..domain.models import Rol, RolPermiso, Usuario
from ..security.auth import cargar_usuario, create_access_token, pwd_context, verify_password
from .dtos import LoginOut, PerfilOut

logger = logging.getLogger(__name__)

MSG_CREDENCIALES = "Email o contraseña incorrectos"


def perfil_de(usuario: Usuario) -> PerfilOut:
    return PerfilOut(
        id=usuario.id,
        nombre=usuario.nombre,
        email=usuario.email,
        rol=usuario.rol.nombre,
        permisos=usuario.rol.nombres_permisos,
    )


def emitir_token(perfil: PerfilOut) -> str:
    return create_access_token({
        "sub": str(perfil.id),
        "id": perfil.id,
        "email": perfil.email,
        "rol": perfil.rol,
        "permisos": perfil.permisos,
    })


def _buscar_por_email(db: Session, email: str) -> Optional[Usuario]:
    return (
        db.query(Usuario)
        .options(joinedload(Usuario.rol).joinedload(Rol.permisos).joinedload(RolPermiso.permiso))
        .filter(Usuario.email == email.strip().lower())
        .first()
    )


def login(db: Session, email: str, password: str) -> LoginOut:
    """Mismo error para email desconocido y contraseña incorrecta."""
    usuario = _buscar_por_email(db, email)
    if usuario is None:
        pwd_context.dummy_verify()
        logger.info("Login fallido: email desconocido")
        raise CredencialesInvalidasError(MSG_CREDENCIALES)
    if not verify_password(password, usuario.password):
        logger.info("Login fallido para usuario %s", usuario.id)
        raise CredencialesInvalidasError(MSG_CREDENCIALES)

    perfil = perfil_de(usuario)
    logger.info("Login exitoso: usuario %s (%s)", usuario.id, perfil.rol)
    return LoginOut(token=emitir_token(perfil), usuario=perfil)


def obtener_perfil(db: Session, usuario_id: int) -> PerfilOut:
    usuario = cargar_usuario(db, usuario_id)
    if not usuario:
        raise NoEncontradoError("Usuario no encontrado")
    return perfil_de(usuario)


def renovar_token(db: Session, usuario_id: int) -> LoginOut:
    """Nuevo token con el rol y los permisos actuales del usuario."""
    usuario = cargar_usuario(db, usuario_id)
    if not usuario:
        raise CredencialesInvalidasError("Usuario no encontrado")
    perfil = perfil_de(usuario)
    return LoginOut(token=emitir_token(perfil), usuario=perfil)
