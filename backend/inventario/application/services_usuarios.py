"""
Servicios de Usuarios
=====================
Alta, edición y baja de usuarios del sistema. La contraseña se guarda
hasheada con bcrypt y nunca se devuelve.
"""
import logging
from typing import List

from sqlalchemy.orm import Session, joinedload

from ..domain.errors import ConflictoError, DatosInvalidosError, NoEncontradoError
from ..domain.models import Rol, Usuario
from ..security.auth import get_password_hash
from .dtos import UsuarioIn, UsuarioUpdate
from .services import commit_o_error

logger = logging.getLogger(__name__)

MSG_EMAIL_DUPLICADO = "El email ya está registrado"


def listar_usuarios(db: Session) -> List[Usuario]:
    return db.query(Usuario).options(joinedload(Usuario.rol)).order_by(Usuario.id).all()


def obtener_usuario(db: Session, usuario_id: int) -> Usuario:
    usuario = db.query(Usuario).options(joinedload(Usuario.rol)).filter(Usuario.id == usuario_id).first()
    if not usuario:
        raise NoEncontradoError("Usuario no encontrado")
    return usuario


def _validar_rol(db: Session, rol_id: int) -> None:
    if db.get(Rol, rol_id) is None:
        raise DatosInvalidosError("Rol no encontrado")


def _email_en_uso(db: Session, email: str, excepto_id: int = None) -> bool:
    q = db.query(Usuario.id).filter(Usuario.email == email)
    if excepto_id is not None:
        q = q.filter(Usuario.id != excepto_id)
    return q.first() is not None


def crear_usuario(db: Session, payload: UsuarioIn) -> Usuario:
    if _email_en_uso(db, payload.email):
        raise ConflictoError(MSG_EMAIL_DUPLICADO)
    _validar_rol(db, payload.rol_id)

    usuario = Usuario(
        nombre=payload.nombre,
        email=payload.email,
        password=get_password_hash(payload.password),
        rol_id=payload.rol_id,
    )
    db.add(usuario)
    commit_o_error(db, MSG_EMAIL_DUPLICADO, msg_fk="Rol no encontrado")
    logger.info("Usuario %s creado (rol_id=%s)", usuario.id, usuario.rol_id)
    return obtener_usuario(db, usuario.id)


def actualizar_usuario(db: Session, usuario_id: int, payload: UsuarioUpdate) -> Usuario:
    usuario = db.get(Usuario, usuario_id)
    if not usuario:
        raise NoEncontradoError("Usuario no encontrado")
    cambios = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in cambios and _email_en_uso(db, cambios["email"], excepto_id=usuario_id):
        raise ConflictoError(MSG_EMAIL_DUPLICADO)
    if "rol_id" in cambios:
        _validar_rol(db, cambios["rol_id"])
    if "password" in cambios:
        cambios["password"] = get_password_hash(cambios["password"])

    for k, v in cambios.items():
        setattr(usuario, k, v)
    commit_o_error(db, MSG_EMAIL_DUPLICADO, msg_fk="Rol no encontrado")
    db.expire(usuario)
    return obtener_usuario(db, usuario_id)


def eliminar_usuario(db: Session, usuario_id: int, solicitante_id: int) -> None:
    if usuario_id == solicitante_id:
        raise DatosInvalidosError("No puedes eliminar tu propio usuario")
    usuario = db.get(Usuario, usuario_id)
    if not usuario:
        raise NoEncontradoError("Usuario no encontrado")
    db.delete(usuario)
    commit_o_error(db, MSG_EMAIL_DUPLICADO)
    logger.info("Usuario %s eliminado por %s", usuario_id, solicitante_id)
