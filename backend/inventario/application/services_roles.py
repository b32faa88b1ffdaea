"""
Gestión de Roles y Permisos
===========================
Roles dinámicos: cada rol agrupa permisos del catálogo. El rol ADMIN no se
puede renombrar ni eliminar, y ningún rol con usuarios asignados se elimina.
"""
import logging
from typing import Iterable, List

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..domain.enums import RolSistema
from ..domain.errors import ConflictoError, DatosInvalidosError, NoEncontradoError
from ..domain.models import Permiso, Rol, RolPermiso, Usuario
from .dtos import ConteoUsuarios, PermisoOut, RolIn, RolOut, RolUpdate
from .services import commit_o_error

logger = logging.getLogger(__name__)

MSG_NOMBRE_DUPLICADO = "Ya existe un rol con ese nombre"


def listar_permisos(db: Session) -> List[Permiso]:
    return db.query(Permiso).order_by(Permiso.nombre).all()


def rol_out(rol: Rol, usuarios: int) -> RolOut:
    """Aplana RolPermiso -> Permiso para la respuesta."""
    return RolOut(
        id=rol.id,
        nombre=rol.nombre,
        descripcion=rol.descripcion,
        created_at=rol.created_at,
        updated_at=rol.updated_at,
        permisos=[PermisoOut.model_validate(rp.permiso) for rp in rol.permisos],
        count=ConteoUsuarios(usuarios=usuarios),
    )


def _query_roles(db: Session):
    return db.query(Rol).options(joinedload(Rol.permisos).joinedload(RolPermiso.permiso))


def _contar_usuarios(db: Session, rol_id: int) -> int:
    return db.query(func.count(Usuario.id)).filter(Usuario.rol_id == rol_id).scalar() or 0


def listar_roles(db: Session) -> List[RolOut]:
    conteos = dict(
        db.query(Usuario.rol_id, func.count(Usuario.id)).group_by(Usuario.rol_id).all()
    )
    roles = _query_roles(db).order_by(Rol.id).all()
    return [rol_out(r, conteos.get(r.id, 0)) for r in roles]


def _get_rol(db: Session, rol_id: int) -> Rol:
    rol = _query_roles(db).filter(Rol.id == rol_id).first()
    if not rol:
        raise NoEncontradoError("Rol no encontrado")
    return rol


def obtener_rol(db: Session, rol_id: int) -> RolOut:
    return rol_out(_get_rol(db, rol_id), _contar_usuarios(db, rol_id))


def _resolver_permisos(db: Session, ids: Iterable[int]) -> List[Permiso]:
    ids = set(ids)
    if not ids:
        return []
    permisos = db.query(Permiso).filter(Permiso.id.in_(ids)).all()
    faltantes = ids - {p.id for p in permisos}
    if faltantes:
        raise DatosInvalidosError(f"Permisos no encontrados: {', '.join(str(i) for i in sorted(faltantes))}")
    return permisos


def _asignar_permisos(db: Session, rol: Rol, permisos: List[Permiso]) -> None:
    rol.permisos.clear()
    db.flush()
    for permiso in permisos:
        rol.permisos.append(RolPermiso(permiso_id=permiso.id))


def crear_rol(db: Session, payload: RolIn) -> RolOut:
    nombre = payload.nombre.upper()
    if db.query(Rol).filter(Rol.nombre == nombre).first():
        raise ConflictoError(MSG_NOMBRE_DUPLICADO)
    permisos = _resolver_permisos(db, payload.permisos)

    rol = Rol(nombre=nombre, descripcion=payload.descripcion)
    db.add(rol)
    db.flush()
    _asignar_permisos(db, rol, permisos)
    commit_o_error(db, MSG_NOMBRE_DUPLICADO)
    logger.info("Rol %s creado con %s permisos", nombre, len(permisos))
    return obtener_rol(db, rol.id)


def actualizar_rol(db: Session, rol_id: int, payload: RolUpdate) -> RolOut:
    """Actualiza nombre/descripción y reemplaza el conjunto de permisos si viene en el payload."""
    rol = _get_rol(db, rol_id)
    cambios = payload.model_dump(exclude_unset=True)

    if cambios.get("nombre"):
        nombre = cambios["nombre"].upper()
        if nombre != rol.nombre:
            if rol.nombre == RolSistema.ADMIN.value:
                raise DatosInvalidosError("No se puede renombrar el rol de Administrador")
            otro = db.query(Rol).filter(Rol.nombre == nombre).first()
            if otro and otro.id != rol_id:
                raise ConflictoError(MSG_NOMBRE_DUPLICADO)
            rol.nombre = nombre
    if "descripcion" in cambios:
        rol.descripcion = cambios["descripcion"]
    if cambios.get("permisos") is not None:
        _asignar_permisos(db, rol, _resolver_permisos(db, cambios["permisos"]))

    commit_o_error(db, MSG_NOMBRE_DUPLICADO)
    db.expire_all()
    return obtener_rol(db, rol_id)


def eliminar_rol(db: Session, rol_id: int) -> None:
    rol = db.get(Rol, rol_id)
    if not rol:
        raise NoEncontradoError("Rol no encontrado")
    if _contar_usuarios(db, rol_id) > 0:
        raise ConflictoError("No se puede eliminar un rol que tiene usuarios asignados")
    if rol.nombre == RolSistema.ADMIN.value:
        raise ConflictoError("No se puede eliminar el rol de Administrador")
    nombre = rol.nombre
    db.delete(rol)
    commit_o_error(db, MSG_NOMBRE_DUPLICADO)
    logger.info("Rol %s eliminado", nombre)
