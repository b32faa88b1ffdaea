"""
Utilidades comunes de los servicios CRUD.
Traducen los errores de integridad de la base a la jerarquía de dominio.
"""
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..domain.errors import ConflictoError, DatosInvalidosError, InventarioError

logger = logging.getLogger(__name__)

# SQLSTATE de PostgreSQL
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"
PG_NOT_NULL_VIOLATION = "23502"

MSG_NO_NULO = "Faltan datos obligatorios"
MSG_INTEGRIDAD = "Los datos no cumplen las restricciones de la base"


def clasificar_integrity_error(err: IntegrityError, msg_unico: str, msg_fk: str) -> InventarioError:
    """Unicidad -> ConflictoError; clave foránea, NOT NULL y el resto -> DatosInvalidosError."""
    orig = err.orig
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    texto = str(orig).upper()
    if pgcode == PG_FOREIGN_KEY_VIOLATION or "FOREIGN KEY" in texto:
        return DatosInvalidosError(msg_fk)
    if pgcode == PG_NOT_NULL_VIOLATION or "NOT NULL" in texto:
        return DatosInvalidosError(MSG_NO_NULO)
    if pgcode == PG_UNIQUE_VIOLATION or "UNIQUE" in texto:
        return ConflictoError(msg_unico)
    return DatosInvalidosError(MSG_INTEGRIDAD)


def commit_o_error(db: Session, msg_unico: str, msg_fk: str = "Referencia inválida") -> None:
    """Confirma la transacción; si la base rechaza por integridad, revierte y lanza el error de dominio."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Violación de integridad: %s", e.orig)
        raise clasificar_integrity_error(e, msg_unico, msg_fk)
