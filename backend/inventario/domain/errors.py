"""
Errores de dominio
==================
Jerarquía única de errores que lanzan los servicios. Cada error tiene un tipo
(ErrorKind) y la traducción a código HTTP vive en una sola tabla
(STATUS_POR_TIPO), usada por los exception handlers de la aplicación.
"""
from enum import Enum
from typing import Dict


class ErrorKind(str, Enum):
    VALIDACION = "VALIDACION"
    STOCK_INSUFICIENTE = "STOCK_INSUFICIENTE"
    AUTENTICACION = "AUTENTICACION"
    PERMISO = "PERMISO"
    NO_ENCONTRADO = "NO_ENCONTRADO"
    CONFLICTO = "CONFLICTO"


STATUS_POR_TIPO: Dict[ErrorKind, int] = {
    ErrorKind.VALIDACION: 400,
    ErrorKind.STOCK_INSUFICIENTE: 400,
    ErrorKind.AUTENTICACION: 401,
    ErrorKind.PERMISO: 403,
    ErrorKind.NO_ENCONTRADO: 404,
    ErrorKind.CONFLICTO: 400,
}


class InventarioError(Exception):
    """Excepción base para errores de negocio"""
    kind: ErrorKind = ErrorKind.VALIDACION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_POR_TIPO[self.kind]


class DatosInvalidosError(InventarioError):
    """Entrada mal formada o que viola una regla de negocio"""
    kind = ErrorKind.VALIDACION


class StockInsuficienteError(InventarioError):
    """SALIDA mayor al stock disponible"""
    kind = ErrorKind.STOCK_INSUFICIENTE


class CredencialesInvalidasError(InventarioError):
    """Credenciales o token inválidos"""
    kind = ErrorKind.AUTENTICACION


class PermisoDenegadoError(InventarioError):
    """Usuario autenticado sin el rol o permiso requerido"""
    kind = ErrorKind.PERMISO


class NoEncontradoError(InventarioError):
    kind = ErrorKind.NO_ENCONTRADO


class ConflictoError(InventarioError):
    """Violación de unicidad o de integridad referencial"""
    kind = ErrorKind.CONFLICTO
