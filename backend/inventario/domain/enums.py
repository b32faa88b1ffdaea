from enum import Enum

class TipoMovimiento(str, Enum):
    ENTRADA = "ENTRADA"  # suma al stock
    SALIDA = "SALIDA"    # resta, nunca por debajo de cero
    AJUSTE = "AJUSTE"    # fija el stock al valor indicado

class RolSistema(str, Enum):
    ADMIN = "ADMIN"
    ALMACENERO = "ALMACENERO"
