from pydantic import AfterValidator, BaseModel, ConfigDict, Field, constr, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, List, Optional
from datetime import date, datetime
from decimal import Decimal
import re

from ..domain.enums import TipoMovimiento

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class CamelModel(BaseModel):
    """Base de los esquemas: JSON en camelCase (stockMinimo, categoriaId, createdAt)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _validar_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    if not EMAIL_RE.match(v):
        raise ValueError("El email no es válido")
    return v

Email = Annotated[str, AfterValidator(_validar_email)]


def _no_nulo(v, info):
    """En updates parciales un campo puede omitirse, pero no enviarse en null."""
    if v is None:
        raise ValueError(f"El campo {to_camel(info.field_name)} no puede ser nulo")
    return v

# ===== CATEGORÍAS =====

class CategoriaIn(CamelModel):
    nombre: constr(strip_whitespace=True, min_length=1, max_length=100)
    descripcion: Optional[str] = None
    imagen_url: Optional[str] = None

class CategoriaUpdate(CamelModel):
    nombre: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    descripcion: Optional[str] = None
    imagen_url: Optional[str] = None

    @field_validator("nombre")
    @classmethod
    def no_nulos(cls, v, info):
        return _no_nulo(v, info)

class ConteoProductos(CamelModel):
    productos: int = 0

class CategoriaOut(CamelModel):
    id: int
    nombre: str
    descripcion: Optional[str] = None
    imagen_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    count: Optional[ConteoProductos] = Field(default=None, alias="_count")

# ===== PROVEEDORES =====

class ProveedorIn(CamelModel):
    nombre: constr(strip_whitespace=True, min_length=1, max_length=200)
    contacto: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[Email] = None
    direccion: Optional[str] = None
    activo: bool = True

class ProveedorUpdate(CamelModel):
    nombre: Optional[constr(strip_whitespace=True, min_length=1, max_length=200)] = None
    contacto: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[Email] = None
    direccion: Optional[str] = None
    activo: Optional[bool] = None

    @field_validator("nombre", "activo")
    @classmethod
    def no_nulos(cls, v, info):
        return _no_nulo(v, info)

class ProveedorOut(CamelModel):
    id: int
    nombre: str
    contacto: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[str] = None
    direccion: Optional[str] = None
    activo: bool
    created_at: datetime
    updated_at: datetime
    count: Optional[ConteoProductos] = Field(default=None, alias="_count")

# ===== PRODUCTOS =====

class ProductoIn(CamelModel):
    codigo: constr(strip_whitespace=True, min_length=1, max_length=50)
    nombre: constr(strip_whitespace=True, min_length=1, max_length=200)
    descripcion: Optional[str] = None
    precio: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    costo: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)  # stock inicial
    stock_minimo: int = Field(default=5, ge=0)
    categoria_id: int
    proveedor_id: Optional[int] = None
    imagen_url: Optional[str] = None
    activo: bool = True

class ProductoUpdate(CamelModel):
    codigo: Optional[constr(strip_whitespace=True, min_length=1, max_length=50)] = None
    nombre: Optional[constr(strip_whitespace=True, min_length=1, max_length=200)] = None
    descripcion: Optional[str] = None
    precio: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    costo: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    stock_minimo: Optional[int] = Field(default=None, ge=0)
    categoria_id: Optional[int] = None
    proveedor_id: Optional[int] = None
    imagen_url: Optional[str] = None
    activo: Optional[bool] = None

    @field_validator("codigo", "nombre", "precio", "costo", "stock_minimo", "categoria_id", "activo")
    @classmethod
    def no_nulos(cls, v, info):
        return _no_nulo(v, info)

    @model_validator(mode="before")
    @classmethod
    def rechazar_stock(cls, data):
        if isinstance(data, dict) and "stock" in data:
            raise ValueError("El stock solo puede modificarse registrando movimientos")
        return data

class CategoriaResumen(CamelModel):
    id: int
    nombre: str
    imagen_url: Optional[str] = None

class ProveedorResumen(CamelModel):
    id: int
    nombre: str
    activo: bool

class ProductoResumen(CamelModel):
    id: int
    codigo: str
    nombre: str

class ProductoOut(CamelModel):
    id: int
    codigo: str
    nombre: str
    descripcion: Optional[str] = None
    precio: Decimal
    costo: Decimal
    stock: int
    stock_minimo: int
    stock_bajo: bool
    activo: bool
    categoria_id: int
    proveedor_id: Optional[int] = None
    imagen_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    categoria: Optional[CategoriaResumen] = None
    proveedor: Optional[ProveedorResumen] = None

# ===== MOVIMIENTOS =====

class MovimientoIn(CamelModel):
    producto_id: int
    tipo: TipoMovimiento
    cantidad: int
    descripcion: Optional[str] = Field(default=None, max_length=500)

    @field_validator("tipo", mode="before")
    @classmethod
    def validar_tipo(cls, v):
        valores = [t.value for t in TipoMovimiento]
        if not isinstance(v, str) or v.upper() not in valores:
            raise ValueError("Tipo inválido. Use: ENTRADA, SALIDA o AJUSTE")
        return v.upper()

    @field_validator("cantidad", mode="before")
    @classmethod
    def validar_cantidad(cls, v):
        if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
            raise ValueError("La cantidad debe ser un entero mayor a 0")
        return v

class MovimientoOut(CamelModel):
    id: int
    tipo: TipoMovimiento
    cantidad: int
    producto_id: int
    descripcion: Optional[str] = None
    created_at: datetime
    producto: Optional[ProductoResumen] = None

class MovimientoRegistradoOut(MovimientoOut):
    stock_anterior: int
    stock_nuevo: int

class ProductoDetalleOut(ProductoOut):
    """Producto con sus últimos movimientos."""
    movimientos: List[MovimientoOut] = []

class KardexOut(ProductoOut):
    """Historia cronológica completa de un producto (más reciente primero)."""
    movimientos: List[MovimientoOut] = []

class CategoriaDetalleOut(CategoriaOut):
    productos: List[ProductoOut] = []

class ProveedorDetalleOut(ProveedorOut):
    productos: List[ProductoOut] = []

# ===== PERMISOS / ROLES / USUARIOS =====

class PermisoOut(CamelModel):
    id: int
    nombre: str
    descripcion: Optional[str] = None

class ConteoUsuarios(CamelModel):
    usuarios: int = 0

class RolIn(CamelModel):
    nombre: constr(strip_whitespace=True, min_length=2, max_length=50)
    descripcion: Optional[str] = Field(default=None, max_length=500)
    permisos: List[int] = Field(default_factory=list, description="IDs de permisos")

class RolUpdate(CamelModel):
    nombre: Optional[constr(strip_whitespace=True, min_length=2, max_length=50)] = None
    descripcion: Optional[str] = Field(default=None, max_length=500)
    permisos: Optional[List[int]] = None

class RolOut(CamelModel):
    id: int
    nombre: str
    descripcion: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    permisos: List[PermisoOut] = []
    count: Optional[ConteoUsuarios] = Field(default=None, alias="_count")

class RolResumen(CamelModel):
    id: int
    nombre: str

class UsuarioIn(CamelModel):
    nombre: constr(strip_whitespace=True, min_length=2, max_length=100)
    email: Email
    password: str = Field(..., min_length=6)
    rol_id: int = Field(..., gt=0)

class UsuarioUpdate(CamelModel):
    nombre: Optional[constr(strip_whitespace=True, min_length=2, max_length=100)] = None
    email: Optional[Email] = None
    password: Optional[str] = Field(default=None, min_length=6)
    rol_id: Optional[int] = Field(default=None, gt=0)

class UsuarioOut(CamelModel):
    id: int
    nombre: str
    email: str
    rol_id: int
    created_at: datetime
    updated_at: datetime
    rol: Optional[RolResumen] = None

# ===== AUTH =====

class LoginIn(CamelModel):
    email: Email
    password: str = Field(..., min_length=6)

class PerfilOut(CamelModel):
    id: int
    nombre: str
    email: str
    rol: str
    permisos: List[str] = []

class LoginOut(CamelModel):
    token: str
    usuario: PerfilOut

# ===== DASHBOARD =====

class ResumenOut(CamelModel):
    total_productos: int
    total_categorias: int
    total_proveedores: int
    productos_con_stock_bajo: int
    valorizacion_inventario: float
    valor_venta_potencial: float
    margen_potencial: float
    rentabilidad: float

class NombreCategoria(CamelModel):
    nombre: str

class ProductoStockBajo(CamelModel):
    id: int
    codigo: str
    nombre: str
    stock: int
    stock_minimo: int
    categoria: NombreCategoria

class AlertasOut(CamelModel):
    stock_bajo: List[ProductoStockBajo] = []

class CategoriaConteo(CamelModel):
    id: int
    nombre: str
    imagen_url: Optional[str] = None
    count: ConteoProductos = Field(alias="_count")

class HistorialOut(CamelModel):
    id: int
    fecha: date
    total_productos: int
    stock_bajo: int
    valorizacion: Decimal
    valor_venta: Decimal
    rentabilidad: Decimal

class DashboardOut(CamelModel):
    resumen: ResumenOut
    alertas: AlertasOut
    ultimos_movimientos: List[MovimientoOut] = []
    productos_por_categoria: List[CategoriaConteo] = []
    historial: List[HistorialOut] = []

# ===== UPLOAD =====

class ImagenSubidaOut(BaseModel):
    url: str
    public_id: str

class ImagenEliminarIn(BaseModel):
    public_id: Optional[str] = None

class MensajeOut(BaseModel):
    message: str
