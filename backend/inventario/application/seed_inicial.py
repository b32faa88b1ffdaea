"""
Datos iniciales del sistema.

Crea (sin duplicar si ya existen):
- Catálogo de permisos <ENTIDAD>_<ACCION>
- Roles ADMIN (todos los permisos) y ALMACENERO (lectura + movimientos)
- Usuario administrador (ADMIN_EMAIL / ADMIN_PASSWORD)
- Opcionalmente, un catálogo demo de categorías, proveedores y productos
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable, List

from sqlalchemy.orm import Session

from ..config import settings
from ..domain.enums import RolSistema
from ..domain.models import Categoria, Permiso, Producto, Proveedor, Rol, RolPermiso, Usuario
from ..security.auth import get_password_hash

logger = logging.getLogger(__name__)

ACCIONES_CRUD = ("VER", "CREAR", "EDITAR", "ELIMINAR")
ENTIDADES_CRUD = ("CATEGORIA", "PROVEEDOR", "PRODUCTO", "USUARIO", "ROL")

PERMISOS: List[str] = (
    [f"{e}_{a}" for e in ENTIDADES_CRUD for a in ACCIONES_CRUD]
    + ["MOVIMIENTO_VER", "MOVIMIENTO_CREAR", "DASHBOARD_VER"]
)

PERMISOS_ALMACENERO: List[str] = [
    "CATEGORIA_VER",
    "PROVEEDOR_VER",
    "PRODUCTO_VER",
    "MOVIMIENTO_VER",
    "MOVIMIENTO_CREAR",
    "DASHBOARD_VER",
]

DESCRIPCION_ACCION = {"VER": "Ver", "CREAR": "Crear", "EDITAR": "Editar", "ELIMINAR": "Eliminar"}
PLURAL_ENTIDAD = {
    "CATEGORIA": "categorías",
    "PROVEEDOR": "proveedores",
    "PRODUCTO": "productos",
    "USUARIO": "usuarios",
    "ROL": "roles",
    "MOVIMIENTO": "movimientos",
}


def _descripcion(nombre: str) -> str:
    if nombre == "DASHBOARD_VER":
        return "Ver el dashboard"
    if nombre == "MOVIMIENTO_CREAR":
        return "Registrar movimientos de stock"
    entidad, accion = nombre.split("_", 1)
    return f"{DESCRIPCION_ACCION[accion]} {PLURAL_ENTIDAD[entidad]}"


def seed_permisos(db: Session) -> Dict[str, Permiso]:
    existentes = {p.nombre: p for p in db.query(Permiso).all()}
    for nombre in PERMISOS:
        if nombre not in existentes:
            permiso = Permiso(nombre=nombre, descripcion=_descripcion(nombre))
            db.add(permiso)
            existentes[nombre] = permiso
    db.flush()
    return existentes


def seed_rol(db: Session, nombre: str, descripcion: str, permisos: Iterable[Permiso]) -> Rol:
    """Crea el rol si falta y le agrega los permisos que no tenga (no quita ninguno)."""
    rol = db.query(Rol).filter(Rol.nombre == nombre).first()
    if not rol:
        rol = Rol(nombre=nombre, descripcion=descripcion)
        db.add(rol)
        db.flush()
    asignados = {rp.permiso_id for rp in rol.permisos}
    for permiso in permisos:
        if permiso.id not in asignados:
            rol.permisos.append(RolPermiso(permiso_id=permiso.id))
    db.flush()
    return rol


def seed_admin(db: Session, rol_admin: Rol, email: str, password: str) -> Usuario:
    email = email.strip().lower()
    admin = db.query(Usuario).filter(Usuario.email == email).first()
    if not admin:
        admin = Usuario(
            nombre="Administrador",
            email=email,
            password=get_password_hash(password),
            rol_id=rol_admin.id,
        )
        db.add(admin)
        db.flush()
        logger.info("Usuario administrador creado: %s", email)
    return admin


DEMO_CATEGORIAS = [
    ("Bebidas", "Gaseosas, aguas y jugos"),
    ("Abarrotes", "Arroz, azúcar, fideos y conservas"),
    ("Limpieza", "Detergentes y artículos de limpieza"),
]

DEMO_PROVEEDORES = [
    ("Distribuidora Central", "Carlos Ramos", "987654321", "ventas@distcentral.com"),
    ("Comercial del Norte", "Lucía Vega", "912345678", "pedidos@comnorte.com"),
]

# codigo, nombre, categoría, proveedor, precio, costo, stock, stock_minimo
DEMO_PRODUCTOS = [
    ("BEB001", "Gaseosa 500ml", "Bebidas", "Distribuidora Central", "2.50", "1.80", 10, 24),
    ("BEB002", "Agua mineral 625ml", "Bebidas", "Distribuidora Central", "1.50", "0.90", 48, 24),
    ("ABA001", "Arroz extra 5kg", "Abarrotes", "Comercial del Norte", "22.90", "18.50", 15, 5),
    ("ABA002", "Azúcar rubia 1kg", "Abarrotes", "Comercial del Norte", "4.20", "3.40", 3, 10),
    ("LIM001", "Detergente 900g", "Limpieza", None, "9.90", "7.10", 12, 6),
]


def seed_demo(db: Session) -> int:
    """Catálogo de ejemplo. Devuelve la cantidad de productos creados."""
    categorias = {}
    for nombre, descripcion in DEMO_CATEGORIAS:
        cat = db.query(Categoria).filter(Categoria.nombre == nombre).first()
        if not cat:
            cat = Categoria(nombre=nombre, descripcion=descripcion)
            db.add(cat)
        categorias[nombre] = cat

    proveedores = {}
    for nombre, contacto, telefono, email in DEMO_PROVEEDORES:
        prov = db.query(Proveedor).filter(Proveedor.nombre == nombre).first()
        if not prov:
            prov = Proveedor(nombre=nombre, contacto=contacto, telefono=telefono, email=email)
            db.add(prov)
        proveedores[nombre] = prov
    db.flush()

    creados = 0
    for codigo, nombre, cat, prov, precio, costo, stock, stock_minimo in DEMO_PRODUCTOS:
        if db.query(Producto).filter(Producto.codigo == codigo).first():
            continue
        db.add(Producto(
            codigo=codigo,
            nombre=nombre,
            precio=Decimal(precio),
            costo=Decimal(costo),
            stock=stock,
            stock_minimo=stock_minimo,
            categoria_id=categorias[cat].id,
            proveedor_id=proveedores[prov].id if prov else None,
        ))
        creados += 1
    db.flush()
    return creados


def seed_inicial(db: Session, demo: bool = False, admin_email: str = None, admin_password: str = None) -> dict:
    """Permisos, roles y admin; con demo=True también el catálogo de ejemplo."""
    permisos = seed_permisos(db)
    rol_admin = seed_rol(db, RolSistema.ADMIN.value, "Administrador del sistema", permisos.values())
    seed_rol(
        db,
        RolSistema.ALMACENERO.value,
        "Gestión de stock y consulta del catálogo",
        [permisos[n] for n in PERMISOS_ALMACENERO],
    )
    admin = seed_admin(
        db,
        rol_admin,
        admin_email or settings.admin_email,
        admin_password or settings.admin_password,
    )
    result = {"permisos": len(permisos), "admin": admin.email, "productos_demo": 0}
    if demo:
        result["productos_demo"] = seed_demo(db)
    db.commit()
    return result
