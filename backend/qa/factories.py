"""Constructores de datos de prueba compartidos por los tests."""
from decimal import Decimal

from inventario.domain.models import Producto, Rol, Usuario
from inventario.application.services_auth import emitir_token, perfil_de
from inventario.security.auth import cargar_usuario, get_password_hash

PASSWORD = "secreto123"
# bcrypt es lento a propósito: un solo hash para todos los usuarios de prueba
PASSWORD_HASH = get_password_hash(PASSWORD)


def crear_usuario(db, rol: Rol, email: str, nombre: str = "Usuario Prueba") -> Usuario:
    usuario = Usuario(nombre=nombre, email=email, password=PASSWORD_HASH, rol_id=rol.id)
    db.add(usuario)
    db.commit()
    db.refresh(usuario)
    return usuario


def crear_producto(db, categoria, codigo="BEB001", stock=10, stock_minimo=24,
                   precio="2.50", costo="1.80", activo=True, proveedor=None) -> Producto:
    producto = Producto(
        codigo=codigo,
        nombre=f"Producto {codigo}",
        precio=Decimal(precio),
        costo=Decimal(costo),
        stock=stock,
        stock_minimo=stock_minimo,
        activo=activo,
        categoria_id=categoria.id,
        proveedor_id=proveedor.id if proveedor else None,
    )
    db.add(producto)
    db.commit()
    db.refresh(producto)
    return producto


def headers_para(db, usuario) -> dict:
    """Header Authorization con un token emitido para el usuario."""
    token = emitir_token(perfil_de(cargar_usuario(db, usuario.id)))
    return {"Authorization": f"Bearer {token}"}
