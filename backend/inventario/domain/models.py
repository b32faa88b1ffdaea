from sqlalchemy import Integer, String, Boolean, ForeignKey, Date, DateTime, Numeric, Enum, UniqueConstraint, Text
from datetime import datetime, date
from decimal import Decimal
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship, Mapped, mapped_column
from ..db import Base
from .enums import TipoMovimiento

class Categoria(Base):
    __tablename__ = "categorias"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    nombre: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    descripcion: Mapped[str | None] = mapped_column(Text, nullable=True)
    imagen_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    productos = relationship("Producto", back_populates="categoria")

class Proveedor(Base):
    __tablename__ = "proveedores"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    nombre: Mapped[str] = mapped_column(String(200), nullable=False)
    contacto: Mapped[str | None] = mapped_column(String(200), nullable=True)  # Persona de contacto
    telefono: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    direccion: Mapped[str | None] = mapped_column(String(500), nullable=True)
    activo: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    productos = relationship("Producto", back_populates="proveedor")

class Producto(Base):
    __tablename__ = "productos"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    codigo: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    nombre: Mapped[str] = mapped_column(String(200), nullable=False)
    descripcion: Mapped[str | None] = mapped_column(Text, nullable=True)
    precio: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)  # Precio de venta
    costo: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)   # Costo unitario
    # Solo lo escribe el registro de movimientos (después de la creación)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    stock_minimo: Mapped[int] = mapped_column(Integer, default=5, nullable=False)
    activo: Mapped[bool] = mapped_column(Boolean, default=True)
    categoria_id: Mapped[int] = mapped_column(ForeignKey("categorias.id"), index=True, nullable=False)
    proveedor_id: Mapped[int | None] = mapped_column(ForeignKey("proveedores.id"), index=True, nullable=True)
    imagen_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    categoria = relationship("Categoria", back_populates="productos")
    proveedor = relationship("Proveedor", back_populates="productos")
    movimientos = relationship("Movimiento", back_populates="producto", order_by="Movimiento.created_at.desc()")

    @hybrid_property
    def stock_bajo(self) -> bool:
        """Única definición de stock bajo: se usa igual en Python y como predicado SQL."""
        return self.stock <= self.stock_minimo

class Movimiento(Base):
    """Asiento del kardex. Inmutable: solo se crea, se lee o se borra junto con su producto."""
    __tablename__ = "movimientos"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    tipo: Mapped[TipoMovimiento] = mapped_column(Enum(TipoMovimiento, name="tipo_movimiento"), nullable=False)
    cantidad: Mapped[int] = mapped_column(Integer, nullable=False)
    producto_id: Mapped[int] = mapped_column(ForeignKey("productos.id"), index=True, nullable=False)
    descripcion: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)

    producto = relationship("Producto", back_populates="movimientos")

class Usuario(Base):
    __tablename__ = "usuarios"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password: Mapped[str] = mapped_column(String(200), nullable=False)  # hash bcrypt
    rol_id: Mapped[int] = mapped_column(ForeignKey("roles.id"), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    rol = relationship("Rol", back_populates="usuarios")

class Rol(Base):
    """Roles dinámicos del sistema"""
    __tablename__ = "roles"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nombre: Mapped[str] = mapped_column(String(50), unique=True, index=True)  # ej: "ADMIN", "ALMACENERO"
    descripcion: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    permisos = relationship("RolPermiso", back_populates="rol", cascade="all, delete-orphan")
    usuarios = relationship("Usuario", back_populates="rol")

    @property
    def nombres_permisos(self) -> list[str]:
        """Permisos aplanados a sus nombres (lo que viaja en el token)."""
        return [rp.permiso.nombre for rp in self.permisos]

class Permiso(Base):
    __tablename__ = "permisos"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nombre: Mapped[str] = mapped_column(String(100), unique=True, index=True)  # <ENTIDAD>_<ACCION>, ej: "PRODUCTO_CREAR"
    descripcion: Mapped[str | None] = mapped_column(String(255), nullable=True)

class RolPermiso(Base):
    """Relación entre roles y permisos"""
    __tablename__ = "rol_permisos"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    rol_id: Mapped[int] = mapped_column(ForeignKey("roles.id", ondelete="CASCADE"), index=True)
    permiso_id: Mapped[int] = mapped_column(ForeignKey("permisos.id", ondelete="CASCADE"), index=True)
    __table_args__ = (UniqueConstraint('rol_id', 'permiso_id', name='uq_rol_permiso'),)

    rol = relationship("Rol", back_populates="permisos")
    permiso = relationship("Permiso")

class Historial(Base):
    """Foto diaria de las métricas del inventario (una fila por día)."""
    __tablename__ = "historial"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    fecha: Mapped[date] = mapped_column(Date, unique=True, index=True, nullable=False)
    total_productos: Mapped[int] = mapped_column(Integer, default=0)
    stock_bajo: Mapped[int] = mapped_column(Integer, default=0)
    valorizacion: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    valor_venta: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    rentabilidad: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)  # porcentaje
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
