"""esquema inicial del inventario

Revision ID: 20261001_01
Revises:
Create Date: 2026-10-01

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261001_01'
down_revision = None
branch_labels = None
depends_on = None

def _timestamps():
	return [
		sa.Column('created_at', sa.DateTime(), nullable=True),
		sa.Column('updated_at', sa.DateTime(), nullable=True),
	]

def upgrade() -> None:
	op.create_table(
		'categorias',
		sa.Column('id', sa.Integer(), primary_key=True),
		sa.Column('nombre', sa.String(100), nullable=False, unique=True),
		sa.Column('descripcion', sa.Text(), nullable=True),
		sa.Column('imagen_url', sa.String(500), nullable=True),
		*_timestamps(),
	)
	op.create_index('ix_categorias_id', 'categorias', ['id'])

	op.create_table(
		'proveedores',
		sa.Column('id', sa.Integer(), primary_key=True),
		sa.Column('nombre', sa.String(200), nullable=False),
		sa.Column('contacto', sa.String(200), nullable=True),
		sa.Column('telefono', sa.String(30), nullable=True),
		sa.Column('email', sa.String(255), nullable=True),
		sa.Column('direccion', sa.String(500), nullable=True),
		sa.Column('activo', sa.Boolean(), nullable=True),
		*_timestamps(),
	)
	op.create_index('ix_proveedores_id', 'proveedores', ['id'])

	op.create_table(
		'productos',
		sa.Column('id', sa.Integer(), primary_key=True),
		sa.Column('codigo', sa.String(50), nullable=False),
		sa.Column('nombre', sa.String(200), nullable=False),
		sa.Column('descripcion', sa.Text(), nullable=True),
		sa.Column('precio', sa.Numeric(10, 2), nullable=False),
		sa.Column('costo', sa.Numeric(10, 2), nullable=False),
		sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
		sa.Column('stock_minimo', sa.Integer(), nullable=False, server_default='5'),
		sa.Column('activo', sa.Boolean(), nullable=True),
		sa.Column('categoria_id', sa.Integer(), sa.ForeignKey('categorias.id'), nullable=False),
		sa.Column('proveedor_id', sa.Integer(), sa.ForeignKey('proveedores.id'), nullable=True),
		sa.Column('imagen_url', sa.String(500), nullable=True),
		*_timestamps(),
	)
	op.create_index('ix_productos_id', 'productos', ['id'])
	op.create_index('ix_productos_codigo', 'productos', ['codigo'], unique=True)
	op.create_index('ix_productos_categoria_id', 'productos', ['categoria_id'])
	op.create_index('ix_productos_proveedor_id', 'productos', ['proveedor_id'])

	op.create_table(
		'movimientos',
		sa.Column('id', sa.Integer(), primary_key=True),
		sa.Column('tipo', sa.Enum('ENTRADA', 'SALIDA', 'AJUSTE', name='tipo_movimiento'), nullable=False),
		sa.Column('cantidad', sa.Integer(), nullable=False),
		sa.Column('producto_id', sa.Integer(), sa.ForeignKey('productos.id'), nullable=False),
		sa.Column('descripcion', sa.String(500), nullable=True),
		sa.Column('created_at', sa.DateTime(), nullable=True),
	)
	op.create_index('ix_movimientos_id', 'movimientos', ['id'])
	op.create_index('ix_movimientos_producto_id', 'movimientos', ['producto_id'])
	op.create_index('ix_movimientos_created_at', 'movimientos', ['created_at'])

	op.create_table(
		'permisos',
		sa.Column('id', sa.Integer(), primary_key=True),
		sa.Column('nombre', sa.String(100), nullable=True),
		sa.Column('descripcion', sa.String(255), nullable=True),
	)
	op.create_index('ix_permisos_nombre', 'permisos', ['nombre'], unique=True)

	op.create_table(
		'roles',
		sa.Column('id', sa.Integer(), primary_key=True),
		sa.Column('nombre', sa.String(50), nullable=True),
		sa.Column('descripcion', sa.String(500), nullable=True),
		*_timestamps(),
	)
	op.create_index('ix_roles_nombre', 'roles', ['nombre'], unique=True)

	op.create_table(
		'rol_permisos',
		sa.Column('id', sa.Integer(), primary_key=True),
		sa.Column('rol_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=True),
		sa.Column('permiso_id', sa.Integer(), sa.ForeignKey('permisos.id', ondelete='CASCADE'), nullable=True),
		sa.UniqueConstraint('rol_id', 'permiso_id', name='uq_rol_permiso'),
	)
	op.create_index('ix_rol_permisos_rol_id', 'rol_permisos', ['rol_id'])
	op.create_index('ix_rol_permisos_permiso_id', 'rol_permisos', ['permiso_id'])

	op.create_table(
		'usuarios',
		sa.Column('id', sa.Integer(), primary_key=True),
		sa.Column('nombre', sa.String(100), nullable=False),
		sa.Column('email', sa.String(255), nullable=False),
		sa.Column('password', sa.String(200), nullable=False),
		sa.Column('rol_id', sa.Integer(), sa.ForeignKey('roles.id'), nullable=False),
		*_timestamps(),
	)
	op.create_index('ix_usuarios_email', 'usuarios', ['email'], unique=True)
	op.create_index('ix_usuarios_rol_id', 'usuarios', ['rol_id'])

	op.create_table(
		'historial',
		sa.Column('id', sa.Integer(), primary_key=True),
		sa.Column('fecha', sa.Date(), nullable=False),
		sa.Column('total_productos', sa.Integer(), nullable=True),
		sa.Column('stock_bajo', sa.Integer(), nullable=True),
		sa.Column('valorizacion', sa.Numeric(14, 2), nullable=True),
		sa.Column('valor_venta', sa.Numeric(14, 2), nullable=True),
		sa.Column('rentabilidad', sa.Numeric(10, 2), nullable=True),
		sa.Column('created_at', sa.DateTime(), nullable=True),
	)
	op.create_index('ix_historial_fecha', 'historial', ['fecha'], unique=True)


def downgrade() -> None:
	op.drop_table('historial')
	op.drop_table('usuarios')
	op.drop_table('rol_permisos')
	op.drop_table('roles')
	op.drop_table('permisos')
	op.drop_table('movimientos')
	op.drop_table('productos')
	op.drop_table('proveedores')
	op.drop_table('categorias')
	sa.Enum(name='tipo_movimiento').drop(op.get_bind(), checkfirst=True)
