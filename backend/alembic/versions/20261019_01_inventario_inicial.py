"""tablas iniciales del inventario multi-negocio

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019_01'
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    # Idempotente: init_db() puede haber creado las tablas en el primer arranque
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    tablas = set(inspector.get_table_names())

    if 'negocios' not in tablas:
        op.create_table(
            'negocios',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('nombre', sa.String(length=200), nullable=False),
            sa.Column('direccion', sa.String(length=300), nullable=True),
            sa.Column('telefono', sa.String(length=30), nullable=True),
            sa.Column('email', sa.String(length=255), nullable=True),
            sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('fecha_creacion', sa.DateTime(), nullable=False),
            sa.Column('fecha_actualizacion', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_negocios_nombre', 'negocios', ['nombre'])
        op.create_index('ix_negocios_activo', 'negocios', ['activo'])

    if 'inventario_general' not in tablas:
        op.create_table(
            'inventario_general',
            *_columnas_producto(),
            sa.CheckConstraint('stock >= 0', name='ck_inventario_general_stock'),
        )
        _indices_producto('inventario_general')

    if 'inventario_detallado' not in tablas:
        op.create_table(
            'inventario_detallado',
            *_columnas_producto(),
            sa.Column('negocio_id', sa.String(length=36), sa.ForeignKey('negocios.id'), nullable=False),
            sa.Column('producto_general_id', sa.String(length=36), sa.ForeignKey('inventario_general.id'), nullable=True),
            sa.CheckConstraint('stock >= 0', name='ck_inventario_detallado_stock'),
        )
        _indices_producto('inventario_detallado')
        op.create_index('ix_inventario_detallado_negocio_id', 'inventario_detallado', ['negocio_id'])
        op.create_index('ix_inventario_detallado_producto_general_id', 'inventario_detallado', ['producto_general_id'])

    if 'movimientos' not in tablas:
        op.create_table(
            'movimientos',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('tipo', sa.String(length=20), nullable=False),
            sa.Column('producto_id', sa.String(length=36), nullable=False),
            sa.Column('tipo_inventario', sa.String(length=20), nullable=False),
            sa.Column('negocio_id', sa.String(length=36), sa.ForeignKey('negocios.id'), nullable=True),
            sa.Column('cantidad', sa.Numeric(12, 4), nullable=False),
            sa.Column('unidad', sa.String(length=30), nullable=False, server_default=''),
            sa.Column('precio_unitario', sa.Numeric(14, 2), nullable=True),
            sa.Column('total', sa.Numeric(14, 2), nullable=True),
            sa.Column('motivo', sa.String(length=300), nullable=True),
            sa.Column('usuario_id', sa.String(length=36), nullable=True),
            sa.Column('referencia', sa.String(length=100), nullable=True),
            sa.Column('notas', sa.Text(), nullable=True),
            sa.Column('movimiento_revertido_id', sa.String(length=36), nullable=True, unique=True),
            sa.Column('fecha_movimiento', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_movimientos_producto', 'movimientos', ['producto_id', 'tipo_inventario'])
        op.create_index('ix_movimientos_tipo', 'movimientos', ['tipo'])
        op.create_index('ix_movimientos_negocio_id', 'movimientos', ['negocio_id'])
        op.create_index('ix_movimientos_fecha_movimiento', 'movimientos', ['fecha_movimiento'])

    if 'notificaciones' not in tablas:
        op.create_table(
            'notificaciones',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('usuario_id', sa.String(length=36), nullable=True),
            sa.Column('tipo', sa.String(length=20), nullable=False),
            sa.Column('titulo', sa.String(length=200), nullable=False),
            sa.Column('mensaje', sa.Text(), nullable=False),
            sa.Column('leida', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('url_accion', sa.String(length=300), nullable=True),
            sa.Column('fecha_creacion', sa.DateTime(), nullable=False),
            sa.Column('fecha_lectura', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_notificaciones_usuario_id', 'notificaciones', ['usuario_id'])
        op.create_index('ix_notificaciones_leida', 'notificaciones', ['leida'])
        op.create_index('ix_notificaciones_fecha_creacion', 'notificaciones', ['fecha_creacion'])

    if 'configuracion' not in tablas:
        op.create_table(
            'configuracion',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('clave', sa.String(length=100), nullable=False),
            sa.Column('valor', sa.Text(), nullable=True),
            sa.Column('tipo', sa.String(length=20), nullable=False),
            sa.Column('descripcion', sa.String(length=300), nullable=True),
            sa.Column('categoria', sa.String(length=100), nullable=True),
            sa.Column('fecha_actualizacion', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_configuracion_clave', 'configuracion', ['clave'], unique=True)
        op.create_index('ix_configuracion_categoria', 'configuracion', ['categoria'])


def _columnas_producto():
    return [
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('nombre', sa.String(length=200), nullable=False),
        sa.Column('categoria', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('unidad', sa.String(length=30), nullable=False, server_default=''),
        sa.Column('stock', sa.Numeric(12, 4), nullable=False, server_default='0'),
        sa.Column('stock_minimo', sa.Numeric(12, 4), nullable=False, server_default='0'),
        sa.Column('precio', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('estado', sa.String(length=20), nullable=False, server_default='disponible'),
        sa.Column('imagen_url', sa.String(length=500), nullable=True),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('fecha_creacion', sa.DateTime(), nullable=False),
        sa.Column('fecha_actualizacion', sa.DateTime(), nullable=False),
    ]


def _indices_producto(tabla: str) -> None:
    op.create_index(f'ix_{tabla}_nombre', tabla, ['nombre'])
    op.create_index(f'ix_{tabla}_estado', tabla, ['estado'])
    op.create_index(f'ix_{tabla}_activo', tabla, ['activo'])


def downgrade() -> None:
    for tabla in ('configuracion', 'notificaciones', 'movimientos', 'inventario_detallado', 'inventario_general', 'negocios'):
        op.drop_table(tabla)
