"""enlace de transferencia en movimientos

Revision ID: 20261019_02
Revises: 20261019_01
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019_02'
down_revision = '20261019_01'
branch_labels = None
depends_on = None


def upgrade() -> None:
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    if 'movimientos' not in inspector.get_table_names():
        return

    columnas = [col['name'] for col in inspector.get_columns('movimientos')]
    if 'transferencia_id' in columnas:
        return

    op.add_column('movimientos', sa.Column('transferencia_id', sa.String(length=36), nullable=True))
    op.create_index('ix_movimientos_transferencia_id', 'movimientos', ['transferencia_id'])

    # Patas existentes: la salida general es la raíz; la entrada la referencia
    op.execute("""
        UPDATE movimientos
        SET transferencia_id = id
        WHERE tipo = 'salida' AND tipo_inventario = 'general'
          AND motivo = 'Transferencia a ubicación'
    """)
    op.execute("""
        UPDATE movimientos
        SET transferencia_id = referencia
        WHERE tipo = 'entrada' AND tipo_inventario = 'detallado'
          AND motivo = 'Transferencia desde inventario general'
          AND referencia IN (SELECT id FROM movimientos WHERE transferencia_id IS NOT NULL)
    """)


def downgrade() -> None:
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    if 'movimientos' not in inspector.get_table_names():
        return

    columnas = [col['name'] for col in inspector.get_columns('movimientos')]
    if 'transferencia_id' in columnas:
        op.drop_index('ix_movimientos_transferencia_id', table_name='movimientos')
        op.drop_column('movimientos', 'transferencia_id')
