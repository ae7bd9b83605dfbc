"""Create asset, log and quantity tables

Revision ID: 3b1f0c9a7e21
Revises: 
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b1f0c9a7e21'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('asset',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('log_asset',
        sa.Column('log_id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['asset_id'], ['asset.id'], ),
        sa.ForeignKeyConstraint(['log_id'], ['log.id'], ),
        sa.PrimaryKeyConstraint('log_id', 'asset_id')
    )
    op.create_table('quantity',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('log_id', sa.Integer(), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('measure', sa.String(length=50), nullable=True),
        sa.Column('units', sa.String(length=50), nullable=True),
        sa.Column('label', sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(['log_id'], ['log.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('asset', schema=None) as batch_op:
        batch_op.create_index('ix_asset_type_status', ['type', 'status'], unique=False)


def downgrade():
    with op.batch_alter_table('asset', schema=None) as batch_op:
        batch_op.drop_index('ix_asset_type_status')

    op.drop_table('quantity')
    op.drop_table('log_asset')
    op.drop_table('log')
    op.drop_table('asset')
