"""create owner and photo tables

Revision ID: 4b7e2c91d0a3
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7e2c91d0a3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _photo_columns(owner_column: str, owner_table: str):
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column(owner_column, sa.Uuid(), nullable=False),
        sa.Column('account_id', sa.Uuid(), nullable=False),
        sa.Column('storage_key', sa.String(length=500), nullable=False),
        sa.Column('thumbnail_storage_key', sa.String(length=500), nullable=True),
        sa.Column('original_file_name', sa.String(length=255), nullable=False),
        sa.Column('content_type', sa.String(length=100), nullable=False),
        sa.Column('file_size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False),
        sa.Column('created_by_user_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint([owner_column], [f'{owner_table}.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    ]


def _photo_indexes(table: str, owner_column: str) -> None:
    op.create_index(f'ix_{table}_account_id', table, ['account_id'])
    op.create_index(f'ix_{table}_{owner_column}_display_order', table, [owner_column, 'display_order'])
    op.create_index(
        f'ix_{table}_{owner_column}_is_primary_unique',
        table,
        [owner_column, 'is_primary'],
        unique=True,
        postgresql_where=sa.text('is_primary'),
        sqlite_where=sa.text('is_primary'),
    )


def upgrade() -> None:
    op.create_table(
        'properties',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('account_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_properties_account_id', 'properties', ['account_id'])

    op.create_table(
        'work_orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('account_id', sa.Uuid(), nullable=False),
        sa.Column('property_id', sa.Uuid(), nullable=False),
        sa.Column('description', sa.String(length=5000), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_work_orders_account_id', 'work_orders', ['account_id'])

    op.create_table('property_photos', *_photo_columns('property_id', 'properties'))
    _photo_indexes('property_photos', 'property_id')

    op.create_table('work_order_photos', *_photo_columns('work_order_id', 'work_orders'))
    _photo_indexes('work_order_photos', 'work_order_id')


def downgrade() -> None:
    op.drop_table('work_order_photos')
    op.drop_table('property_photos')
    op.drop_index('ix_work_orders_account_id', table_name='work_orders')
    op.drop_table('work_orders')
    op.drop_index('ix_properties_account_id', table_name='properties')
    op.drop_table('properties')
