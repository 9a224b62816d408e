"""member registry tables

Revision ID: c20261017120000
Revises:
Create Date: 2026-10-17 12:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c20261017120000'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = set(inspector.get_table_names())

    if 'user' not in tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=80), nullable=False, unique=True),
            sa.Column('password_hash', sa.String(length=256), nullable=True),
            sa.Column('role', sa.String(length=20), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
        )

    if 'member' not in tables:
        op.create_table(
            'member',
            sa.Column('id', sa.String(length=32), primary_key=True),
            sa.Column('full_name', sa.String(length=150), nullable=False),
            sa.Column('email', sa.String(length=120), nullable=False, unique=True),
            sa.Column('phone', sa.String(length=30), nullable=False),
            sa.Column('birth_date', sa.Date(), nullable=True),
            sa.Column('birth_place', sa.String(length=150), nullable=True),
            sa.Column('id_number', sa.String(length=50), nullable=True, unique=True),
            sa.Column('activity', sa.String(length=150), nullable=True),
            sa.Column('photo', sa.String(length=200), nullable=True),
            sa.Column('qr_code', sa.String(length=200), nullable=True),
            sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
            sa.Column('approved_by', sa.Integer(), sa.ForeignKey('user.id', ondelete='SET NULL'), nullable=True),
            sa.Column('approved_at', sa.DateTime(), nullable=True),
            sa.Column('member_id', sa.String(length=20), nullable=False, unique=True),
            sa.Column('issued_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.CheckConstraint(
                "status IN ('pending', 'approved', 'rejected')",
                name='ck_member_status',
            ),
        )
        op.create_index('ix_member_created_at', 'member', ['created_at'])


def downgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = set(inspector.get_table_names())
    if 'member' in tables:
        op.drop_index('ix_member_created_at', table_name='member')
        op.drop_table('member')
    if 'user' in tables:
        op.drop_table('user')
