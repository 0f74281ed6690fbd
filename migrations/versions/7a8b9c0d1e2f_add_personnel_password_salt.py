"""add per-account password salt

Existing rows keep password_salt NULL and are re-hashed on their next
successful login. Downgrading breaks logins for accounts
already migrated.

Revision ID: 7a8b9c0d1e2f
Revises: 1f2e3d4c5b6a
Create Date: 2026-10-12 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7a8b9c0d1e2f'
down_revision = '1f2e3d4c5b6a'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('personnel', schema=None) as batch_op:
        batch_op.add_column(sa.Column('password_salt', sa.String(length=128), nullable=True))


def downgrade():
    with op.batch_alter_table('personnel', schema=None) as batch_op:
        batch_op.drop_column('password_salt')
