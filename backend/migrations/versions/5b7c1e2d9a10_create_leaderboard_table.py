"""create leaderboard table

Revision ID: 5b7c1e2d9a10
Revises:
Create Date: 2026-01-12 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b7c1e2d9a10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'leaderboard' in set(insp.get_table_names()):
        return

    op.create_table(
        'leaderboard',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=20), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('rank', sa.String(length=3), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('score BETWEEN 0 AND 9999', name='ck_leaderboard_score_range'),
        sa.CheckConstraint("rank IN ('C', 'B', 'A', 'S', 'SSS', 'KO')", name='ck_leaderboard_rank_label'),
        sa.CheckConstraint('length(name) BETWEEN 1 AND 20', name='ck_leaderboard_name_length'),
    )
    op.create_index('ix_leaderboard_score_created_at', 'leaderboard', ['score', 'created_at'])


def downgrade():
    op.drop_index('ix_leaderboard_score_created_at', table_name='leaderboard')
    op.drop_table('leaderboard')
