"""create user, matches and ping tables

Revision ID: 4b7e2d9c1a30
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b7e2d9c1a30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('title', sa.String(length=16), nullable=True),
            sa.Column('first_name', sa.String(length=64), nullable=True),
            sa.Column('last_name', sa.String(length=64), nullable=True),
            sa.Column('author', sa.String(length=128), nullable=True),
        )

    if 'matches' not in existing_tables:
        op.create_table(
            'matches',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('match_id', sa.String(length=16), nullable=False),
            sa.Column('title', sa.String(length=128), nullable=False),
            sa.Column('instructions', sa.Text(), nullable=True),
            sa.Column('options', sa.JSON(), nullable=True),
            sa.Column('pairs', sa.JSON(), nullable=False),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
            sa.Column('create_date', sa.DateTime(), nullable=True),
            sa.Column('update_date', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_matches_match_id', 'matches', ['match_id'], unique=True)

    if 'ping' not in existing_tables:
        op.create_table(
            'ping',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('ip_address', sa.String(length=64), nullable=True),
            sa.Column('game_id', sa.String(length=16), nullable=False),
            sa.Column('game_type', sa.String(length=8), nullable=False),
            sa.Column('results', sa.JSON(), nullable=True),
            sa.Column('create_date', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_ping_game_id', 'ping', ['game_id'])


def downgrade():
    op.drop_index('ix_ping_game_id', table_name='ping')
    op.drop_table('ping')
    op.drop_index('ix_matches_match_id', table_name='matches')
    op.drop_table('matches')
    op.drop_table('user')
