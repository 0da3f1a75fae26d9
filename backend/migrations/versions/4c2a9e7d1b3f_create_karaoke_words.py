"""create karaoke_words table

Revision ID: 4c2a9e7d1b3f
Revises:
Create Date: 2025-11-02 18:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e7d1b3f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    # Tables created by `flask db-reset` already match this schema
    if 'karaoke_words' in set(insp.get_table_names()):
        return

    op.create_table(
        'karaoke_words',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('word', sa.String(length=128), nullable=False),
        sa.Column('language', sa.String(length=8), nullable=True),
        sa.Column('theme', sa.String(length=128), nullable=True),
        sa.Column('youtube_url', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_karaoke_words_word', 'karaoke_words', ['word'])
    op.create_index('ix_karaoke_words_language', 'karaoke_words', ['language'])


def downgrade():
    op.drop_index('ix_karaoke_words_language', table_name='karaoke_words')
    op.drop_index('ix_karaoke_words_word', table_name='karaoke_words')
    op.drop_table('karaoke_words')
