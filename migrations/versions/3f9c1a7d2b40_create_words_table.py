"""create words table

Revision ID: 3f9c1a7d2b40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the words table keyed by English text."""
    op.create_table(
        'words',
        sa.Column('english', sa.String(), primary_key=True),
        sa.Column('cantonese_jyutping', sa.String(), nullable=False),
        sa.Column('last_practiced_date', sa.Date(), nullable=False),
        sa.Column('proficiency_level', sa.Integer(), nullable=True, server_default='1'),
        sa.CheckConstraint('proficiency_level >= 1', name='ck_words_proficiency_floor'),
        if_not_exists=True,
    )


def downgrade() -> None:
    """Drop the words table."""
    op.drop_table('words')
