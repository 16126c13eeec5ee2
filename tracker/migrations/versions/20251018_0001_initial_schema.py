"""initial_schema

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2025-10-18 09:00:00.000000

Creates the entry tables and the day tag tables:
- entries: date, time and ordering timestamp of every observation
- bowel_movements / notes: one-to-one typed payloads
- day_tags: reusable labels with denormalized usage_count
- day_tag_associations: (tag_id, date) links, unique per pair
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENTRY_TYPES = ('bowel_movement', 'note')
NOTE_CATEGORIES = ('food', 'exercise', 'medication', 'other')


def upgrade() -> None:
    """Create all tracker tables."""
    op.create_table(
        'entries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('type', sa.Enum(*ENTRY_TYPES, name='entry_type'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time', sa.String(length=5), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_entries_type', 'entries', ['type'])
    op.create_index('ix_entries_date', 'entries', ['date'])
    op.create_index('ix_entries_timestamp', 'entries', ['timestamp'])

    op.create_table(
        'bowel_movements',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('entry_id', sa.Integer(), nullable=False),
        sa.Column('consistency', sa.Integer(), nullable=False),
        sa.Column('urgency', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.CheckConstraint('consistency BETWEEN 1 AND 7', name='ck_bm_consistency_range'),
        sa.CheckConstraint('urgency BETWEEN 1 AND 4', name='ck_bm_urgency_range'),
        sa.ForeignKeyConstraint(['entry_id'], ['entries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entry_id')
    )

    op.create_table(
        'notes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('entry_id', sa.Integer(), nullable=False),
        sa.Column('category', sa.Enum(*NOTE_CATEGORIES, name='note_category'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('tags', sa.String(length=200), nullable=True),
        sa.ForeignKeyConstraint(['entry_id'], ['entries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entry_id')
    )
    op.create_index('ix_notes_category', 'notes', ['category'])

    op.create_table(
        'day_tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('display_name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('usage_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("name != ''", name='ck_day_tag_non_empty_name'),
        sa.CheckConstraint('usage_count >= 0', name='ck_day_tag_usage_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_day_tags_name', 'day_tags', ['name'], unique=True)

    op.create_table(
        'day_tag_associations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['tag_id'], ['day_tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tag_id', 'date', name='uq_day_tag_assoc_tag_date')
    )
    op.create_index('idx_day_tag_assoc_date', 'day_tag_associations', ['date'])
    op.create_index('idx_day_tag_assoc_tag_id', 'day_tag_associations', ['tag_id'])


def downgrade() -> None:
    """Drop all tracker tables."""
    op.drop_index('idx_day_tag_assoc_tag_id', table_name='day_tag_associations')
    op.drop_index('idx_day_tag_assoc_date', table_name='day_tag_associations')
    op.drop_table('day_tag_associations')
    op.drop_index('ix_day_tags_name', table_name='day_tags')
    op.drop_table('day_tags')
    op.drop_index('ix_notes_category', table_name='notes')
    op.drop_table('notes')
    op.drop_table('bowel_movements')
    op.drop_index('ix_entries_timestamp', table_name='entries')
    op.drop_index('ix_entries_date', table_name='entries')
    op.drop_index('ix_entries_type', table_name='entries')
    op.drop_table('entries')
