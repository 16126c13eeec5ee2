"""
Entry Models
------------

Entries and their typed payloads.

Every entry row carries the calendar date, clock time and a combined
timestamp used for ordering. The observation itself lives in exactly one
of two one-to-one payload tables, selected by ``Entry.type``:

    entries ──1:1── bowel_movements   (type = bowel_movement)
            └─1:1── notes             (type = note)

Entries have no link to day tags. The tags of an entry are the tags of its
date, looked up at query time.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import date, datetime
from typing import Any, Dict, Optional

# --- Third party ---
from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from .base import Base, utc_now
from .enums import EntryType, NoteCategory


class Entry(Base):
    """
    A single observation recorded at a date and time.

    Attributes:
        id: Primary key
        type: EntryType (bowel_movement or note)
        date: Calendar date of the observation
        time: Clock time, ``HH:MM``
        timestamp: Date and time combined, used for ordering
        created_at: Row creation time (UTC)
        updated_at: Last modification time (UTC)

    Relationships:
        bowel_movement: One-to-one payload for bowel movement entries
        note: One-to-one payload for note entries
    """

    __tablename__ = "entries"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    type: Mapped[EntryType] = mapped_column(
        SQLEnum(EntryType, values_callable=lambda e: [m.value for m in e],
                name="entry_type", validate_strings=True),
        nullable=False,
        index=True,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    time: Mapped[str] = mapped_column(String(5), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    bowel_movement: Mapped[Optional["BowelMovement"]] = relationship(
        "BowelMovement",
        back_populates="entry",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    note: Mapped[Optional["Note"]] = relationship(
        "Note",
        back_populates="entry",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict view used by exports and the CLI."""
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "date": self.date.isoformat(),
            "time": self.time,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.type is EntryType.BOWEL_MOVEMENT and self.bowel_movement:
            data["bowel_movement"] = {
                "consistency": self.bowel_movement.consistency,
                "urgency": self.bowel_movement.urgency,
                "notes": self.bowel_movement.notes,
            }
        elif self.type is EntryType.NOTE and self.note:
            data["note"] = {
                "category": self.note.category.value,
                "content": self.note.content,
                "tags": self.note.tags,
            }
        return data

    def __repr__(self) -> str:
        return f"<Entry(id={self.id}, type={self.type.value}, date={self.date}, time={self.time})>"


class BowelMovement(Base):
    """
    Bowel movement payload.

    Attributes:
        consistency: Bristol stool scale, 1..7
        urgency: Urgency level, 1..4
        notes: Optional free text (up to 500 characters)
    """

    __tablename__ = "bowel_movements"
    __table_args__ = (
        CheckConstraint("consistency BETWEEN 1 AND 7", name="ck_bm_consistency_range"),
        CheckConstraint("urgency BETWEEN 1 AND 4", name="ck_bm_urgency_range"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    consistency: Mapped[int] = mapped_column(Integer, nullable=False)
    urgency: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    entry: Mapped["Entry"] = relationship("Entry", back_populates="bowel_movement")


class Note(Base):
    """
    Free-form note payload.

    Attributes:
        category: NoteCategory
        content: Note text (up to 1000 characters)
        tags: Optional comma-separated entry-level tags; unrelated to day tags
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    category: Mapped[NoteCategory] = mapped_column(
        SQLEnum(NoteCategory, values_callable=lambda e: [m.value for m in e],
                name="note_category", validate_strings=True),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    entry: Mapped["Entry"] = relationship("Entry", back_populates="note")
