"""
Day Tag Models
--------------

Reusable labels and their links to calendar dates.

    day_tags ──1:N── day_tag_associations (tag_id, date)

A tag is identified by its normalized ``name``; ``display_name`` keeps the
first spelling the user typed. ``usage_count`` is a denormalized count of
the tag's associations, maintained by DayTagManager in the same
transaction as every association insert or delete.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import date, datetime
from typing import Any, Dict, List, Optional

# --- Third party ---
from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from .base import Base, utc_now


class DayTag(Base):
    """
    A reusable label applied to whole days.

    Attributes:
        id: Primary key
        name: Normalized tag name (unique)
        display_name: First user-provided spelling (immutable)
        description: Optional free text (e.g. dosage of a new medicine)
        usage_count: Number of dates currently carrying this tag
        created_at: Creation time (UTC)

    Relationships:
        associations: One-to-many with DayTagAssociation; deleting a tag
            deletes all of its associations
    """

    __tablename__ = "day_tags"
    __table_args__ = (
        CheckConstraint("name != ''", name="ck_day_tag_non_empty_name"),
        CheckConstraint("usage_count >= 0", name="ck_day_tag_usage_non_negative"),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    # ---- Relationships ----
    associations: Mapped[List["DayTagAssociation"]] = relationship(
        "DayTagAssociation",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict view used by exports and the CLI."""
        return {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "usage_count": self.usage_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<DayTag(id={self.id}, name={self.name!r}, usage_count={self.usage_count})>"

    def __str__(self) -> str:
        return self.display_name


class DayTagAssociation(Base):
    """
    Link between one tag and one calendar date.

    Attributes:
        id: Primary key
        tag_id: Owning DayTag
        date: Tagged calendar date
        created_at: Creation time (UTC)

    Constraints:
        (tag_id, date) is unique; at most MAX_TAGS_PER_DAY rows share a date
        (enforced by DayTagManager).
    """

    __tablename__ = "day_tag_associations"
    __table_args__ = (
        UniqueConstraint("tag_id", "date", name="uq_day_tag_assoc_tag_date"),
        Index("idx_day_tag_assoc_date", "date"),
        Index("idx_day_tag_assoc_tag_id", "tag_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("day_tags.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    tag: Mapped["DayTag"] = relationship("DayTag", back_populates="associations")

    def __repr__(self) -> str:
        return f"<DayTagAssociation(tag_id={self.tag_id}, date={self.date})>"
