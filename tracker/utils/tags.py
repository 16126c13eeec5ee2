#!/usr/bin/env python3
"""
tags.py
-------------------
Day tag name normalization, validation and list helpers.

A tag has two spellings: the display name the user typed first, and the
normalized name (trimmed, lower-cased) used as its identity. Everything
that looks a tag up by text goes through normalize_tag_name().

Examples:
    >>> normalize_tag_name("  Vacation  ")
    'vacation'
    >>> validate_tag_name("New <Medicine>").is_valid
    False
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

TAG_MIN_LENGTH = 1
TAG_MAX_LENGTH = 50
MAX_TAGS_PER_DAY = 10

ALLOWED_PATTERN = re.compile(r"[A-Za-z0-9 _\-]+")
FORBIDDEN_CHARS = re.compile(r"[<>{}\[\]\\/|\"']")


@dataclass
class TagValidationResult:
    """Outcome of validate_tag_name()."""

    is_valid: bool
    errors: List[Dict[str, Any]] = field(default_factory=list)


def normalize_tag_name(tag_name: str) -> str:
    """Trim surrounding whitespace and lower-case."""
    return tag_name.strip().lower()


def validate_tag_name(tag_name: str) -> TagValidationResult:
    """
    Check length and character restrictions of a tag name.

    Every violated rule contributes one error; the input is not modified.

    Args:
        tag_name: Tag name as typed by the user

    Returns:
        TagValidationResult with an error list (empty when valid)
    """
    errors: List[Dict[str, Any]] = []

    if len(tag_name.strip()) < TAG_MIN_LENGTH:
        errors.append(
            {
                "field": "display_name",
                "message": "Tag cannot be empty",
                "code": "TAG_EMPTY",
            }
        )

    if len(tag_name) > TAG_MAX_LENGTH:
        errors.append(
            {
                "field": "display_name",
                "message": f"Tag must be {TAG_MAX_LENGTH} characters or less",
                "code": "TAG_TOO_LONG",
            }
        )

    if not ALLOWED_PATTERN.fullmatch(tag_name):
        errors.append(
            {
                "field": "display_name",
                "message": "Tag can only contain letters, numbers, spaces, "
                "hyphens, and underscores",
                "code": "TAG_INVALID_CHARS",
            }
        )

    if FORBIDDEN_CHARS.search(tag_name):
        errors.append(
            {
                "field": "display_name",
                "message": "Tag contains invalid characters",
                "code": "TAG_FORBIDDEN_CHARS",
            }
        )

    return TagValidationResult(is_valid=not errors, errors=errors)


def deduplicate_tags(tags: Sequence[str]) -> List[str]:
    """
    Drop case-insensitive duplicates, keeping the first spelling.

    Examples:
        >>> deduplicate_tags(["Vacation", "vacation", "Work"])
        ['Vacation', 'Work']
    """
    seen = set()
    result = []
    for tag in tags:
        key = normalize_tag_name(tag)
        if key in seen:
            continue
        seen.add(key)
        result.append(tag)
    return result


def truncate_tag_name(tag_name: str, max_length: int = 20) -> str:
    """Shorten long names for display, ending in '...'."""
    if len(tag_name) <= max_length:
        return tag_name
    return tag_name[: max_length - 3] + "..."
