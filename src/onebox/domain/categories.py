"""Closed set of classification outcomes attached to an email."""

from __future__ import annotations

from enum import Enum


class EmailCategory(str, Enum):
    """Labels a message can carry once classified."""

    INTERESTED = "Interested"
    MEETING_BOOKED = "Meeting Booked"
    NOT_INTERESTED = "Not Interested"
    SPAM = "Spam"
    OUT_OF_OFFICE = "Out of Office"
    UNLABELLED = "Unlabelled"


_BY_VALUE = {c.value: c for c in EmailCategory}


def coerce_category(value: object) -> EmailCategory:
    """Map any classifier output onto an EmailCategory.

    Only an exact label is accepted; everything else, including padded or
    quoted labels, becomes UNLABELLED.
    """
    if isinstance(value, EmailCategory):
        return value
    if not isinstance(value, str):
        return EmailCategory.UNLABELLED
    return _BY_VALUE.get(value, EmailCategory.UNLABELLED)
