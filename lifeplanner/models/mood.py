"""Mood log models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class Mood(str, Enum):
    TERRIBLE = "terrible"
    BAD = "bad"
    NEUTRAL = "neutral"
    GOOD = "good"
    GREAT = "great"


class MoodEntry(BaseModel):
    """One mood check-in. Entries are kept newest first."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    date: datetime = Field(default_factory=datetime.now)
    mood: Mood
    note: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class MoodSummary(BaseModel):
    """
    Read-side statistics over a set of mood entries.

    Nothing here is stored; it is recomputed from the entries on demand.
    """

    total_entries: int = 0
    average_score: Optional[float] = Field(
        default=None,
        description="Mean of the 1-5 mood scores, None when there are no entries"
    )
    average_mood: Optional[Mood] = None
    mood_counts: dict[Mood, int] = Field(
        default_factory=lambda: {mood: 0 for mood in Mood}
    )
    good_days: int = 0
    tagged_entries: int = 0
    common_tags: list[str] = Field(default_factory=list)
