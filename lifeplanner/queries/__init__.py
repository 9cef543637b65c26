"""Read-side computations over store state."""

from lifeplanner.queries.mood import (
    MOOD_SCORES,
    average_mood_score,
    label_for_average,
    mood_score,
    summarize_moods,
)

__all__ = [
    "MOOD_SCORES",
    "average_mood_score",
    "label_for_average",
    "mood_score",
    "summarize_moods",
]
