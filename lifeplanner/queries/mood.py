"""
Mood Statistics

DESIGN DECISION: Mood statistics are DERIVED, never stored.
They are recomputed from the entries every time they are asked for,
so they cannot drift from the log.

Scoring: terrible=1, bad=2, neutral=3, good=4, great=5.
The average is mapped back to a label at 4.5 / 3.5 / 2.5 / 1.5.
"""

from collections import Counter
from typing import Iterable, Optional

from lifeplanner.models.mood import Mood, MoodEntry, MoodSummary


MOOD_SCORES: dict[Mood, int] = {
    Mood.TERRIBLE: 1,
    Mood.BAD: 2,
    Mood.NEUTRAL: 3,
    Mood.GOOD: 4,
    Mood.GREAT: 5,
}

# (lower bound, label), checked top-down
_LABEL_THRESHOLDS: list[tuple[float, Mood]] = [
    (4.5, Mood.GREAT),
    (3.5, Mood.GOOD),
    (2.5, Mood.NEUTRAL),
    (1.5, Mood.BAD),
]

COMMON_TAG_LIMIT = 5


def mood_score(mood: Mood) -> int:
    return MOOD_SCORES[mood]


def label_for_average(average: float) -> Mood:
    """Bucket an average score back into a mood label."""
    for lower_bound, label in _LABEL_THRESHOLDS:
        if average >= lower_bound:
            return label
    return Mood.TERRIBLE


def average_mood_score(entries: Iterable[MoodEntry]) -> Optional[float]:
    scores = [mood_score(e.mood) for e in entries]
    if not scores:
        return None
    return sum(scores) / len(scores)


def summarize_moods(entries: list[MoodEntry]) -> MoodSummary:
    """
    Compute the mood dashboard numbers.

    Common tags are the five most frequent, ties kept in first-seen order.
    """
    if not entries:
        return MoodSummary()

    counts = {mood: 0 for mood in Mood}
    tag_counts: Counter[str] = Counter()
    for entry in entries:
        counts[entry.mood] += 1
        tag_counts.update(entry.tags)

    average = average_mood_score(entries)

    return MoodSummary(
        total_entries=len(entries),
        average_score=average,
        average_mood=label_for_average(average),
        mood_counts=counts,
        good_days=counts[Mood.GOOD] + counts[Mood.GREAT],
        tagged_entries=sum(1 for e in entries if e.tags),
        common_tags=[tag for tag, _ in tag_counts.most_common(COMMON_TAG_LIMIT)],
    )
