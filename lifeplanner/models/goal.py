"""
Goal and Task Models

Goals carry their milestones embedded; a milestone is never stored on its own.
Tasks may point at a goal through `goal_id`, which is a soft reference:
nothing here checks that the goal exists (see the reference policy in
`lifeplanner.stores.tasks`).

DESIGN DECISION: `Goal.progress` and `Goal.completed` are derived from the
milestone list. The pure function `milestone_progress` is the single formula;
the goal store applies it after every milestone mutation.
"""

import math
from datetime import date
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class Priority(str, Enum):
    """Priority shared by goals, tasks and learning resources."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GoalCategory(str, Enum):
    PERSONAL = "personal"
    PROFESSIONAL = "professional"
    HEALTH = "health"
    LEARNING = "learning"
    FINANCIAL = "financial"
    SOCIAL = "social"


class TaskCategory(str, Enum):
    PERSONAL = "personal"
    WORK = "work"
    HEALTH = "health"
    LEARNING = "learning"
    FINANCIAL = "financial"
    SOCIAL = "social"


# =============================================================================
# GOALS
# =============================================================================

class Milestone(BaseModel):
    """A sub-goal owned by exactly one Goal."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    due_date: date
    completed: bool = False


class Goal(BaseModel):
    """
    A personal goal broken down into milestones.

    `progress` is a percentage (0-100). With at least one milestone it is
    always `round(100 * completed / total)`; a goal without milestones keeps
    whatever progress it was last given.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    description: Optional[str] = None
    category: GoalCategory
    start_date: date
    end_date: date
    progress: int = Field(default=0, description="Completion percentage (0-100)")
    milestones: list[Milestone] = Field(default_factory=list)
    completed: bool = False
    priority: Priority = Priority.MEDIUM

    def get_milestone(self, milestone_id: UUID) -> Optional[Milestone]:
        for milestone in self.milestones:
            if milestone.id == milestone_id:
                return milestone
        return None


def milestone_progress(milestones: list[Milestone]) -> Optional[int]:
    """
    Progress percentage implied by a milestone list.

    Returns None for an empty list: there is nothing to derive from.
    Halves round up (1 of 8 done is 13%, not 12%).
    """
    if not milestones:
        return None
    done = sum(1 for m in milestones if m.completed)
    return math.floor(100 * done / len(milestones) + 0.5)


# =============================================================================
# TASKS
# =============================================================================

class Task(BaseModel):
    """A to-do item, optionally linked to a goal."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    category: TaskCategory = TaskCategory.PERSONAL
    goal_id: Optional[UUID] = Field(
        default=None,
        description="Soft reference to a Goal (no cascade on goal deletion)"
    )
