"""
Domain stores.

Each store owns one in-memory collection and writes it through to one
storage key.
"""

from lifeplanner.stores.base import (
    Clock,
    DanglingReferenceError,
    PersistentStore,
    find_index,
    merge,
)
from lifeplanner.stores.finance import FinanceState, FinanceStore
from lifeplanner.stores.goals import GoalState, GoalStore, with_derived_progress
from lifeplanner.stores.learning import (
    LearningSessionTimer,
    LearningState,
    LearningStore,
    NoActiveSessionError,
    SessionAlreadyActiveError,
)
from lifeplanner.stores.mood import MoodState, MoodStore
from lifeplanner.stores.motivation import MotivationState, MotivationStore
from lifeplanner.stores.social import SocialState, SocialStore, is_due_for_contact
from lifeplanner.stores.tasks import TaskState, TaskStore
from lifeplanner.stores.user import UserState, UserStore

__all__ = [
    # Base
    "Clock",
    "DanglingReferenceError",
    "PersistentStore",
    "find_index",
    "merge",
    # Stores
    "FinanceStore",
    "GoalStore",
    "LearningStore",
    "MoodStore",
    "MotivationStore",
    "SocialStore",
    "TaskStore",
    "UserStore",
    # State documents
    "FinanceState",
    "GoalState",
    "LearningState",
    "MoodState",
    "MotivationState",
    "SocialState",
    "TaskState",
    "UserState",
    # Learning timer
    "LearningSessionTimer",
    "NoActiveSessionError",
    "SessionAlreadyActiveError",
    # Helpers
    "is_due_for_contact",
    "with_derived_progress",
]
