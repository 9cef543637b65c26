"""
Data Models Package

This package contains all Pydantic models used by the Life Planner stores.
Everything persisted to local storage conforms to these schemas.
"""

from lifeplanner.models.goal import (
    Goal,
    GoalCategory,
    Milestone,
    Priority,
    Task,
    TaskCategory,
    milestone_progress,
)
from lifeplanner.models.user import AppState, User
from lifeplanner.models.mood import Mood, MoodEntry, MoodSummary
from lifeplanner.models.motivation import MotivationalContent, MotivationType
from lifeplanner.models.social import (
    CONTACT_THRESHOLD_DAYS,
    ContactFrequency,
    Relationship,
    SocialConnection,
)
from lifeplanner.models.learning import (
    LearningNote,
    LearningResource,
    LearningSession,
    ResourceType,
)
from lifeplanner.models.finance import (
    Bill,
    BillFrequency,
    Budget,
    BudgetCategory,
    BudgetCategoryProgress,
    BudgetProgress,
    FinancialGoal,
    FinancialGoalCategory,
    FinancialTransaction,
    RecurrenceFrequency,
    RecurringTransaction,
    TransactionType,
)
from lifeplanner.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Goal and task models
    "Goal",
    "GoalCategory",
    "Milestone",
    "Priority",
    "Task",
    "TaskCategory",
    "milestone_progress",
    # User models
    "AppState",
    "User",
    # Mood models
    "Mood",
    "MoodEntry",
    "MoodSummary",
    # Motivation models
    "MotivationalContent",
    "MotivationType",
    # Social models
    "CONTACT_THRESHOLD_DAYS",
    "ContactFrequency",
    "Relationship",
    "SocialConnection",
    # Learning models
    "LearningNote",
    "LearningResource",
    "LearningSession",
    "ResourceType",
    # Finance models
    "Bill",
    "BillFrequency",
    "Budget",
    "BudgetCategory",
    "BudgetCategoryProgress",
    "BudgetProgress",
    "FinancialGoal",
    "FinancialGoalCategory",
    "FinancialTransaction",
    "RecurrenceFrequency",
    "RecurringTransaction",
    "TransactionType",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
