"""
Main Orchestrator for the Life Planner

This module ties the stores together into one application core:
1. Startup (load every store, then back-fill recurring transactions)
2. Onboarding (the one-way NOT_ONBOARDED -> ONBOARDED transition)
3. Cross-store operations (goal deletion vs. linked tasks, learning timer)

DESIGN DECISION: No singletons. Every store is built here with the same
backend, clock and audit logger, and handed to whoever needs it. Tests
build their own app with an in-memory backend and a fixed clock.
"""

import random
from typing import Optional
from uuid import UUID

import structlog

from lifeplanner.audit import AuditLogger, configure_logging, create_correlation_id
from lifeplanner.config import Settings, get_settings
from lifeplanner.models.finance import Bill, FinancialTransaction
from lifeplanner.models.goal import Goal
from lifeplanner.models.learning import LearningSession
from lifeplanner.models.user import AppState, User
from lifeplanner.services.storage import (
    CorruptStateError,
    JsonFileStorage,
    KeyValueAuditStorage,
    KeyValueStorageInterface,
)
from lifeplanner.stores import (
    Clock,
    FinanceStore,
    GoalStore,
    LearningSessionTimer,
    LearningStore,
    MoodStore,
    MotivationStore,
    PersistentStore,
    SocialStore,
    TaskStore,
    UserStore,
)


logger = structlog.get_logger(__name__)


class LifePlannerApp:
    """
    The domain stores, wired to one backend.

    Flow at startup:
    1. Load user, goal, task, mood, social, learning, finance and
       motivation state
    2. Materialize recurring transactions due up to today
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        audit_logger: Optional[AuditLogger] = None,
        rng: Optional[random.Random] = None,
    ):
        settings = settings or get_settings()
        storage_settings = settings.storage
        app_settings = settings.app

        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._enforce_references = app_settings.enforce_references
        self._upcoming_bills_window_days = app_settings.upcoming_bills_window_days

        common = {"clock": clock, "audit_logger": self._audit_logger}
        self.user = UserStore(storage, storage_settings.key_for("user"), **common)
        self.goals = GoalStore(storage, storage_settings.key_for("goal"), **common)
        self.tasks = TaskStore(
            storage,
            storage_settings.key_for("task"),
            goal_exists=self.goals.goal_exists,
            enforce_references=self._enforce_references,
            **common,
        )
        self.mood = MoodStore(storage, storage_settings.key_for("mood"), **common)
        self.social = SocialStore(storage, storage_settings.key_for("social"), **common)
        self.learning = LearningStore(
            storage,
            storage_settings.key_for("learning"),
            enforce_references=self._enforce_references,
            **common,
        )
        self.finance = FinanceStore(storage, storage_settings.key_for("finance"), **common)
        self.motivation = MotivationStore(
            storage, storage_settings.key_for("motivation"), rng=rng, **common
        )

        self.learning_timer = LearningSessionTimer(
            self.learning,
            progress_increment=app_settings.learning_session_progress_increment,
        )

    @property
    def stores(self) -> tuple[PersistentStore, ...]:
        return (
            self.user,
            self.goals,
            self.tasks,
            self.mood,
            self.social,
            self.learning,
            self.finance,
            self.motivation,
        )

    @property
    def state(self) -> AppState:
        return self.user.app_state

    def get_upcoming_bills(self) -> list[Bill]:
        """Unpaid bills inside the configured look-ahead window."""
        return self.finance.get_upcoming_bills(self._upcoming_bills_window_days)

    async def start(self) -> list[FinancialTransaction]:
        """
        Load all persisted state and catch up on recurring transactions.

        Returns:
            The transactions materialized by this startup

        Raises:
            CorruptStateError: If any persisted document is unreadable
        """
        correlation_id = create_correlation_id()
        try:
            for store in self.stores:
                await store.load()
        except CorruptStateError as e:
            logger.error("app_start_failed", key=e.key, error=e.reason)
            await self._audit_logger.log_error(
                "corrupt_state",
                e.reason,
                details={"key": e.key},
                correlation_id=correlation_id,
            )
            raise

        emitted = await self.finance.process_recurring_transactions(
            correlation_id=correlation_id
        )
        logger.info(
            "app_started",
            state=self.state.value,
            recurring_emitted=len(emitted),
            correlation_id=str(correlation_id),
        )
        return emitted

    # =========================================================================
    # ONBOARDING
    # =========================================================================

    async def complete_onboarding(
        self,
        name: str,
        email: str,
        avatar: Optional[str] = None,
    ) -> User:
        return await self.user.complete_onboarding(name, email, avatar)

    async def logout(self) -> None:
        await self.user.logout()

    # =========================================================================
    # CROSS-STORE OPERATIONS
    # =========================================================================

    async def delete_goal(self, goal_id: UUID) -> Optional[Goal]:
        """
        Delete a goal.

        With reference enforcement on, tasks linked to the goal are unlinked
        in the same call. Otherwise they keep the now-dangling goal_id.
        """
        removed = await self.goals.delete_goal(goal_id)
        if removed is not None and self._enforce_references:
            await self.tasks.unlink_goal(goal_id)
        return removed

    async def start_learning_session(self, resource_id: UUID) -> None:
        await self.learning_timer.start(resource_id)

    async def end_learning_session(self, notes: Optional[str] = None) -> LearningSession:
        return await self.learning_timer.end(notes)


def create_app_components(
    storage: Optional[KeyValueStorageInterface] = None,
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    rng: Optional[random.Random] = None,
) -> LifePlannerApp:
    """
    Factory function to create the application core.

    Args:
        storage: Backend to use. Defaults to JSON files under the
                 configured data directory.
        settings: Settings to use. Defaults to get_settings().
        clock: Source of "now". Defaults to datetime.now.
        rng: Random source for motivation picks.

    Returns:
        A LifePlannerApp whose stores are still empty; await start().
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    configure_logging(settings.app.log_level)

    if storage is None:
        storage = JsonFileStorage(
            storage_settings.data_dir,
            write_retry_attempts=storage_settings.write_retry_attempts,
        )

    audit_storage = KeyValueAuditStorage(
        storage,
        storage_settings.audit_key,
        max_events=storage_settings.audit_max_events,
    )
    audit_logger = AuditLogger(audit_storage)

    return LifePlannerApp(
        storage,
        settings=settings,
        clock=clock,
        audit_logger=audit_logger,
        rng=rng,
    )
