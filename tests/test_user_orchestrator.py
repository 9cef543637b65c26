"""
Tests for the user store and the application shell.

The app is built through create_app_components with an in-memory
backend, so startup, onboarding and cross-store flows run end to end.
"""

import pytest
from datetime import date
from decimal import Decimal

from lifeplanner.config import Settings, validate_all_settings
from lifeplanner.models.audit import AuditEventType
from lifeplanner.models.finance import RecurrenceFrequency, TransactionType
from lifeplanner.models.goal import GoalCategory
from lifeplanner.models.learning import ResourceType
from lifeplanner.models.motivation import MotivationType
from lifeplanner.models.user import AppState, User
from lifeplanner.orchestrator import LifePlannerApp, create_app_components
from lifeplanner.services.storage import CorruptStateError, KeyValueAuditStorage
from lifeplanner.stores.finance import FinanceStore
from lifeplanner.stores.user import UserStore


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.delenv("ENFORCE_REFERENCES", raising=False)
    return Settings()


@pytest.fixture
def app(storage, settings, clock):
    return create_app_components(storage=storage, settings=settings, clock=clock)


@pytest.fixture
def user_store(storage, clock):
    return UserStore(storage, "pln-user-storage", clock=clock)


@pytest.mark.asyncio
class TestUserStore:

    async def test_starts_not_onboarded(self, user_store):
        assert user_store.app_state == AppState.NOT_ONBOARDED
        assert user_store.user is None

    async def test_complete_onboarding(self, user_store, storage, clock):
        user = await user_store.complete_onboarding("Ada", "ada@example.com")

        assert user_store.app_state == AppState.ONBOARDED
        assert user.created_at == clock.now
        assert storage.write_count == 1

        reloaded = UserStore(storage, "pln-user-storage", clock=clock)
        await reloaded.load()
        assert reloaded.is_onboarded
        assert reloaded.user.name == "Ada"

    async def test_update_user(self, user_store):
        user = await user_store.complete_onboarding("Ada", "ada@example.com")
        updated = await user_store.update_user(avatar="ada.png")
        assert updated.avatar == "ada.png"
        assert updated.id == user.id

    async def test_update_without_user_is_noop(self, user_store, storage):
        assert await user_store.update_user(name="Nobody") is None
        assert storage.write_count == 0

    async def test_logout(self, user_store):
        await user_store.complete_onboarding("Ada", "ada@example.com")
        await user_store.logout()
        assert user_store.user is None
        assert user_store.app_state == AppState.NOT_ONBOARDED

    async def test_set_user_and_flag(self, user_store):
        await user_store.set_user(User(name="Ada", email="ada@example.com"))
        assert user_store.app_state == AppState.NOT_ONBOARDED
        await user_store.set_onboarded(True)
        assert user_store.app_state == AppState.ONBOARDED
        await user_store.set_user(None)
        assert user_store.user is None


@pytest.mark.asyncio
class TestAppStartup:

    async def test_fresh_start(self, app):
        assert isinstance(app, LifePlannerApp)
        assert await app.start() == []
        assert app.state == AppState.NOT_ONBOARDED

    async def test_start_materializes_recurring(self, storage, settings, clock):
        seed = FinanceStore(storage, settings.storage.key_for("finance"), clock=clock)
        await seed.add_recurring_transaction(
            Decimal("100"), "Rent", TransactionType.EXPENSE,
            RecurrenceFrequency.MONTHLY, date(2024, 1, 1),
        )

        app = create_app_components(storage=storage, settings=settings, clock=clock)
        emitted = await app.start()

        assert [t.date for t in emitted] == [
            date(2024, 2, 1), date(2024, 3, 1), date(2024, 4, 1),
        ]
        assert len(app.finance.transactions) == 3

        restarted = create_app_components(storage=storage, settings=settings, clock=clock)
        assert await restarted.start() == []

    async def test_start_restores_onboarding(self, app, storage, settings, clock):
        await app.start()
        await app.complete_onboarding("Ada", "ada@example.com")

        restarted = create_app_components(storage=storage, settings=settings, clock=clock)
        await restarted.start()

        assert restarted.state == AppState.ONBOARDED
        assert restarted.user.user.email == "ada@example.com"

    async def test_corrupt_document_stops_startup(self, storage, settings, clock):
        await storage.set(settings.storage.key_for("mood"), '{"entries": "nope"}')
        app = create_app_components(storage=storage, settings=settings, clock=clock)
        with pytest.raises(CorruptStateError):
            await app.start()

        audit = KeyValueAuditStorage(storage, settings.storage.audit_key)
        errors = [
            e for e in await audit.get_recent_events()
            if e.event_type == AuditEventType.SYSTEM_ERROR
        ]
        assert len(errors) == 1
        assert errors[0].details == {"key": settings.storage.key_for("mood")}

    async def test_audit_trail_is_persisted(self, app, storage, settings):
        await app.start()
        await app.complete_onboarding("Ada", "ada@example.com")

        audit = KeyValueAuditStorage(storage, settings.storage.audit_key)
        types = [e.event_type for e in await audit.get_recent_events()]

        assert AuditEventType.ONBOARDING_COMPLETED in types
        assert AuditEventType.STATE_LOADED in types

    async def test_commit_without_entity_event_is_audited(self, app, storage, settings):
        await app.start()
        await app.user.set_onboarded(True)

        audit = KeyValueAuditStorage(storage, settings.storage.audit_key)
        persisted = [
            e for e in await audit.get_recent_events()
            if e.event_type == AuditEventType.STATE_PERSISTED
        ]

        assert [e.details["key"] for e in persisted] == [settings.storage.key_for("user")]

    async def test_logout_returns_to_onboarding(self, app):
        await app.start()
        await app.complete_onboarding("Ada", "ada@example.com")
        await app.logout()
        assert app.state == AppState.NOT_ONBOARDED


@pytest.mark.asyncio
class TestCrossStoreFlows:

    async def _goal_with_task(self, app):
        goal = await app.goals.add_goal(
            "Run 10k", GoalCategory.HEALTH, date(2024, 1, 1), date(2024, 6, 1)
        )
        task = await app.tasks.add_task("Buy shoes", goal_id=goal.id)
        return goal, task

    async def test_delete_goal_leaves_tasks_by_default(self, app):
        await app.start()
        goal, task = await self._goal_with_task(app)

        await app.delete_goal(goal.id)

        assert app.goals.get_goal_by_id(goal.id) is None
        assert app.tasks.get_task_by_id(task.id).goal_id == goal.id

    async def test_delete_goal_unlinks_tasks_when_enforced(
        self, storage, clock, monkeypatch
    ):
        monkeypatch.setenv("ENFORCE_REFERENCES", "true")
        app = create_app_components(storage=storage, settings=Settings(), clock=clock)
        await app.start()
        goal, task = await self._goal_with_task(app)

        await app.delete_goal(goal.id)

        assert app.tasks.get_task_by_id(task.id).goal_id is None

    async def test_learning_session_through_app(self, app, clock):
        await app.start()
        resource = await app.learning.add_resource("SICP", ResourceType.BOOK, "CS")

        await app.start_learning_session(resource.id)
        clock.advance(minutes=10)
        session = await app.end_learning_session()

        assert session.duration == 600
        assert app.learning.get_resource_by_id(resource.id).progress == 5

    async def test_motivation_store_is_wired(self, storage, settings, clock):
        app = create_app_components(storage=storage, settings=settings, clock=clock)
        await app.start()
        quote = await app.motivation.add_content(
            MotivationType.QUOTE, "Begin", "Start where you are.", "Action"
        )

        assert app.motivation in app.stores
        assert await storage.get(settings.storage.key_for("motivation")) is not None
        assert app.motivation.get_random_content() == quote

    async def test_upcoming_bills_use_configured_window(self, storage, clock, monkeypatch):
        monkeypatch.setenv("UPCOMING_BILLS_WINDOW_DAYS", "7")
        app = create_app_components(storage=storage, settings=Settings(), clock=clock)
        await app.start()
        near = await app.finance.add_bill("Phone", Decimal("30"), date(2024, 4, 8), "Utilities")
        await app.finance.add_bill("Rent", Decimal("900"), date(2024, 4, 20), "Housing")

        assert app.get_upcoming_bills() == [near]


class TestSettings:

    def test_defaults(self, settings):
        assert settings.storage.key_for("finance") == "pln-finance-storage"
        assert settings.storage.audit_key == "pln-audit-log"
        assert settings.app.learning_session_progress_increment == 5
        assert settings.app.enforce_references is False

    def test_prefix_from_environment(self, monkeypatch):
        monkeypatch.setenv("LIFEPLANNER_STORAGE_KEY_PREFIX", "test")
        assert Settings().storage.key_for("goal") == "test-goal-storage"

    def test_rejects_path_like_prefix(self, monkeypatch):
        monkeypatch.setenv("LIFEPLANNER_STORAGE_KEY_PREFIX", "../x")
        with pytest.raises(ValueError):
            Settings().storage

    def test_validate_all_settings(self):
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["app"] is True
