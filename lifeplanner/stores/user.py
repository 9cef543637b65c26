"""
User Profile Store

Holds the single local user and the onboarding flag.

DESIGN DECISION: Onboarding is the only gate of the app shell. The
transition NOT_ONBOARDED -> ONBOARDED happens once, through
complete_onboarding; only logout() goes back.
"""

from typing import Any, Optional

from pydantic import BaseModel

from lifeplanner.models.audit import AuditEventBuilder
from lifeplanner.models.user import AppState, User
from lifeplanner.stores.base import PersistentStore, merge


class UserState(BaseModel):
    user: Optional[User] = None
    is_onboarded: bool = False


class UserStore(PersistentStore[UserState]):

    state_model = UserState

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    @property
    def is_onboarded(self) -> bool:
        return self._state.is_onboarded

    @property
    def app_state(self) -> AppState:
        return AppState.ONBOARDED if self._state.is_onboarded else AppState.NOT_ONBOARDED

    async def set_user(self, user: Optional[User]) -> Optional[User]:
        self._state.user = user
        if user is None:
            await self._commit()
        else:
            await self._commit(AuditEventBuilder.entity_updated(
                "user", user.id, {"fields": ["user"]}
            ))
        return user

    async def update_user(self, **changes: Any) -> Optional[User]:
        """Merge `changes` into the current user; no user, no write."""
        if self._state.user is None:
            self._logger.debug("update_user_without_user")
            return None
        updated = merge(self._state.user, changes)
        self._state.user = updated
        await self._commit(AuditEventBuilder.entity_updated(
            "user", updated.id, {"fields": sorted(changes)}
        ))
        return updated

    async def set_onboarded(self, is_onboarded: bool) -> None:
        self._state.is_onboarded = is_onboarded
        await self._commit()

    async def complete_onboarding(
        self,
        name: str,
        email: str,
        avatar: Optional[str] = None,
    ) -> User:
        """Create the user and flip the onboarding flag in one write."""
        user = User(name=name, email=email, avatar=avatar, created_at=self.now())
        self._state.user = user
        self._state.is_onboarded = True
        await self._commit(AuditEventBuilder.onboarding_completed(user.id))
        return user

    async def logout(self) -> None:
        """Forget the user and return to the onboarding screen."""
        user_id = self._state.user.id if self._state.user else None
        self._state.user = None
        self._state.is_onboarded = False
        await self._commit(AuditEventBuilder.user_logged_out(user_id))
