"""
Motivation Store

Saved motivational content plus the user's favorites. Favorites are kept
as a separate id list; deleting content also drops it from favorites.
"""

import random
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from lifeplanner.models.audit import AuditEventBuilder
from lifeplanner.models.motivation import MotivationalContent, MotivationType
from lifeplanner.stores.base import PersistentStore, find_index


class MotivationState(BaseModel):
    content: list[MotivationalContent] = Field(default_factory=list)
    favorites: list[UUID] = Field(default_factory=list)


class MotivationStore(PersistentStore[MotivationState]):
    """Content newest first; favorites in the order they were marked."""

    state_model = MotivationState

    def __init__(
        self,
        *args: Any,
        rng: Optional[random.Random] = None,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self._rng = rng or random.Random()

    @property
    def content(self) -> list[MotivationalContent]:
        return list(self._state.content)

    @property
    def favorites(self) -> list[UUID]:
        return list(self._state.favorites)

    def is_favorite(self, content_id: UUID) -> bool:
        return content_id in self._state.favorites

    def get_content_by_id(self, content_id: UUID) -> Optional[MotivationalContent]:
        index = find_index(self._state.content, content_id)
        return None if index is None else self._state.content[index]

    def get_content_by_type(self, content_type: MotivationType) -> list[MotivationalContent]:
        return [c for c in self._state.content if c.type == content_type]

    def get_content_by_category(self, category: str) -> list[MotivationalContent]:
        return [c for c in self._state.content if c.category == category]

    def get_favorite_content(self) -> list[MotivationalContent]:
        """Favorited items, in content order."""
        favorites = set(self._state.favorites)
        return [c for c in self._state.content if c.id in favorites]

    def get_random_content(
        self,
        content_type: Optional[MotivationType] = None,
    ) -> Optional[MotivationalContent]:
        """Pick one item, optionally of one type; None when nothing matches."""
        pool = (
            self._state.content if content_type is None
            else self.get_content_by_type(content_type)
        )
        if not pool:
            return None
        return self._rng.choice(pool)

    async def add_content(
        self,
        type: MotivationType,
        title: str,
        content: str,
        category: str,
        author: Optional[str] = None,
        image_url: Optional[str] = None,
        url: Optional[str] = None,
    ) -> MotivationalContent:
        item = MotivationalContent(
            type=type,
            title=title,
            content=content,
            category=category,
            author=author,
            image_url=image_url,
            url=url,
        )
        self._state.content.insert(0, item)
        await self._commit(AuditEventBuilder.entity_created(
            "motivation", item.id, {"title": item.title, "type": item.type.value}
        ))
        return item

    async def update_content(
        self,
        content_id: UUID,
        **changes: Any,
    ) -> Optional[MotivationalContent]:
        return await self._update_in(self._state.content, "motivation", content_id, changes)

    async def delete_content(self, content_id: UUID) -> Optional[MotivationalContent]:
        if self.get_content_by_id(content_id) is not None:
            self._state.favorites = [f for f in self._state.favorites if f != content_id]
        return await self._delete_from(self._state.content, "motivation", content_id)

    async def toggle_favorite(self, content_id: UUID) -> Optional[bool]:
        """
        Flip the favorite flag of one item.

        Returns:
            The new flag, or None if no content has that id
        """
        if find_index(self._state.content, content_id) is None:
            self._not_found("motivation", content_id)
            return None
        favorite = content_id not in self._state.favorites
        if favorite:
            self._state.favorites.append(content_id)
        else:
            self._state.favorites.remove(content_id)
        await self._commit(AuditEventBuilder.entity_updated(
            "motivation", content_id, {"favorite": favorite}
        ))
        return favorite
