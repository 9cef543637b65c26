"""
Goal Store

CRUD for goals and their embedded milestones.

INVARIANT: For a goal with at least one milestone, immediately after any
milestone add/update/delete/toggle (or a goal update that replaces the
milestone list):
    progress  == round(100 * completed_milestones / total_milestones)
    completed == (progress == 100)
A goal with zero milestones keeps the progress it last had.
"""

from datetime import date
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from lifeplanner.models.audit import AuditEventBuilder
from lifeplanner.models.goal import (
    Goal,
    GoalCategory,
    Milestone,
    Priority,
    milestone_progress,
)
from lifeplanner.stores.base import PersistentStore, find_index, merge


class GoalState(BaseModel):
    goals: list[Goal] = Field(default_factory=list)


def with_derived_progress(goal: Goal) -> Goal:
    """Copy of `goal` with progress/completed recomputed from milestones."""
    progress = milestone_progress(goal.milestones)
    if progress is None:
        return goal
    return goal.model_copy(update={"progress": progress, "completed": progress == 100})


class GoalStore(PersistentStore[GoalState]):
    """Goals, newest first."""

    state_model = GoalState

    @property
    def goals(self) -> list[Goal]:
        return list(self._state.goals)

    def get_goal_by_id(self, goal_id: UUID) -> Optional[Goal]:
        index = find_index(self._state.goals, goal_id)
        return None if index is None else self._state.goals[index]

    def get_goals_by_category(self, category: GoalCategory) -> list[Goal]:
        return [g for g in self._state.goals if g.category == category]

    def goal_exists(self, goal_id: UUID) -> bool:
        return self.get_goal_by_id(goal_id) is not None

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    async def add_goal(
        self,
        title: str,
        category: GoalCategory,
        start_date: date,
        end_date: date,
        description: Optional[str] = None,
        priority: Priority = Priority.MEDIUM,
    ) -> Goal:
        """Create a goal with no milestones and zero progress."""
        goal = Goal(
            title=title,
            description=description,
            category=category,
            start_date=start_date,
            end_date=end_date,
            priority=priority,
        )
        self._state.goals.insert(0, goal)
        await self._commit(AuditEventBuilder.entity_created(
            "goal", goal.id, {"title": goal.title}
        ))
        return goal

    async def update_goal(self, goal_id: UUID, **changes: Any) -> Optional[Goal]:
        index = find_index(self._state.goals, goal_id)
        if index is None:
            self._not_found("goal", goal_id)
            return None
        goal = with_derived_progress(merge(self._state.goals[index], changes))
        self._state.goals[index] = goal
        await self._commit(AuditEventBuilder.entity_updated(
            "goal", goal_id, {"fields": sorted(changes)}
        ))
        return goal

    async def delete_goal(self, goal_id: UUID) -> Optional[Goal]:
        """Remove a goal. Tasks pointing at it are not touched."""
        return await self._delete_from(self._state.goals, "goal", goal_id)

    # -------------------------------------------------------------------------
    # Milestones
    # -------------------------------------------------------------------------

    async def _rewrite_milestones(
        self,
        goal_id: UUID,
        rewrite,
        event_details: dict,
    ) -> Optional[Goal]:
        """Apply `rewrite(milestones) -> milestones`, recompute progress, persist."""
        index = find_index(self._state.goals, goal_id)
        if index is None:
            self._not_found("goal", goal_id)
            return None
        goal = self._state.goals[index]
        milestones = rewrite(list(goal.milestones))
        goal = with_derived_progress(goal.model_copy(update={"milestones": milestones}))
        self._state.goals[index] = goal
        await self._commit(AuditEventBuilder.entity_updated("goal", goal_id, event_details))
        return goal

    async def add_milestone(
        self,
        goal_id: UUID,
        title: str,
        due_date: date,
    ) -> Optional[Milestone]:
        """Append an open milestone to a goal; None if the goal is unknown."""
        milestone = Milestone(title=title, due_date=due_date)

        def rewrite(milestones: list[Milestone]) -> list[Milestone]:
            return milestones + [milestone]

        goal = await self._rewrite_milestones(
            goal_id, rewrite, {"milestone_added": str(milestone.id)}
        )
        return milestone if goal else None

    async def update_milestone(
        self,
        goal_id: UUID,
        milestone_id: UUID,
        **changes: Any,
    ) -> Optional[Goal]:
        def rewrite(milestones: list[Milestone]) -> list[Milestone]:
            return [
                merge(m, changes) if m.id == milestone_id else m
                for m in milestones
            ]

        return await self._rewrite_milestones(
            goal_id, rewrite, {"milestone_updated": str(milestone_id)}
        )

    async def delete_milestone(self, goal_id: UUID, milestone_id: UUID) -> Optional[Goal]:
        def rewrite(milestones: list[Milestone]) -> list[Milestone]:
            return [m for m in milestones if m.id != milestone_id]

        return await self._rewrite_milestones(
            goal_id, rewrite, {"milestone_deleted": str(milestone_id)}
        )

    async def toggle_milestone_completion(
        self,
        goal_id: UUID,
        milestone_id: UUID,
    ) -> Optional[Goal]:
        def rewrite(milestones: list[Milestone]) -> list[Milestone]:
            return [
                m.model_copy(update={"completed": not m.completed})
                if m.id == milestone_id else m
                for m in milestones
            ]

        return await self._rewrite_milestones(
            goal_id, rewrite, {"milestone_toggled": str(milestone_id)}
        )

    async def update_goal_progress(self, goal_id: UUID) -> Optional[Goal]:
        """
        Recompute a goal's progress from its milestones.

        No-op (no write) when the goal is unknown or has no milestones.
        """
        index = find_index(self._state.goals, goal_id)
        if index is None:
            self._not_found("goal", goal_id)
            return None
        goal = self._state.goals[index]
        if not goal.milestones:
            return goal
        goal = with_derived_progress(goal)
        self._state.goals[index] = goal
        await self._commit(AuditEventBuilder.entity_updated(
            "goal", goal_id, {"progress": goal.progress}
        ))
        return goal
