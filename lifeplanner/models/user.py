"""User profile model and the onboarding state that gates the app shell."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class AppState(str, Enum):
    """
    Process-wide navigation state.

    The only transition the app drives is NOT_ONBOARDED -> ONBOARDED,
    triggered by completing the onboarding wizard. Logout resets it.
    """
    NOT_ONBOARDED = "not_onboarded"
    ONBOARDED = "onboarded"


class User(BaseModel):
    """The single local user."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    email: str
    avatar: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
