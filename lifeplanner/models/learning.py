"""
Learning Models

Resources own their sessions and notes through `resource_id`.
Deleting a resource removes its sessions and notes; nothing else
enforces that a session's resource exists.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from lifeplanner.models.goal import Priority


class ResourceType(str, Enum):
    COURSE = "course"
    BOOK = "book"
    ARTICLE = "article"
    VIDEO = "video"
    PODCAST = "podcast"


class LearningResource(BaseModel):
    """Something the user is studying."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    type: ResourceType
    url: Optional[str] = None
    description: str = ""
    category: str
    completed: bool = False
    progress: int = Field(default=0, description="Completion percentage (0-100)")
    duration: Optional[int] = Field(
        default=None,
        description="Expected length in minutes"
    )
    image_url: Optional[str] = None
    favorite: bool = False
    priority: Optional[Priority] = None
    reminder_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.now)


class LearningSession(BaseModel):
    """A timed block of study on one resource."""

    id: UUID = Field(default_factory=uuid4)
    resource_id: UUID
    start_time: datetime
    duration: int = Field(..., description="Elapsed time in seconds")
    notes: Optional[str] = None


class LearningNote(BaseModel):
    """Free-text note attached to a resource."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    resource_id: UUID
    content: str
    created_at: datetime = Field(default_factory=datetime.now)
    tags: list[str] = Field(default_factory=list)
