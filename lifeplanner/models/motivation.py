"""Motivational content models."""

from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class MotivationType(str, Enum):
    QUOTE = "quote"
    ARTICLE = "article"
    VIDEO = "video"
    PODCAST = "podcast"


class MotivationalContent(BaseModel):
    """A quote, article, video or podcast the user keeps for inspiration."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    type: MotivationType
    title: str
    content: str = Field(description="Quote text, summary or transcript excerpt")
    author: Optional[str] = None
    image_url: Optional[str] = None
    url: Optional[str] = None
    category: str
