"""Social connection models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class Relationship(str, Enum):
    FAMILY = "family"
    FRIEND = "friend"
    COLLEAGUE = "colleague"
    ACQUAINTANCE = "acquaintance"


class ContactFrequency(str, Enum):
    """
    How often the user wants to be in touch.

    DESIGN DECISION: Each frequency maps to a fixed number of days
    (see CONTACT_THRESHOLD_DAYS). This is a bucket approximation and is
    not calendar aware: "monthly" means 30 elapsed days.
    """
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


CONTACT_THRESHOLD_DAYS: dict[ContactFrequency, int] = {
    ContactFrequency.DAILY: 1,
    ContactFrequency.WEEKLY: 7,
    ContactFrequency.MONTHLY: 30,
    ContactFrequency.QUARTERLY: 90,
    ContactFrequency.YEARLY: 365,
}


class SocialConnection(BaseModel):
    """A person the user wants to stay in touch with."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    relationship: Relationship
    last_contact: Optional[datetime] = Field(
        default=None,
        description="When the user last got in touch; None means never"
    )
    contact_frequency: ContactFrequency
    notes: Optional[str] = None
    avatar: Optional[str] = None
