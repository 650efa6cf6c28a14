"""Calendar document models.

Documents in the calendar collection use camelCase field names; the models
expose snake_case attributes and serialize back by alias.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TimeSlot(BaseModel):
    """A single bookable time on a calendar day."""

    model_config = ConfigDict(populate_by_name=True)

    time: str  # HH:MM
    is_available: bool = Field(default=True, alias="isAvailable")
    booked_by: Optional[str] = Field(default=None, alias="bookedBy")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AvailabilityDate(BaseModel):
    """One calendar day, keyed by its YYYY-MM-DD date."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    is_available: bool = Field(default=True, alias="isAvailable")
    slots: Optional[list[TimeSlot]] = None
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    def find_slot(self, time: str) -> Optional[TimeSlot]:
        """Return the first slot whose time matches, if any."""
        for slot in self.slots or []:
            if slot.time == time:
                return slot
        return None
