from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class TrackStatus(str, Enum):
    UNKNOWN = "unknown"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    PICKUP = "pickup"
    EXCEPTION = "exception"


class Event(BaseModel):
    """A single normalized occurrence in a shipment's life."""

    model_config = ConfigDict(frozen=True)

    status: TrackStatus = TrackStatus.UNKNOWN
    location: str = ""
    description: str = ""
    timestamp: AwareDatetime
    additional_details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        """Build an event from a plain mapping; ``date`` is accepted for ``timestamp``."""
        values = dict(data)
        if "timestamp" not in values and "date" in values:
            values["timestamp"] = values.pop("date")
        return cls(**values)


class Track(BaseModel):
    """The timeline of one shipment, as built by a tracker."""

    events: List[Event] = Field(default_factory=list)
    recipient: Optional[str] = None
    additional_details: Dict[str, Any] = Field(default_factory=dict)

    def add_event(self, event: Event) -> "Track":
        self.events.append(event)
        return self

    def sort_events(self) -> "Track":
        # sorted() is stable, events with equal timestamps keep parse order
        self.events = sorted(self.events, key=lambda e: e.timestamp)
        return self

    def set_recipient(self, recipient: Optional[str]) -> "Track":
        self.recipient = recipient
        return self

    def add_additional_details(self, key: str, value: Any) -> "Track":
        self.additional_details[key] = value
        return self

    def get_additional_details(self, key: Optional[str] = None, default: Any = None) -> Any:
        if key is None:
            return self.additional_details
        return self.additional_details.get(key, default)

    def latest_event(self) -> Optional[Event]:
        return self.events[-1] if self.events else None

    def current_status(self) -> TrackStatus:
        latest = self.latest_event()
        return latest.status if latest else TrackStatus.UNKNOWN

    def delivered(self) -> bool:
        return self.current_status() is TrackStatus.DELIVERED

    def has_recipient(self) -> bool:
        return self.recipient is not None

    @property
    def last_update(self) -> Optional[datetime]:
        latest = self.latest_event()
        return latest.timestamp if latest else None
