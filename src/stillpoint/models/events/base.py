from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict

from stillpoint.models.events.types import EventType
from stillpoint.models.events.sources import EventSource


@dataclass(init=False)
class Event:
    """
    Base event class.

    - type: EventType (topic)
    - source: EventSource
    - timestamp: auto

    Subclasses add the fixed payload fields for their topic.
    """

    type: EventType
    source: EventSource | None
    timestamp: float = field(default_factory=time.time)

    def __init__(self, *, type: EventType, source: EventSource | None):
        self.type = type
        self.source = source
        self.timestamp = time.time()

    @property
    def topic(self) -> str:
        return self.type.value

    def to_data(self) -> Dict[str, Any]:
        """Payload without metadata (type, source, timestamp)."""
        data = {}
        for k, v in self.__dict__.items():
            if k in ("type", "source", "timestamp"):
                continue
            data[k] = v
        return data
