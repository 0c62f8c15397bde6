from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class EventTag(str, Enum):
    NEW = "New"
    PS4 = "PS4"
    XBOX = "Xbox"
    COLLAB = "Collab"


@dataclass(frozen=True)
class Event:
    title: str
    description: str
    level: str
    start_date: str
    end_date: str
    tags: frozenset[EventTag]
    start: datetime = field(compare=False)
    end: datetime = field(compare=False)

    def tags_text(self) -> str:
        return ", ".join(tag.value for tag in EventTag if tag in self.tags)

    def to_row(self) -> dict[str, str]:
        return {
            "title": self.title,
            "start_date": self.start_date,
            "level": self.level,
            "end_date": self.end_date,
            "description": self.description,
            "tags": self.tags_text(),
        }
