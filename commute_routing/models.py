from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Tuple


class StepMode(Enum):
    WALKING = "WALKING"
    TRANSIT = "TRANSIT"
    OTHER = "OTHER"

    @classmethod
    def from_provider(cls, travel_mode: Optional[str]) -> "StepMode":
        """Map a provider travel mode string; anything unknown is OTHER."""
        try:
            return cls((travel_mode or "").upper())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Step:
    """One instruction along a leg"""
    instructions: str
    duration: timedelta
    mode: StepMode
    line_info: str = ""
    # Only set for TRANSIT steps
    depart_time: Optional[datetime] = None
    arrive_time: Optional[datetime] = None


@dataclass(frozen=True)
class Itinerary:
    """
    A single transit option built from the first leg of a provider route.
    Steps are kept in traversal order.
    """
    summary: str
    total_duration: timedelta
    departure_time: datetime
    arrival_time: datetime
    distance_label: str
    steps: Tuple[Step, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.arrival_time < self.departure_time:
            raise ValueError(
                f"Itinerary '{self.summary}' arrives ({self.arrival_time}) before it departs ({self.departure_time})"
            )
        # Accept any sequence but store a tuple so the record stays immutable
        object.__setattr__(self, "steps", tuple(self.steps))

    def transit_steps(self):
        return [step for step in self.steps if step.mode is StepMode.TRANSIT]

    def line_summary(self) -> str:
        """Line infos of the transit steps, e.g. 'Bus 40 → Light rail 1 Line'."""
        return " → ".join(step.line_info for step in self.transit_steps() if step.line_info)


@dataclass(frozen=True)
class WalkCheck:
    is_walkable: bool
    walk_duration: timedelta
    walk_distance_label: str
