from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Resource:
    id: str
    capacity_per_slot: int = 1  # concurrent occupants per time unit
    seat_capacity: Optional[int] = None  # only used with Task.occupant_count


@dataclass(frozen=True)
class Task:
    id: int
    duration: int  # time units
    priority: int
    required_resource: str
    depends_on: Tuple[int, ...] = ()
    label: Optional[str] = None  # e.g. course name
    occupant_count: Optional[int] = None  # e.g. class size

    def occupied_units(self, start: int) -> range:
        return range(start, start + self.duration)


@dataclass(frozen=True)
class Assignment:
    task_id: int
    time_slot: int
    resource_id: str

    def end(self, duration: int) -> int:
        return self.time_slot + duration


@dataclass(frozen=True)
class GenerationResult:
    schedule: List[Assignment] = field(default_factory=list)
    fitness: float = 0.0
