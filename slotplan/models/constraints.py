from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class RuleName(str, Enum):
    SCHEDULE_INTEGRITY = "schedule_integrity"
    SLOT_DURATION_SANITY = "slot_duration_sanity"
    NO_OVERBOOKING = "no_overbooking"
    NO_OVERLAP_CAPACITY_ONE = "no_overlap_capacity_one"
    DEPENDENCY_ORDER = "dependency_order"
    SEAT_SUFFICIENCY = "seat_sufficiency"


@dataclass(frozen=True)
class Violation:
    rule: RuleName
    message: str
    task_ids: Tuple[int, ...] = ()
    resource_ids: Tuple[str, ...] = ()
    time_slot: Optional[int] = None

    def __str__(self) -> str:
        return f"[{self.rule.value}] {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    violations: List[Violation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.violations

    def by_rule(self, rule: RuleName) -> List[Violation]:
        return [v for v in self.violations if v.rule == rule]
