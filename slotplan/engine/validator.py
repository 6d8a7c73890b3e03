"""
Constraint Validator

Re-checks a schedule against the hard constraints without trusting whoever
produced it. Each rule is a pure predicate over an immutable snapshot of
tasks, resources and assignments; every rule runs on every call and the
violations of all rules are returned together.

Rules, in reporting order:
- schedule_integrity: assignments reference known tasks/resources, the
  task's required resource, and each task is assigned exactly once
- slot_duration_sanity: time_slot >= 0 and duration > 0
- no_overbooking: occupants per (resource, unit) <= capacity_per_slot
- no_overlap_capacity_one: no two tasks share a unit on a capacity-1 resource
- dependency_order: a task starts at or after each dependency finishes
- seat_sufficiency: occupant_count <= seat_capacity, only when both kinds
  of facts were supplied
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from itertools import combinations
from typing import Callable, Dict, List, Sequence, Tuple

from slotplan.models.constraints import RuleName, ValidationResult, Violation
from slotplan.models.entities import Assignment, Resource, Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    tasks: Dict[int, Task]
    resources: Dict[str, Resource]
    schedule: Tuple[Assignment, ...]
    first_assignment: Dict[int, Assignment]

    @classmethod
    def build(cls, tasks: Sequence[Task], resources: Sequence[Resource], schedule: Sequence[Assignment]) -> "Snapshot":
        first: Dict[int, Assignment] = {}
        for a in schedule:
            first.setdefault(a.task_id, a)
        return cls(
            tasks={t.id: t for t in tasks},
            resources={r.id: r for r in resources},
            schedule=tuple(schedule),
            first_assignment=first,
        )

    def occupancy(self) -> Dict[str, Dict[int, List[int]]]:
        """resource_id -> unit -> ids of tasks occupying it, in schedule order."""
        occ: Dict[str, Dict[int, List[int]]] = defaultdict(lambda: defaultdict(list))
        for a in self.schedule:
            task = self.tasks.get(a.task_id)
            if task is None or a.resource_id not in self.resources:
                continue
            for unit in range(a.time_slot, a.time_slot + task.duration):
                occ[a.resource_id][unit].append(a.task_id)
        return occ


def check_schedule_integrity(snap: Snapshot) -> List[Violation]:
    violations: List[Violation] = []
    seen = set()
    for a in snap.schedule:
        task = snap.tasks.get(a.task_id)
        if task is None:
            violations.append(Violation(
                RuleName.SCHEDULE_INTEGRITY,
                f"assignment references unknown task {a.task_id}",
                task_ids=(a.task_id,), resource_ids=(a.resource_id,), time_slot=a.time_slot,
            ))
        if a.resource_id not in snap.resources:
            violations.append(Violation(
                RuleName.SCHEDULE_INTEGRITY,
                f"task {a.task_id} assigned to unknown resource {a.resource_id}",
                task_ids=(a.task_id,), resource_ids=(a.resource_id,), time_slot=a.time_slot,
            ))
        elif task is not None and task.required_resource != a.resource_id:
            violations.append(Violation(
                RuleName.SCHEDULE_INTEGRITY,
                f"task {a.task_id} requires {task.required_resource} but is assigned to {a.resource_id}",
                task_ids=(a.task_id,), resource_ids=(a.resource_id, task.required_resource),
                time_slot=a.time_slot,
            ))
        if a.task_id in seen:
            violations.append(Violation(
                RuleName.SCHEDULE_INTEGRITY,
                f"task {a.task_id} is assigned more than once",
                task_ids=(a.task_id,), resource_ids=(a.resource_id,), time_slot=a.time_slot,
            ))
        seen.add(a.task_id)

    for tid, task in snap.tasks.items():
        if tid not in seen:
            violations.append(Violation(
                RuleName.SCHEDULE_INTEGRITY,
                f"task {tid} has no assignment",
                task_ids=(tid,), resource_ids=(task.required_resource,),
            ))
    return violations


def check_slot_duration_sanity(snap: Snapshot) -> List[Violation]:
    violations: List[Violation] = []
    for a in snap.schedule:
        if a.time_slot < 0:
            violations.append(Violation(
                RuleName.SLOT_DURATION_SANITY,
                f"task {a.task_id} starts at negative time slot {a.time_slot}",
                task_ids=(a.task_id,), resource_ids=(a.resource_id,), time_slot=a.time_slot,
            ))
        task = snap.tasks.get(a.task_id)
        if task is not None and task.duration <= 0:
            violations.append(Violation(
                RuleName.SLOT_DURATION_SANITY,
                f"task {a.task_id} has non-positive duration {task.duration}",
                task_ids=(a.task_id,), resource_ids=(a.resource_id,), time_slot=a.time_slot,
            ))
    return violations


def check_no_overbooking(snap: Snapshot) -> List[Violation]:
    violations: List[Violation] = []
    occ = snap.occupancy()
    for rid, resource in snap.resources.items():
        units = occ.get(rid, {})
        for unit in sorted(units):
            occupants = units[unit]
            if len(occupants) > resource.capacity_per_slot:
                violations.append(Violation(
                    RuleName.NO_OVERBOOKING,
                    f"resource {rid} holds {len(occupants)} tasks at time {unit} "
                    f"(capacity {resource.capacity_per_slot}): {', '.join(map(str, occupants))}",
                    task_ids=tuple(occupants), resource_ids=(rid,), time_slot=unit,
                ))
    return violations


def check_no_overlap_capacity_one(snap: Snapshot) -> List[Violation]:
    violations: List[Violation] = []
    occ = snap.occupancy()
    for rid, resource in snap.resources.items():
        if resource.capacity_per_slot != 1:
            continue
        units = occ.get(rid, {})
        first_shared: Dict[Tuple[int, int], int] = {}
        for unit in sorted(units):
            distinct = list(dict.fromkeys(units[unit]))
            for pair in combinations(distinct, 2):
                first_shared.setdefault(pair, unit)
        for (a, b), unit in first_shared.items():
            violations.append(Violation(
                RuleName.NO_OVERLAP_CAPACITY_ONE,
                f"tasks {a} and {b} overlap on capacity-1 resource {rid} at time {unit}",
                task_ids=(a, b), resource_ids=(rid,), time_slot=unit,
            ))
    return violations


def check_dependency_order(snap: Snapshot) -> List[Violation]:
    violations: List[Violation] = []
    for tid, task in snap.tasks.items():
        a = snap.first_assignment.get(tid)
        if a is None:
            continue
        for dep in task.depends_on:
            dep_task = snap.tasks.get(dep)
            dep_a = snap.first_assignment.get(dep)
            if dep_task is None or dep_a is None:
                continue
            dep_end = dep_a.end(dep_task.duration)
            if a.time_slot < dep_end:
                violations.append(Violation(
                    RuleName.DEPENDENCY_ORDER,
                    f"task {tid} starts at {a.time_slot} before dependency {dep} ends at {dep_end}",
                    task_ids=(tid, dep), resource_ids=(a.resource_id, dep_a.resource_id),
                    time_slot=a.time_slot,
                ))
    return violations


def check_seat_sufficiency(snap: Snapshot) -> List[Violation]:
    has_seats = any(r.seat_capacity is not None for r in snap.resources.values())
    has_occupants = any(t.occupant_count is not None for t in snap.tasks.values())
    if not (has_seats and has_occupants):
        return []

    violations: List[Violation] = []
    for a in snap.schedule:
        task = snap.tasks.get(a.task_id)
        resource = snap.resources.get(a.resource_id)
        if task is None or resource is None:
            continue
        if task.occupant_count is None or resource.seat_capacity is None:
            continue
        if task.occupant_count > resource.seat_capacity:
            violations.append(Violation(
                RuleName.SEAT_SUFFICIENCY,
                f"task {a.task_id} needs {task.occupant_count} seats but resource "
                f"{a.resource_id} has {resource.seat_capacity}",
                task_ids=(a.task_id,), resource_ids=(a.resource_id,), time_slot=a.time_slot,
            ))
    return violations


RULES: List[Callable[[Snapshot], List[Violation]]] = [
    check_schedule_integrity,
    check_slot_duration_sanity,
    check_no_overbooking,
    check_no_overlap_capacity_one,
    check_dependency_order,
    check_seat_sufficiency,
]


def validate_schedule(
    tasks: Sequence[Task],
    resources: Sequence[Resource],
    schedule: Sequence[Assignment],
) -> ValidationResult:
    """
    Evaluate every rule against the schedule and collect all violations.

    Args:
        tasks: Tasks of the request
        resources: Resources of the request
        schedule: Assignments from any source

    Returns:
        ValidationResult; `valid` is True iff no rule reported a violation
    """
    snap = Snapshot.build(tasks, resources, schedule)
    violations: List[Violation] = []
    for rule in RULES:
        violations.extend(rule(snap))

    result = ValidationResult(violations=violations)
    if result.valid:
        logger.info(f"Schedule valid: {len(snap.schedule)} assignments checked")
    else:
        logger.info(f"Schedule invalid: {len(violations)} violations")
        for v in violations:
            logger.debug(str(v))
    return result
