"""
Boundary checks run before generation.

Everything the generator relies on for termination and for its lookups is
checked here: positive durations and capacities, non-empty unique identifiers,
resolvable references, and an acyclic dependency graph. A problem that passes
`check_problem` can always be scheduled.
"""

import logging
from typing import Optional, Sequence

from slotplan.config.settings import Settings, get_settings
from slotplan.exceptions.custom_errors import CycleDetectedError, InputError
from slotplan.graph.dependency_graph import find_cycle
from slotplan.models.entities import Resource, Task

logger = logging.getLogger(__name__)


def _reject(message: str, field: str) -> None:
    logger.warning(f"Rejected input: {field}: {message}")
    raise InputError(message, field=field)


def check_resources(resources: Sequence[Resource]) -> None:
    seen = set()
    for i, r in enumerate(resources):
        if not isinstance(r.id, str) or not r.id:
            _reject("resource has empty resourceId", f"resources[{i}].resourceId")
        if r.id in seen:
            _reject(f"duplicate resourceId {r.id!r}", f"resources[{i}].resourceId")
        seen.add(r.id)
        if r.capacity_per_slot is None or r.capacity_per_slot <= 0:
            _reject(f"resource {r.id!r} must have capacityPerSlot > 0", f"resources[{i}].capacityPerSlot")
        if r.seat_capacity is not None and r.seat_capacity < 0:
            _reject(f"resource {r.id!r} has negative seatCapacity", f"resources[{i}].seatCapacity")


def check_tasks(
    tasks: Sequence[Task],
    resources: Sequence[Resource],
    allow_unknown_dependencies: bool = False,
    max_duration: Optional[int] = None,
) -> None:
    resource_ids = {r.id for r in resources}
    task_ids = set()
    for i, t in enumerate(tasks):
        if t.id in task_ids:
            _reject(f"duplicate taskId {t.id}", f"tasks[{i}].taskId")
        task_ids.add(t.id)
        if t.duration is None or t.duration <= 0:
            _reject(f"task {t.id} has non-positive duration", f"tasks[{i}].duration")
        if max_duration is not None and t.duration > max_duration:
            _reject(f"task {t.id} duration exceeds {max_duration}", f"tasks[{i}].duration")
        if not t.required_resource:
            _reject(f"task {t.id} missing requiredResource", f"tasks[{i}].requiredResource")
        if t.required_resource not in resource_ids:
            _reject(f"task {t.id} requires unknown resource {t.required_resource!r}", f"tasks[{i}].requiredResource")
        if t.occupant_count is not None and t.occupant_count < 0:
            _reject(f"task {t.id} has negative occupantCount", f"tasks[{i}].occupantCount")

    if allow_unknown_dependencies:
        return
    for i, t in enumerate(tasks):
        for dep in t.depends_on:
            if dep not in task_ids:
                _reject(f"task {t.id} depends on unknown task {dep}", f"tasks[{i}].dependsOn")


def check_problem(
    tasks: Sequence[Task],
    resources: Sequence[Resource],
    settings: Optional[Settings] = None,
) -> None:
    """
    Raise InputError (or CycleDetectedError) if the problem cannot be handed
    to the generator.
    """
    settings = settings or get_settings()
    check_resources(resources)
    check_tasks(tasks, resources, settings.allow_unknown_dependencies, settings.max_duration)

    cycle = find_cycle(tasks)
    if cycle is not None:
        logger.warning(f"Rejected input: dependency cycle {cycle}")
        raise CycleDetectedError(cycle)
