"""
Greedy Schedule Generator

Deterministic constructive heuristic: one pass over the tasks, one
placement per task, no backtracking and no search over alternatives.

Algorithm:
1. Order tasks by descending priority (stable, so ties keep input order),
   deferring any task whose dependencies have not been placed yet
2. Earliest start of a task = latest finish among its placed dependencies
3. First-fit scan upward from that bound for a window in which every
   time unit of the required resource has spare capacity
4. Record the assignment and charge the capacity ledger

Fitness = sum(priority) - makespan. It is reported, not optimised; a
multi-candidate search would rank candidates by it.

Time Complexity: O(n^2 + n * (H * d)) where:
    n = number of tasks
    H = scan distance (bounded by the total duration of all tasks)
    d = task duration
"""

import logging
from typing import Dict, List, Optional, Sequence

from slotplan.config.settings import Settings, get_settings
from slotplan.engine.capacity import CapacityLedger
from slotplan.engine.input_checks import check_problem
from slotplan.exceptions.custom_errors import InternalError
from slotplan.graph.dependency_graph import dependency_ready_order
from slotplan.models.entities import Assignment, GenerationResult, Resource, Task
from slotplan.utils.scoring import fitness

logger = logging.getLogger(__name__)


def priority_order(tasks: Sequence[Task]) -> List[Task]:
    """
    Order tasks for placement.

    Descending priority with input order preserved among equal priorities,
    then adjusted so no task precedes one of its dependencies.
    The result differs from the pure priority order only when a dependency
    has lower priority than a task that depends on it.

    Args:
        tasks: Tasks in input order

    Returns:
        New list in placement order
    """
    by_priority = sorted(tasks, key=lambda t: -t.priority)
    return dependency_ready_order(by_priority)


def earliest_start(task: Task, placed: Dict[int, Assignment], durations: Dict[int, int]) -> int:
    """
    Lower bound on a task's start imposed by its dependencies.

    A dependency that has not been placed contributes 0. With the default
    input checks that only happens for ids absent from the request and
    `allow_unknown_dependencies` enabled.

    Complexity: O(k) where k = len(task.depends_on)
    """
    bound = 0
    for dep in task.depends_on:
        a = placed.get(dep)
        if a is None:
            continue
        bound = max(bound, a.end(durations[dep]))
    return bound


def first_fit(ledger: CapacityLedger, task: Task, bound: int, horizon: int) -> int:
    """
    Smallest start >= bound at which the task fits on its resource.

    Args:
        ledger: Current capacity usage
        task: Task to place
        bound: Earliest permissible start
        horizon: Largest start the scan may reach; every unit past the
            occupied area is free, so a valid problem never gets there

    Returns:
        Selected start time

    Raises:
        InternalError: if no window is found before the horizon
    """
    start = bound
    while not ledger.fits(task.required_resource, start, task.duration):
        start += 1
        if start > horizon:
            raise InternalError(
                f"no free window for task {task.id} on {task.required_resource!r} "
                f"between {bound} and {horizon}"
            )
    return start


def generate_schedule(
    tasks: Sequence[Task],
    resources: Sequence[Resource],
    settings: Optional[Settings] = None,
) -> GenerationResult:
    """
    Build a feasible schedule with exactly one assignment per task.

    Args:
        tasks: Tasks in input order
        resources: Available resources
        settings: Optional override of the cached settings

    Returns:
        GenerationResult with the schedule in placement order and its fitness

    Raises:
        InputError: malformed tasks or resources (nothing is generated)
        CycleDetectedError: cyclic dependsOn graph
        InternalError: broken invariant during construction
    """
    settings = settings or get_settings()
    tasks = list(tasks)
    resources = list(resources)
    check_problem(tasks, resources, settings)

    logger.info(f"Generating schedule: {len(tasks)} tasks, {len(resources)} resources")

    task_map = {t.id: t for t in tasks}
    durations = {t.id: t.duration for t in tasks}
    total_duration = sum(durations.values())
    ledger = CapacityLedger(resources)

    placed: Dict[int, Assignment] = {}
    schedule: List[Assignment] = []
    for task in priority_order(tasks):
        bound = earliest_start(task, placed, durations)
        start = first_fit(ledger, task, bound, bound + total_duration)
        ledger.occupy(task.required_resource, start, task.duration)

        assignment = Assignment(task_id=task.id, time_slot=start, resource_id=task.required_resource)
        placed[task.id] = assignment
        schedule.append(assignment)
        logger.debug(f"Placed task {task.id} on {task.required_resource} at {start} (bound {bound})")

    score = fitness(schedule, task_map)
    logger.info(f"Schedule generated: {len(schedule)} assignments, fitness={score:.2f}")
    return GenerationResult(schedule=schedule, fitness=score)
