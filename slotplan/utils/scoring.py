from typing import Dict, Sequence

from slotplan.exceptions.custom_errors import InternalError
from slotplan.models.entities import Assignment, Task


def _task(tasks: Dict[int, Task], task_id: int) -> Task:
    try:
        return tasks[task_id]
    except KeyError:
        raise InternalError(f"assignment references unknown task {task_id}") from None


def makespan(schedule: Sequence[Assignment], tasks: Dict[int, Task]) -> int:
    """Latest finishing unit over the schedule, 0 when empty."""
    return max((a.end(_task(tasks, a.task_id).duration) for a in schedule), default=0)


def priority_sum(schedule: Sequence[Assignment], tasks: Dict[int, Task]) -> int:
    return sum(_task(tasks, a.task_id).priority for a in schedule)


def fitness(schedule: Sequence[Assignment], tasks: Dict[int, Task]) -> float:
    """Sum of priorities minus makespan. Higher is better."""
    return float(priority_sum(schedule, tasks) - makespan(schedule, tasks))
