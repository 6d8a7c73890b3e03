from typing import Dict, List, Optional, Sequence, Set

from slotplan.exceptions.custom_errors import InternalError
from slotplan.models.entities import Task


def build_dependency_graph(tasks: Sequence[Task]) -> Dict[int, Set[int]]:
    """Map each task id to the ids it depends on. Unknown ids are dropped."""
    known = {t.id for t in tasks}
    return {t.id: {d for d in t.depends_on if d in known} for t in tasks}


def find_cycle(tasks: Sequence[Task]) -> Optional[List[int]]:
    """
    Return one dependency cycle as a closed path (first id repeated last),
    or None if the graph is acyclic.

    Iterative three-colour DFS in input order so the reported cycle is stable.
    """
    graph = build_dependency_graph(tasks)
    WHITE, GREY, BLACK = 0, 1, 2
    colour = {tid: WHITE for tid in graph}

    for root in graph:
        if colour[root] != WHITE:
            continue
        path: List[int] = [root]
        stack = [iter(sorted(graph[root]))]
        colour[root] = GREY
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                colour[path.pop()] = BLACK
                stack.pop()
                continue
            if colour[nxt] == GREY:
                return path[path.index(nxt):] + [nxt]
            if colour[nxt] == WHITE:
                colour[nxt] = GREY
                path.append(nxt)
                stack.append(iter(sorted(graph[nxt])))
    return None


def dependency_ready_order(ordered: Sequence[Task]) -> List[Task]:
    """
    Keep the given order, except that a task is deferred until every known
    dependency has been emitted. Each step takes the first task in `ordered`
    whose dependencies are all done.

    Complexity: O(n^2) in the worst case, O(n) when `ordered` already
    respects dependencies.
    """
    graph = build_dependency_graph(ordered)
    done: Set[int] = set()
    pending = list(ordered)
    result: List[Task] = []
    while pending:
        for i, task in enumerate(pending):
            if graph[task.id] <= done:
                break
        else:
            raise InternalError(
                f"no dependency-ready task among {[t.id for t in pending]}; graph is cyclic"
            )
        result.append(pending.pop(i))
        done.add(task.id)
    return result
