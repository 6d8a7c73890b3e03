from collections import defaultdict
from typing import Dict, Iterable

from slotplan.exceptions.custom_errors import InternalError
from slotplan.models.entities import Resource


class CapacityLedger:
    """
    Tracks how many tasks occupy each time unit of each resource.

    Scoped to a single generator invocation; never shared between requests.
    """

    def __init__(self, resources: Iterable[Resource]):
        self.capacity: Dict[str, int] = {r.id: r.capacity_per_slot for r in resources}
        self.usage: Dict[str, Dict[int, int]] = {rid: defaultdict(int) for rid in self.capacity}

    def _usage_for(self, resource_id: str) -> Dict[int, int]:
        try:
            return self.usage[resource_id]
        except KeyError:
            raise InternalError(f"capacity lookup for unknown resource {resource_id!r}") from None

    def used(self, resource_id: str, unit: int) -> int:
        return self._usage_for(resource_id).get(unit, 0)

    def fits(self, resource_id: str, start: int, duration: int) -> bool:
        """True if every unit in [start, start + duration) has spare capacity."""
        usage = self._usage_for(resource_id)
        cap = self.capacity[resource_id]
        return all(usage.get(u, 0) < cap for u in range(start, start + duration))

    def occupy(self, resource_id: str, start: int, duration: int) -> None:
        usage = self._usage_for(resource_id)
        for u in range(start, start + duration):
            usage[u] += 1
