import pytest
from slotplan.config.settings import Settings
from slotplan.models.entities import Task, Resource, Assignment


@pytest.fixture
def strict_settings():
    """Unknown dependency references are rejected."""
    return Settings(allow_unknown_dependencies=False)


@pytest.fixture
def permissive_settings():
    """Unknown dependency references contribute no constraint."""
    return Settings(allow_unknown_dependencies=True)


@pytest.fixture
def chain_scenario():
    """Task 2 depends on task 1, both on a capacity-1 resource."""
    tasks = [
        Task(id=1, duration=2, priority=8, required_resource="R1"),
        Task(id=2, duration=1, priority=5, required_resource="R1", depends_on=(1,)),
    ]
    resources = [Resource(id="R1", capacity_per_slot=1)]
    return tasks, resources


@pytest.fixture
def shared_room_scenario():
    """Three independent tasks competing for a capacity-2 room, plus a lab."""
    tasks = [
        Task(id=10, duration=3, priority=1, required_resource="room"),
        Task(id=11, duration=2, priority=1, required_resource="room"),
        Task(id=12, duration=2, priority=1, required_resource="room"),
        Task(id=13, duration=4, priority=9, required_resource="lab"),
    ]
    resources = [
        Resource(id="room", capacity_per_slot=2),
        Resource(id="lab", capacity_per_slot=1),
    ]
    return tasks, resources


@pytest.fixture
def diamond_scenario():
    """1 -> {2, 3} -> 4 across two resources, priorities against dependency order."""
    tasks = [
        Task(id=4, duration=1, priority=9, required_resource="A", depends_on=(2, 3)),
        Task(id=2, duration=2, priority=5, required_resource="A", depends_on=(1,)),
        Task(id=3, duration=3, priority=5, required_resource="B", depends_on=(1,)),
        Task(id=1, duration=1, priority=1, required_resource="B"),
    ]
    resources = [
        Resource(id="A", capacity_per_slot=1),
        Resource(id="B", capacity_per_slot=1),
    ]
    return tasks, resources


@pytest.fixture
def classroom_scenario():
    """Seat facts present: a 25-student course in a 20-seat room."""
    tasks = [
        Task(id=1, duration=1, priority=1, required_resource="room-101", label="Algebra", occupant_count=25),
    ]
    resources = [Resource(id="room-101", capacity_per_slot=1, seat_capacity=20)]
    schedule = [Assignment(task_id=1, time_slot=0, resource_id="room-101")]
    return tasks, resources, schedule
