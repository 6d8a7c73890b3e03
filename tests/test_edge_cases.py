import logging
import pytest
from slotplan.config.settings import Settings
from slotplan.engine.capacity import CapacityLedger
from slotplan.engine.generator import generate_schedule
from slotplan.engine.input_checks import check_problem
from slotplan.exceptions.custom_errors import (
    CycleDetectedError,
    InputError,
    InternalError,
    status_code_for,
)
from slotplan.graph.dependency_graph import build_dependency_graph, dependency_ready_order, find_cycle
from slotplan.models.entities import Task, Resource, Assignment
from slotplan.utils.logging_config import setup_logging
from slotplan.utils.scoring import fitness, makespan, priority_sum


R1 = [Resource(id="R1", capacity_per_slot=1)]


class TestInputRejection:
    """Malformed input is rejected before generation."""

    @pytest.mark.parametrize("duration", [0, -3])
    def test_non_positive_duration(self, duration):
        tasks = [Task(id=1, duration=duration, priority=0, required_resource="R1")]
        with pytest.raises(InputError) as exc:
            generate_schedule(tasks, R1)
        assert exc.value.field == "tasks[0].duration"

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_non_positive_capacity(self, capacity):
        tasks = [Task(id=1, duration=1, priority=0, required_resource="R1")]
        with pytest.raises(InputError) as exc:
            generate_schedule(tasks, [Resource(id="R1", capacity_per_slot=capacity)])
        assert exc.value.field == "resources[0].capacityPerSlot"

    def test_empty_resource_id(self):
        with pytest.raises(InputError) as exc:
            check_problem([], [Resource(id="", capacity_per_slot=1)])
        assert exc.value.field == "resources[0].resourceId"

    def test_empty_required_resource(self):
        tasks = [Task(id=1, duration=1, priority=0, required_resource="")]
        with pytest.raises(InputError) as exc:
            check_problem(tasks, R1)
        assert exc.value.field == "tasks[0].requiredResource"

    def test_unknown_required_resource(self):
        tasks = [Task(id=1, duration=1, priority=0, required_resource="R2")]
        with pytest.raises(InputError, match="unknown resource"):
            check_problem(tasks, R1)

    def test_duplicate_task_id(self):
        tasks = [
            Task(id=1, duration=1, priority=0, required_resource="R1"),
            Task(id=1, duration=2, priority=0, required_resource="R1"),
        ]
        with pytest.raises(InputError) as exc:
            check_problem(tasks, R1)
        assert exc.value.field == "tasks[1].taskId"

    def test_duplicate_resource_id(self):
        with pytest.raises(InputError, match="duplicate resourceId"):
            check_problem([], R1 + R1)

    def test_negative_seat_facts(self):
        with pytest.raises(InputError):
            check_problem([], [Resource(id="R1", capacity_per_slot=1, seat_capacity=-1)])
        with pytest.raises(InputError):
            check_problem([Task(id=1, duration=1, priority=0, required_resource="R1", occupant_count=-5)], R1)

    def test_error_message_names_field(self):
        err = InputError("task 1 has non-positive duration", field="tasks[0].duration")
        assert str(err) == "tasks[0].duration: task 1 has non-positive duration"

    def test_duration_limit_from_settings(self):
        tasks = [Task(id=1, duration=50, priority=0, required_resource="R1")]
        with pytest.raises(InputError) as exc:
            check_problem(tasks, R1, Settings(max_duration=10))
        assert exc.value.field == "tasks[0].duration"
        check_problem(tasks, R1, Settings(max_duration=50))


class TestUnknownDependencies:
    """Unknown dependsOn references: rejected by default, ignored when allowed."""

    def test_rejected_by_default(self, strict_settings):
        tasks = [Task(id=1, duration=2, priority=1, required_resource="R1", depends_on=(99,))]
        with pytest.raises(InputError) as exc:
            generate_schedule(tasks, R1, strict_settings)
        assert exc.value.field == "tasks[0].dependsOn"
        assert "99" in exc.value.message

    def test_ignored_when_allowed(self, permissive_settings):
        tasks = [
            Task(id=1, duration=2, priority=1, required_resource="R1", depends_on=(99,)),
            Task(id=2, duration=1, priority=0, required_resource="R1", depends_on=(1, 98)),
        ]
        result = generate_schedule(tasks, R1, permissive_settings)

        starts = {a.task_id: a.time_slot for a in result.schedule}
        assert starts == {1: 0, 2: 2}


class TestCycles:

    def test_two_task_cycle_rejected(self):
        tasks = [
            Task(id=1, duration=1, priority=0, required_resource="R1", depends_on=(2,)),
            Task(id=2, duration=1, priority=0, required_resource="R1", depends_on=(1,)),
        ]
        with pytest.raises(CycleDetectedError) as exc:
            generate_schedule(tasks, R1)
        assert exc.value.cycle == (1, 2, 1)
        assert exc.value.field == "dependsOn"

    def test_self_dependency_rejected(self):
        tasks = [Task(id=1, duration=1, priority=0, required_resource="R1", depends_on=(1,))]
        with pytest.raises(CycleDetectedError):
            check_problem(tasks, R1)

    def test_cycle_is_an_input_error(self):
        assert issubclass(CycleDetectedError, InputError)

    def test_acyclic_graph(self, diamond_scenario):
        tasks, _ = diamond_scenario
        assert find_cycle(tasks) is None

    def test_longer_cycle_path(self):
        tasks = [
            Task(id=1, duration=1, priority=0, required_resource="R1"),
            Task(id=2, duration=1, priority=0, required_resource="R1", depends_on=(1, 4)),
            Task(id=3, duration=1, priority=0, required_resource="R1", depends_on=(2,)),
            Task(id=4, duration=1, priority=0, required_resource="R1", depends_on=(3,)),
        ]
        assert find_cycle(tasks) == [2, 4, 3, 2]


class TestDependencyGraph:

    def test_graph_drops_unknown_ids(self):
        tasks = [Task(id=1, duration=1, priority=0, required_resource="R1", depends_on=(7,))]
        assert build_dependency_graph(tasks) == {1: set()}

    def test_ready_order_on_cycle_is_internal_error(self):
        tasks = [
            Task(id=1, duration=1, priority=0, required_resource="R1", depends_on=(2,)),
            Task(id=2, duration=1, priority=0, required_resource="R1", depends_on=(1,)),
        ]
        with pytest.raises(InternalError):
            dependency_ready_order(tasks)


class TestLedgerAndScoring:

    def test_ledger_counts_units(self):
        ledger = CapacityLedger([Resource(id="R", capacity_per_slot=2)])
        ledger.occupy("R", 0, 2)
        ledger.occupy("R", 1, 1)

        assert [ledger.used("R", u) for u in range(3)] == [1, 2, 0]
        assert ledger.fits("R", 0, 1)
        assert not ledger.fits("R", 0, 2)

    def test_ledger_unknown_resource(self):
        ledger = CapacityLedger(R1)
        with pytest.raises(InternalError):
            ledger.fits("nope", 0, 1)

    def test_fitness_components(self, chain_scenario):
        tasks, _ = chain_scenario
        task_map = {t.id: t for t in tasks}
        schedule = [Assignment(1, 0, "R1"), Assignment(2, 2, "R1")]

        assert priority_sum(schedule, task_map) == 13
        assert makespan(schedule, task_map) == 3
        assert fitness(schedule, task_map) == 10.0

    def test_fitness_unknown_task(self):
        with pytest.raises(InternalError):
            fitness([Assignment(5, 0, "R1")], {})


class TestErrorCodes:

    def test_status_codes(self):
        assert status_code_for(InputError("bad")) == 400
        assert status_code_for(CycleDetectedError([1, 1])) == 400
        assert status_code_for(InternalError("boom")) == 500


class TestSettingsAndLogging:

    def test_env_enables_unknown_dependencies(self, monkeypatch):
        monkeypatch.setenv("SLOTPLAN_ALLOW_UNKNOWN_DEPENDENCIES", "true")
        assert Settings().allow_unknown_dependencies is True

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SLOTPLAN_ALLOW_UNKNOWN_DEPENDENCIES", raising=False)
        assert Settings(_env_file=None).allow_unknown_dependencies is False

    def test_setup_logging_debug(self):
        logger = setup_logging(Settings(debug=True))
        assert logger.name == "slotplan"
        assert logger.level == logging.DEBUG

    def test_setup_logging_idempotent(self):
        setup_logging(Settings(debug=False, log_level="WARNING"))
        logger = setup_logging(Settings(debug=False, log_level="WARNING"))

        ours = [h for h in logger.handlers if getattr(h, "_slotplan_handler", False)]
        assert len(ours) == 1
        assert logger.level == logging.WARNING
