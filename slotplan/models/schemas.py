"""
Wire models for the generator/validator JSON contract.

Field names on the wire are camelCase (taskId, requiredResource, ...); the
models accept either spelling and always dump camelCase. Positivity of
durations and capacities is not enforced here (only an upper bound on duration is): the generator rejects such
input in check_problem, while the validator must be able to report it.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from slotplan.config.settings import get_settings
from slotplan.exceptions.custom_errors import InputError
from slotplan.models.constraints import ValidationResult
from slotplan.models.entities import Assignment, GenerationResult, Resource, Task


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TaskDTO(_WireModel):
    task_id: int = Field(..., alias="taskId")
    duration: int
    priority: int
    required_resource: str = Field(..., alias="requiredResource")
    depends_on: List[int] = Field(default_factory=list, alias="dependsOn")
    course_name: Optional[str] = Field(None, alias="courseName")
    student_count: Optional[int] = Field(None, alias="studentCount")

    @field_validator("depends_on", mode="before")
    @classmethod
    def null_depends_on(cls, v: Any):
        """Treat an explicit null dependency list as empty."""
        return [] if v is None else v

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v: int):
        """Cap duration so occupancy walks stay bounded."""
        limit = get_settings().max_duration
        if v > limit:
            raise ValueError(f"duration must be at most {limit} time units")
        return v

    def to_domain(self) -> Task:
        return Task(
            id=self.task_id,
            duration=self.duration,
            priority=self.priority,
            required_resource=self.required_resource,
            depends_on=tuple(self.depends_on),
            label=self.course_name,
            occupant_count=self.student_count,
        )

    @classmethod
    def from_domain(cls, t: Task) -> "TaskDTO":
        return cls(
            task_id=t.id,
            duration=t.duration,
            priority=t.priority,
            required_resource=t.required_resource,
            depends_on=list(t.depends_on),
            course_name=t.label,
            student_count=t.occupant_count,
        )


class ResourceDTO(_WireModel):
    resource_id: str = Field(..., alias="resourceId")
    capacity_per_slot: int = Field(..., alias="capacityPerSlot")
    seat_capacity: Optional[int] = Field(None, alias="seatCapacity")

    def to_domain(self) -> Resource:
        return Resource(id=self.resource_id, capacity_per_slot=self.capacity_per_slot, seat_capacity=self.seat_capacity)

    @classmethod
    def from_domain(cls, r: Resource) -> "ResourceDTO":
        return cls(resource_id=r.id, capacity_per_slot=r.capacity_per_slot, seat_capacity=r.seat_capacity)


class AssignmentDTO(_WireModel):
    task_id: int = Field(..., alias="taskId")
    time_slot: int = Field(..., alias="timeSlot")
    resource_id: str = Field(..., alias="resourceId")

    def to_domain(self) -> Assignment:
        return Assignment(task_id=self.task_id, time_slot=self.time_slot, resource_id=self.resource_id)

    @classmethod
    def from_domain(cls, a: Assignment) -> "AssignmentDTO":
        return cls(task_id=a.task_id, time_slot=a.time_slot, resource_id=a.resource_id)


class GenerateRequest(_WireModel):
    tasks: List[TaskDTO]
    resources: List[ResourceDTO]

    def domain_tasks(self) -> List[Task]:
        return [t.to_domain() for t in self.tasks]

    def domain_resources(self) -> List[Resource]:
        return [r.to_domain() for r in self.resources]


class GenerateResponse(_WireModel):
    best_schedule: List[AssignmentDTO] = Field(default_factory=list, alias="bestSchedule")
    fitness: float

    @classmethod
    def from_domain(cls, result: GenerationResult) -> "GenerateResponse":
        return cls(
            best_schedule=[AssignmentDTO.from_domain(a) for a in result.schedule],
            fitness=result.fitness,
        )


class ValidateRequest(GenerateRequest):
    schedule: List[AssignmentDTO] = Field(
        ...,
        validation_alias=AliasChoices("schedule", "bestSchedule"),
    )

    def domain_schedule(self) -> List[Assignment]:
        return [a.to_domain() for a in self.schedule]


class ValidateResponse(_WireModel):
    valid: bool
    violations: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, result: ValidationResult) -> "ValidateResponse":
        return cls(valid=result.valid, violations=[str(v) for v in result.violations])


class PipelineResponse(GenerateResponse):
    valid: bool
    violations: List[str] = Field(default_factory=list)


def format_loc(loc) -> str:
    """('tasks', 0, 'duration') -> 'tasks[0].duration', matching check_problem."""
    out = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out


M = TypeVar("M", bound=BaseModel)


def parse_payload(model: Type[M], payload: Dict[str, Any]) -> M:
    """Validate a decoded JSON payload, converting schema errors to InputError."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        err = exc.errors()[0]
        field = format_loc(err["loc"]) or None
        raise InputError(err["msg"], field=field) from exc


def dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(by_alias=True)
