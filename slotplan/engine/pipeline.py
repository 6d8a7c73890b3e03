"""
In-process generate-then-validate orchestration.

The generator's output is never trusted on its own: `schedule_and_validate`
hands the very same tasks and resources plus the produced schedule to the
validator and returns both verdicts side by side. The dict-level helpers speak
the camelCase JSON contract for callers that exchange payloads.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from slotplan.config.settings import Settings, get_settings
from slotplan.engine.generator import generate_schedule
from slotplan.engine.validator import validate_schedule
from slotplan.models.constraints import ValidationResult
from slotplan.models.entities import GenerationResult, Resource, Task
from slotplan.models.schemas import (
    GenerateRequest,
    GenerateResponse,
    PipelineResponse,
    ValidateRequest,
    ValidateResponse,
    dump,
    parse_payload,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineReport:
    generation: GenerationResult
    validation: ValidationResult

    @property
    def valid(self) -> bool:
        return self.validation.valid


def schedule_and_validate(
    tasks: Sequence[Task],
    resources: Sequence[Resource],
    settings: Optional[Settings] = None,
) -> PipelineReport:
    settings = settings or get_settings()
    generation = generate_schedule(tasks, resources, settings)
    validation = validate_schedule(tasks, resources, generation.schedule)
    if not validation.valid:
        # seat sufficiency is checked here only, the generator does not place by seats
        logger.warning(f"Generated schedule failed validation with {len(validation.violations)} violations")
    return PipelineReport(generation=generation, validation=validation)


def generate(payload: Dict[str, Any], settings: Optional[Settings] = None) -> Dict[str, Any]:
    """`{"tasks", "resources"}` -> `{"bestSchedule", "fitness"}`"""
    req = parse_payload(GenerateRequest, payload)
    result = generate_schedule(req.domain_tasks(), req.domain_resources(), settings)
    return dump(GenerateResponse.from_domain(result))


def validate(payload: Dict[str, Any]) -> Dict[str, Any]:
    """`{"tasks", "resources", "schedule"}` -> `{"valid", "violations"}`"""
    req = parse_payload(ValidateRequest, payload)
    result = validate_schedule(req.domain_tasks(), req.domain_resources(), req.domain_schedule())
    return dump(ValidateResponse.from_domain(result))


def run(payload: Dict[str, Any], settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Generate, re-validate and merge both outputs into one response."""
    req = parse_payload(GenerateRequest, payload)
    report = schedule_and_validate(req.domain_tasks(), req.domain_resources(), settings)
    generated = GenerateResponse.from_domain(report.generation)
    checked = ValidateResponse.from_domain(report.validation)
    return dump(PipelineResponse(
        best_schedule=generated.best_schedule,
        fitness=generated.fitness,
        valid=checked.valid,
        violations=checked.violations,
    ))
