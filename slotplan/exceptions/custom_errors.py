from typing import Optional, Sequence


class SchedulingError(Exception):
    """Base class for every error raised by the generator, validator or pipeline."""

    pass


class InputError(SchedulingError):
    """Raised when tasks or resources are malformed, before any schedule is generated."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class CycleDetectedError(InputError):
    """Raised when the dependsOn graph contains a cycle."""

    def __init__(self, cycle: Sequence[int]):
        self.cycle = tuple(cycle)
        path = " -> ".join(str(tid) for tid in self.cycle)
        super().__init__(f"dependency cycle detected: {path}", field="dependsOn")


class InternalError(SchedulingError):
    """Raised when a computation hits a missing lookup or a broken invariant."""

    pass


# Mapping of custom exceptions to HTTP status codes
ERROR_CODES = {
    InputError: 400,
    CycleDetectedError: 400,
    InternalError: 500,
}


def status_code_for(error: SchedulingError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_CODES:
            return ERROR_CODES[cls]
    return 500
