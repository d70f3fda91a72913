from typing import List

from .models import FieldViolation


MAX_ERROR_CHARS = 1200


def truncate(text: str, max_chars: int = MAX_ERROR_CHARS) -> str:
    value = (text or "").strip()
    if len(value) <= max_chars:
        return value
    return value[: max_chars - 3] + "..."


class FieldValidationError(ValueError):
    def __init__(self, violations: List[FieldViolation]) -> None:
        self.violations = violations
        fields = ", ".join(violation.field for violation in violations)
        super().__init__(f"Invalid fields: {fields}")


class UpstreamServiceError(RuntimeError):
    """A hosted AI endpoint answered with a non-success status."""

    def __init__(self, status_code: int, details: str, *, service: str) -> None:
        self.status_code = status_code
        self.details = details
        self.service = service
        super().__init__(f"{service} error {status_code}: {truncate(details)}")


class TranscriptionTimeoutError(RuntimeError):
    pass
