from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from .errors import FieldValidationError
from .models import (
    INPUT_MODE_FORM,
    INPUT_MODE_VOICE,
    INPUT_MODES,
    FieldViolation,
    PitchFields,
)


# A multipart field can be missing, sent once, or repeated.
RawField = Union[None, str, Sequence[Any]]

FORM_FIELDS = (
    "jobTitle",
    "purpose",
    "focusArea",
    "audience",
    "additionalContext",
    "tone",
    "length",
)

DEFAULT_VOICE_TONE = "Professional"
DEFAULT_VOICE_LENGTH = "Medium"


def coerce_field(value: RawField) -> str:
    """Resolve a raw multipart value to one trimmed string; the first element wins."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if not isinstance(value, str):
        return ""
    return value.strip()


def coerce_fields(raw: Mapping[str, RawField], names: Sequence[str]) -> Dict[str, str]:
    return {name: coerce_field(raw.get(name)) for name in names}


def _violation_reason(error: Dict[str, Any]) -> str:
    if error.get("type") == "string_too_short":
        return "Must be at least 2 characters."
    if error.get("type") == "missing":
        return "Field is required."
    return str(error.get("msg") or "Invalid value.")


def _violations_from(exc: ValidationError) -> List[FieldViolation]:
    violations: List[FieldViolation] = []
    for error in exc.errors():
        location = error.get("loc") or ("__root__",)
        violations.append(FieldViolation(field=str(location[0]), reason=_violation_reason(error)))
    return violations


def normalize_pitch_fields(raw: Mapping[str, RawField]) -> PitchFields:
    candidate = coerce_fields(raw, FORM_FIELDS)
    try:
        return PitchFields.model_validate(candidate)
    except ValidationError as exc:
        raise FieldValidationError(_violations_from(exc)) from exc


def resolve_input_mode(raw: Mapping[str, RawField]) -> str:
    mode = coerce_field(raw.get("inputMode")).lower()
    if not mode:
        return INPUT_MODE_FORM
    if mode not in INPUT_MODES:
        raise FieldValidationError(
            [FieldViolation(field="inputMode", reason="Must be 'form' or 'voice'.")]
        )
    return mode


def normalize_voice_fields(raw: Mapping[str, RawField]) -> Dict[str, str]:
    values = coerce_fields(raw, FORM_FIELDS + ("voiceTranscription",))
    if not values["voiceTranscription"]:
        raise FieldValidationError(
            [FieldViolation(field="voiceTranscription", reason="Transcription is empty.")]
        )
    values["tone"] = values["tone"] or DEFAULT_VOICE_TONE
    values["length"] = values["length"] or DEFAULT_VOICE_LENGTH
    return values


def form_to_raw_fields(form: Any, names: Optional[Sequence[str]] = None) -> Dict[str, List[Any]]:
    """Flatten a Starlette FormData into name -> list of values."""
    keys = names if names is not None else list(dict.fromkeys(form.keys()))
    return {name: form.getlist(name) for name in keys}
