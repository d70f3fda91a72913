from dataclasses import dataclass
from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field


INPUT_MODE_FORM = "form"
INPUT_MODE_VOICE = "voice"
INPUT_MODES = {INPUT_MODE_FORM, INPUT_MODE_VOICE}

EXTRACTION_TEXT = "text"
EXTRACTION_UNSUPPORTED = "unsupported"
EXTRACTION_FAILED = "failed"


class FieldViolation(BaseModel):
    field: str
    reason: str


class PitchFields(BaseModel):
    """Form-mode fields after coercion. Keys arrive under their multipart names."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    job_title: str = Field(alias="jobTitle", min_length=2)
    purpose: str = Field(alias="purpose", min_length=2)
    focus_area: str = Field(default="", alias="focusArea")
    audience: str = Field(default="", alias="audience")
    additional_context: str = Field(default="", alias="additionalContext")
    tone: str = Field(default="", alias="tone")
    length: str = Field(default="", alias="length")


@dataclass(frozen=True)
class UploadedDocument:
    data: bytes
    media_type: Optional[str]
    filename: str


@dataclass(frozen=True)
class PitchRequest:
    input_mode: str
    job_title: str = ""
    purpose: str = ""
    focus_area: str = ""
    audience: str = ""
    additional_context: str = ""
    tone: str = ""
    length: str = ""
    voice_transcription: str = ""
    resume_file: Optional[UploadedDocument] = None


@dataclass(frozen=True)
class ExtractionResult:
    status: str
    text: str = ""
    error: Optional[str] = None


@dataclass
class PitchResult:
    chunks: Iterator[str]
    streamed: bool


@dataclass(frozen=True)
class AudioUpload:
    data: bytes
    media_type: str
    filename: str


class PitchResponse(BaseModel):
    pitch: str


class TranscriptionResponse(BaseModel):
    text: str


class ValidationErrorResponse(BaseModel):
    errors: List[FieldViolation] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
