import logging
from typing import Mapping, Optional

from .document_extractor import extract_document_text
from .form_input import RawField, normalize_pitch_fields, normalize_voice_fields, resolve_input_mode
from .models import INPUT_MODE_VOICE, PitchRequest, UploadedDocument
from .prompts.pitch import build_pitch_prompt, select_context


logger = logging.getLogger("uvicorn.error")


def build_pitch_request(
    raw: Mapping[str, RawField],
    resume_file: Optional[UploadedDocument] = None,
) -> PitchRequest:
    input_mode = resolve_input_mode(raw)

    if input_mode == INPUT_MODE_VOICE:
        values = normalize_voice_fields(raw)
        return PitchRequest(
            input_mode=input_mode,
            job_title=values["jobTitle"],
            purpose=values["purpose"],
            focus_area=values["focusArea"],
            audience=values["audience"],
            additional_context=values["additionalContext"],
            tone=values["tone"],
            length=values["length"],
            voice_transcription=values["voiceTranscription"],
        )

    fields = normalize_pitch_fields(raw)
    return PitchRequest(
        input_mode=input_mode,
        job_title=fields.job_title,
        purpose=fields.purpose,
        focus_area=fields.focus_area,
        audience=fields.audience,
        additional_context=fields.additional_context,
        tone=fields.tone,
        length=fields.length,
        resume_file=resume_file,
    )


def extract_resume_text(request: PitchRequest) -> str:
    if request.input_mode == INPUT_MODE_VOICE or request.resume_file is None:
        return ""

    resume = request.resume_file
    result = extract_document_text(resume.data, resume.media_type)
    logger.info(
        "resume_extraction status=%s media_type=%s size_bytes=%s text_len=%s",
        result.status,
        resume.media_type,
        len(resume.data),
        len(result.text),
    )
    return result.text


def build_prompt_for_request(request: PitchRequest) -> str:
    resume_text = extract_resume_text(request)
    context = select_context(
        request.input_mode,
        resume_text=resume_text,
        additional_context=request.additional_context,
        voice_transcription=request.voice_transcription,
    )
    return build_pitch_prompt(
        job_title=request.job_title,
        purpose=request.purpose,
        focus_area=request.focus_area,
        audience=request.audience,
        context=context,
        tone=request.tone,
        length=request.length,
    )
