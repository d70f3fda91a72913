import dataclasses
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import load_settings
from .constants import MAX_REQUEST_BYTES
from .errors import (
    FieldValidationError,
    TranscriptionTimeoutError,
    UpstreamServiceError,
    truncate,
)
from .form_input import form_to_raw_fields
from .llm_client import generate_pitch
from .models import (
    INPUT_MODE_FORM,
    ErrorResponse,
    PitchResponse,
    TranscriptionResponse,
    UploadedDocument,
    ValidationErrorResponse,
)
from .pitch_service import build_pitch_request, build_prompt_for_request
from .transcription import read_audio_upload, read_upload_bytes, transcribe_audio


logger = logging.getLogger("uvicorn.error")

UPLOAD_ROUTES = {"/api/pitch", "/api/transcribe"}

settings = load_settings()
app = FastAPI(title="Elevator Pitch Generator Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.frontend_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def enforce_upload_size(request, call_next):
    if request.method == "POST" and request.url.path in UPLOAD_ROUTES:
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                if int(content_length) > MAX_REQUEST_BYTES:
                    return JSONResponse(
                        status_code=413,
                        content={"detail": f"Request too large. Max size is {MAX_REQUEST_BYTES} bytes."},
                    )
            except ValueError:
                pass
    return await call_next(request)


def _error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    payload = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


async def _read_form(request: Request):
    try:
        return await request.form()
    except StarletteHTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=400, detail=f"Malformed multipart body: {exc}") from exc


def _first_upload(form, name: str) -> Optional[StarletteUploadFile]:
    # Same rule as text fields: the first part wins, and it must be a file.
    upload = next(iter(form.getlist(name)), None)
    if not isinstance(upload, StarletteUploadFile):
        return None
    return upload


async def _read_resume(form) -> Optional[UploadedDocument]:
    upload = _first_upload(form, "resumeFile")
    if upload is None:
        return None
    data = await read_upload_bytes(upload, field_name="resumeFile")
    if not data:
        return None
    return UploadedDocument(
        data=data,
        media_type=upload.content_type,
        filename=upload.filename or "resume",
    )


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "streaming": settings.pitch_streaming}


@app.post("/api/pitch")
async def create_pitch(request: Request):
    form = await _read_form(request)
    raw_fields = form_to_raw_fields(form)

    try:
        pitch_request = build_pitch_request(raw_fields)
        if pitch_request.input_mode == INPUT_MODE_FORM:
            resume_file = await _read_resume(form)
            if resume_file is not None:
                pitch_request = dataclasses.replace(pitch_request, resume_file=resume_file)

        logger.info(
            "pitch_request mode=%s has_resume=%s",
            pitch_request.input_mode,
            pitch_request.resume_file is not None,
        )
        prompt = await run_in_threadpool(build_prompt_for_request, pitch_request)
        result = await run_in_threadpool(generate_pitch, prompt, settings)
    except FieldValidationError as exc:
        payload = ValidationErrorResponse(errors=exc.violations)
        return JSONResponse(status_code=422, content=payload.model_dump())
    except UpstreamServiceError as exc:
        logger.warning("pitch_upstream_error status=%s details=%s", exc.status_code, truncate(exc.details))
        return _error_response(exc.status_code, f"{exc.service} error", exc.details)
    except StarletteHTTPException:
        raise
    except Exception as exc:
        logger.exception("pitch_request_failed")
        return _error_response(500, str(exc) or "Server error")
    finally:
        await form.close()

    if result.streamed:
        return StreamingResponse(
            result.chunks,
            media_type="text/plain; charset=utf-8",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
    return JSONResponse(content=PitchResponse(pitch="".join(result.chunks)).model_dump())


@app.post("/api/transcribe", response_model=TranscriptionResponse)
async def transcribe(request: Request):
    form = await _read_form(request)
    upload = _first_upload(form, "file")
    if upload is None:
        await form.close()
        return _error_response(400, "No audio file uploaded.")

    try:
        audio = await read_audio_upload(upload)
        text = await transcribe_audio(settings, audio)
    except TranscriptionTimeoutError as exc:
        logger.warning("transcription_timeout error=%s", exc)
        return _error_response(408, "Timeout", str(exc))
    except UpstreamServiceError as exc:
        return _error_response(exc.status_code, f"{exc.service} error", exc.details)
    except StarletteHTTPException:
        raise
    except Exception as exc:
        logger.exception("transcription_request_failed")
        return _error_response(500, "Server error", str(exc))
    finally:
        await form.close()

    return TranscriptionResponse(text=text)
