import asyncio
import logging
from typing import Optional

import httpx
from fastapi import HTTPException, UploadFile

from .config import Settings
from .constants import CHUNK_SIZE, DEFAULT_AUDIO_FILENAME, DEFAULT_AUDIO_MEDIA_TYPE, MAX_UPLOAD_BYTES
from .errors import TranscriptionTimeoutError, UpstreamServiceError
from .models import AudioUpload


logger = logging.getLogger("uvicorn.error")
SERVICE_NAME = "Transcription API"


async def read_upload_bytes(
    upload: UploadFile,
    *,
    field_name: str,
    max_size_bytes: Optional[int] = None,
) -> bytes:
    if max_size_bytes is None:
        max_size_bytes = MAX_UPLOAD_BYTES
    chunks = []
    total_bytes = 0

    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        total_bytes += len(chunk)
        if total_bytes > max_size_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"{field_name} is too large. Max size is {max_size_bytes} bytes.",
            )
        chunks.append(chunk)

    await upload.close()
    return b"".join(chunks)


async def read_audio_upload(upload: UploadFile) -> AudioUpload:
    data = await read_upload_bytes(upload, field_name="file")
    if not data:
        raise HTTPException(status_code=400, detail="file is empty.")
    return AudioUpload(
        data=data,
        media_type=upload.content_type or DEFAULT_AUDIO_MEDIA_TYPE,
        filename=upload.filename or DEFAULT_AUDIO_FILENAME,
    )


def _build_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"Authorization": f"Bearer {settings.transcribe_api_key}"},
        timeout=settings.transcribe_timeout_seconds,
    )


async def _post_audio(settings: Settings, audio: AudioUpload) -> httpx.Response:
    async with _build_client(settings) as client:
        return await client.post(
            settings.transcribe_url,
            data={"model": settings.transcribe_model, "response_format": "json"},
            files={"file": (audio.filename, audio.data, audio.media_type)},
        )


async def transcribe_audio(settings: Settings, audio: AudioUpload) -> str:
    """Forward one audio clip to the transcription endpoint and return its text.

    The whole call runs under a single deadline. Non-success responses are
    raised with the upstream status and body untouched.
    """
    deadline = settings.transcribe_timeout_seconds
    try:
        response = await asyncio.wait_for(_post_audio(settings, audio), timeout=deadline)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise TranscriptionTimeoutError(
            f"{SERVICE_NAME} request timed out after {deadline:g} seconds."
        ) from exc

    if response.status_code >= 400:
        logger.warning(
            "transcription_upstream_error status=%s body_chars=%s",
            response.status_code,
            len(response.text or ""),
        )
        raise UpstreamServiceError(response.status_code, response.text or "", service=SERVICE_NAME)

    try:
        payload = response.json()
    except ValueError as exc:
        raise RuntimeError(f"{SERVICE_NAME} returned a non-JSON HTTP response.") from exc

    text = payload.get("text") if isinstance(payload, dict) else None
    transcript = str(text or "")
    logger.info(
        "transcription_done filename=%s size_bytes=%s text_len=%s",
        audio.filename,
        len(audio.data),
        len(transcript),
    )
    return transcript
