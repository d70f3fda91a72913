import logging
from typing import Any, Iterable, Iterator

from openai import APIConnectionError, APIStatusError, APITimeoutError, AzureOpenAI

from .config import Settings
from .errors import UpstreamServiceError, truncate
from .models import PitchResult
from .prompts.pitch import SYSTEM_PROMPT


logger = logging.getLogger("uvicorn.error")
SERVICE_NAME = "Azure OpenAI"


def _build_client(settings: Settings) -> AzureOpenAI:
    return AzureOpenAI(
        azure_endpoint=settings.azure_endpoint,
        api_key=settings.azure_api_key,
        api_version=settings.azure_api_version,
        azure_deployment=settings.azure_deployment,
    )


def _text_or_empty(value: Any) -> str:
    # Chat completion content is a string, or None on role and filter frames.
    return value if isinstance(value, str) else ""


def _status_details(exc: APIStatusError) -> str:
    response = getattr(exc, "response", None)
    text = getattr(response, "text", "") if response is not None else ""
    return text or getattr(exc, "message", "") or str(exc)


def build_messages(prompt: str) -> list:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def _open_completion(client: AzureOpenAI, settings: Settings, prompt: str, *, stream: bool):
    try:
        return client.chat.completions.create(
            model=settings.azure_deployment,
            messages=build_messages(prompt),
            max_tokens=settings.pitch_max_tokens,
            stream=stream,
        )
    except APIStatusError as exc:
        raise UpstreamServiceError(
            exc.status_code,
            _status_details(exc),
            service=SERVICE_NAME,
        ) from exc
    except APITimeoutError as exc:
        raise RuntimeError("Pitch completion request timed out.") from exc
    except APIConnectionError as exc:
        raise RuntimeError(f"Failed to connect to {SERVICE_NAME}: {exc}") from exc


def iter_stream_text(stream: Iterable[Any]) -> Iterator[str]:
    """Yield each non-empty content delta in arrival order."""
    try:
        for chunk in stream:
            choices = getattr(chunk, "choices", None)
            if not choices:
                # Azure sends content-filter frames without choices.
                continue
            delta = getattr(choices[0], "delta", None)
            text = _text_or_empty(getattr(delta, "content", None)) if delta is not None else ""
            if text:
                yield text
    except Exception as exc:
        # Headers are already sent; the only option left is to end the body.
        logger.warning("pitch_stream_interrupted error=%s", truncate(str(exc)))
    finally:
        close = getattr(stream, "close", None)
        if callable(close):
            close()


def generate_pitch(prompt: str, settings: Settings) -> PitchResult:
    """Open the completion call and return the pitch as a chunk sequence.

    The upstream request is made here, before any response byte is written,
    so upstream failures still surface as a proper error status. With
    streaming disabled the sequence holds the whole pitch as one chunk.
    """
    client = _build_client(settings)

    if settings.pitch_streaming:
        stream = _open_completion(client, settings, prompt, stream=True)
        logger.info("pitch_completion_stream_opened prompt_chars=%s", len(prompt))
        return PitchResult(chunks=iter_stream_text(stream), streamed=True)

    response = _open_completion(client, settings, prompt, stream=False)
    choice = response.choices[0] if response.choices else None
    if choice is None:
        raise RuntimeError(f"{SERVICE_NAME} returned no choices.")
    content = _text_or_empty(choice.message.content).strip()
    logger.info("pitch_completion_done prompt_chars=%s pitch_chars=%s", len(prompt), len(content))
    return PitchResult(chunks=iter([content]), streamed=False)
