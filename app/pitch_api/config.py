import os
from dataclasses import dataclass
from typing import List


DEFAULT_AZURE_API_VERSION = "2024-10-21"
DEFAULT_TRANSCRIBE_URL = "https://api.openai.com/v1/audio/transcriptions"
DEFAULT_TRANSCRIBE_MODEL = "whisper-1"
DEFAULT_TRANSCRIBE_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_TOKENS = 800
DEFAULT_FRONTEND_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"

REQUIRED_ENV_VARS = (
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_KEY",
    "AZURE_OPENAI_DEPLOYMENT",
    "OPENAI_API_KEY",
)


@dataclass(frozen=True)
class Settings:
    azure_endpoint: str
    azure_api_key: str
    azure_deployment: str
    azure_api_version: str
    transcribe_api_key: str
    transcribe_url: str = DEFAULT_TRANSCRIBE_URL
    transcribe_model: str = DEFAULT_TRANSCRIBE_MODEL
    transcribe_timeout_seconds: float = DEFAULT_TRANSCRIBE_TIMEOUT_SECONDS
    pitch_streaming: bool = True
    pitch_max_tokens: int = DEFAULT_MAX_TOKENS
    frontend_origins: tuple = ()


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip() or default


def parse_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _float_env(name: str, default: float) -> float:
    raw = _env(name, str(default))
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}.") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be greater than zero.")
    return value


def _int_env(name: str, default: int) -> int:
    raw = _env(name, str(default))
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be greater than zero.")
    return value


def _split_origins(raw: str) -> tuple:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


def missing_env_vars() -> List[str]:
    return [name for name in REQUIRED_ENV_VARS if not os.getenv(name, "").strip()]


def load_settings() -> Settings:
    """Read the service configuration from the environment.

    Raises RuntimeError naming every missing credential so a misconfigured
    deployment fails at startup instead of on the first request.
    """
    missing = missing_env_vars()
    if missing:
        raise RuntimeError(
            "Missing required environment variables: "
            + ", ".join(missing)
            + ". Set them before starting the server "
            '(example: export AZURE_OPENAI_KEY="YOUR_KEY_HERE").'
        )

    return Settings(
        azure_endpoint=_env("AZURE_OPENAI_ENDPOINT"),
        azure_api_key=_env("AZURE_OPENAI_KEY"),
        azure_deployment=_env("AZURE_OPENAI_DEPLOYMENT"),
        azure_api_version=_env("AZURE_OPENAI_API_VERSION", DEFAULT_AZURE_API_VERSION),
        transcribe_api_key=_env("OPENAI_API_KEY"),
        transcribe_url=_env("OPENAI_TRANSCRIBE_URL", DEFAULT_TRANSCRIBE_URL),
        transcribe_model=_env("OPENAI_TRANSCRIBE_MODEL", DEFAULT_TRANSCRIBE_MODEL),
        transcribe_timeout_seconds=_float_env(
            "TRANSCRIBE_TIMEOUT_SECONDS", DEFAULT_TRANSCRIBE_TIMEOUT_SECONDS
        ),
        pitch_streaming=parse_bool_env("PITCH_STREAMING", True),
        pitch_max_tokens=_int_env("PITCH_MAX_TOKENS", DEFAULT_MAX_TOKENS),
        frontend_origins=_split_origins(_env("FRONTEND_ORIGINS", DEFAULT_FRONTEND_ORIGINS)),
    )
