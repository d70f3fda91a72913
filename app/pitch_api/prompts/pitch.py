from ..models import INPUT_MODE_VOICE


SYSTEM_PROMPT = "You are an expert career writer."

DEFAULT_LENGTH_LABEL = "60-second"
DEFAULT_FOCUS_AREA = "unspecified"
DEFAULT_AUDIENCE = "general"
# Only reachable in voice mode, where title and purpose are optional.
DEFAULT_JOB_TITLE = "the role described in the context"
DEFAULT_PURPOSE = "unspecified"

ROLE_FRAMING = "You are a career-coaching assistant."
CONTEXT_HEADER = "Context (resume or notes):"
CLOSING_INSTRUCTION = "Return only the pitch text."


def select_context(
    input_mode: str,
    *,
    resume_text: str = "",
    additional_context: str = "",
    voice_transcription: str = "",
) -> str:
    """Pick exactly one context source. Sources are never merged."""
    if input_mode == INPUT_MODE_VOICE:
        return (voice_transcription or "").strip()
    resume = (resume_text or "").strip()
    if resume:
        return resume
    return (additional_context or "").strip()


def build_pitch_prompt(
    *,
    job_title: str,
    purpose: str,
    focus_area: str = "",
    audience: str = "",
    context: str = "",
    tone: str = "",
    length: str = "",
) -> str:
    lines = [
        ROLE_FRAMING,
        f"Generate a {length or DEFAULT_LENGTH_LABEL} elevator pitch "
        f"for someone targeting {job_title or DEFAULT_JOB_TITLE}.",
        f"Purpose: {purpose or DEFAULT_PURPOSE}.",
        f"Focus area: {focus_area or DEFAULT_FOCUS_AREA}.",
        f"Audience: {audience or DEFAULT_AUDIENCE}.",
    ]
    if context:
        lines.append(CONTEXT_HEADER)
        lines.append(context)
    if tone:
        lines.append(f"Tone: {tone}.")
    lines.append(CLOSING_INSTRUCTION)
    return "\n".join(lines)
