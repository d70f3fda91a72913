import io
import logging
from typing import List, Optional

from docx import Document
from pypdf import PdfReader

from .constants import DOCX_MEDIA_TYPE, PDF_MEDIA_TYPES
from .models import (
    EXTRACTION_FAILED,
    EXTRACTION_TEXT,
    EXTRACTION_UNSUPPORTED,
    ExtractionResult,
)


logger = logging.getLogger("uvicorn.error")


def normalize_media_type(media_type: Optional[str]) -> str:
    # "application/pdf; charset=binary" -> "application/pdf"
    return (media_type or "").split(";", 1)[0].strip().lower()


def extract_document_text(data: bytes, media_type: Optional[str]) -> ExtractionResult:
    """Extract plain text from a resume upload.

    Only the declared media type is consulted. Unsupported types and broken
    files come back as empty text with a status saying why; nothing raises.
    """
    normalized = normalize_media_type(media_type)
    if normalized in PDF_MEDIA_TYPES:
        extractor = _extract_pdf
    elif normalized == DOCX_MEDIA_TYPE:
        extractor = _extract_docx
    else:
        return ExtractionResult(status=EXTRACTION_UNSUPPORTED)

    try:
        text = extractor(data)
    except Exception as exc:
        logger.warning(
            "document_extraction_failed media_type=%s size_bytes=%s error=%s",
            normalized,
            len(data or b""),
            exc,
        )
        return ExtractionResult(status=EXTRACTION_FAILED, error=str(exc))

    return ExtractionResult(status=EXTRACTION_TEXT, text=text)


def _extract_pdf(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    pages: List[str] = []
    for page in reader.pages:
        pages.append((page.extract_text() or "").strip())
    return "\n".join(page for page in pages if page).strip()


def _extract_docx(data: bytes) -> str:
    document = Document(io.BytesIO(data))
    paragraphs = [paragraph.text.strip() for paragraph in document.paragraphs]
    return "\n\n".join(paragraph for paragraph in paragraphs if paragraph).strip()
