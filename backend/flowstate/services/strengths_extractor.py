"""Vision-model extraction of a ranked strengths list from an uploaded report."""
from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Dict, Optional

import openai

from flowstate.core.config import settings
from flowstate.observability.metrics import log_metric
from flowstate.observability.tracing import trace
from flowstate.services.errors import ExtractionError, ModelUnavailableError, ValidationError

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = ("image/jpeg", "image/png", "application/pdf")
UNSUPPORTED_TYPE_MESSAGE = "Please upload a JPG, PNG image or PDF file."
EXTRACTION_FAILED_MESSAGE = "Failed to read the file. Please try a clearer image or paste text manually."

EXTRACTION_PROMPT = (
    "Analyze this image or document. It is a Gallup CliftonStrengths (StrengthsFinder) result report.\n\n"
    "Your task is to EXTRACT the list of strengths in their specific ranked order (1, 2, 3... up to 34).\n\n"
    "Return ONLY the list as plain text, one strength per line, with their number.\n"
    "Do not add any conversational text.\n\n"
    "Example Output format:\n"
    "1. Strategic\n"
    "2. Learner\n"
    "3. Achiever\n"
    "...\n"
    "34. Consistency"
)


def extract_strengths_text(
    client: Optional[openai.OpenAI],
    data: str,
    mime_type: str,
    *,
    request_id: str | None = None,
) -> str:
    """Send an uploaded report to the vision model and return its numbered list verbatim."""
    mime = (mime_type or "").strip().lower()
    if mime not in SUPPORTED_MIME_TYPES:
        raise ValidationError(UNSUPPORTED_TYPE_MESSAGE)

    payload = _strip_data_url(data)
    try:
        size_bytes = len(base64.b64decode(payload, validate=True))
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("The uploaded file is not valid base64 data.") from exc
    if size_bytes == 0:
        raise ValidationError("The uploaded file is empty.")

    if client is None:
        raise ModelUnavailableError("The AI model is not configured.")

    metadata = {"mime_type": mime, "size_bytes": size_bytes, "model": settings.openai_vision_model}
    with trace("strengths.extract", metadata=metadata, request_id=request_id):
        try:
            completion = client.chat.completions.create(
                model=settings.openai_vision_model,
                messages=[
                    {
                        "role": "user",
                        "content": [_media_part(payload, mime), {"type": "text", "text": EXTRACTION_PROMPT}],
                    }
                ],
            )
        except openai.OpenAIError as exc:
            logger.error("Vision extraction failed: %s", exc)
            log_metric("strengths.extract.success", 0, metadata={"mime_type": mime})
            raise ExtractionError(EXTRACTION_FAILED_MESSAGE) from exc

    text = (completion.choices[0].message.content or "").strip()
    log_metric("strengths.extract.success", 1 if text else 0, metadata={"mime_type": mime})
    return text


def _strip_data_url(data: str) -> str:
    # Browsers hand over "data:image/png;base64,...." from FileReader.
    value = (data or "").strip()
    if value.startswith("data:") and "," in value:
        return value.split(",", 1)[1]
    return value


def _media_part(payload: str, mime: str) -> Dict[str, Any]:
    data_url = f"data:{mime};base64,{payload}"
    if mime == "application/pdf":
        return {"type": "file", "file": {"filename": "strengths-report.pdf", "file_data": data_url}}
    return {"type": "image_url", "image_url": {"url": data_url}}
