"""Audio transcription endpoint."""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, UploadFile

from agents.interviewer.agent import EvaluationClient
from api.dependencies import get_evaluation_client
from api.schemas.interviews import TranscriptionResponse
from core.config import settings
from core.exceptions import PayloadTooLargeError, ValidationError
from core.utils.validators import is_audio_content_type, sanitize_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["transcription"])


@router.post(
    "/transcribe",
    response_model=TranscriptionResponse,
    summary="Transcribe a spoken answer",
)
async def transcribe_audio(
    audio: Optional[UploadFile] = File(None),
    client: EvaluationClient = Depends(get_evaluation_client),
) -> TranscriptionResponse:
    """
    Convert an uploaded recording to text.

    - **audio**: multipart file, audio/* or application/octet-stream, at most 10 MB

    An empty ``text`` means no speech was detected or transcription failed.
    """
    if audio is None:
        raise ValidationError("No audio file provided")
    if not is_audio_content_type(audio.content_type):
        raise ValidationError("Only audio files are allowed", {"contentType": audio.content_type})

    limit = settings.max_audio_upload_bytes
    data = await audio.read(limit + 1)
    if len(data) > limit:
        raise PayloadTooLargeError("Audio file is too large", {"maxBytes": limit})
    if not data:
        raise ValidationError("Audio file is empty")

    filename = sanitize_filename(audio.filename)
    text = await client.transcribe(data, filename)
    logger.info(f"Transcribed {len(data)} bytes from {filename}: {len(text)} characters")
    return TranscriptionResponse(text=text)
