"""One-shot speech-to-text through an OpenAI-compatible endpoint."""

import logging

from openai import OpenAI

from dictate_privacy import credentials
from dictate_privacy.config import (
    DEFAULT_STT_ENDPOINT,
    DEFAULT_STT_MODEL,
    DEFAULT_STT_TIMEOUT,
    STT_DEMO_MESSAGE,
)
from dictate_privacy.settings_model import Settings

logger = logging.getLogger(__name__)

_MIME_TYPES = {
    "wav": "audio/wav",
    "webm": "audio/webm",
    "mp3": "audio/mpeg",
    "m4a": "audio/mp4",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
}


class TranscriptionError(Exception):
    """Raised when transcription fails."""


def guess_mime_type(filename: str) -> str:
    """Return the audio MIME type for ``filename`` based on its extension."""
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return _MIME_TYPES.get(extension, "application/octet-stream")


def transcribe_once(
    settings: Settings,
    audio: bytes,
    api_key: str | None = None,
    filename: str = "audio.wav",
    endpoint: str = DEFAULT_STT_ENDPOINT,
    model: str = DEFAULT_STT_MODEL,
    timeout: float = DEFAULT_STT_TIMEOUT,
) -> str:
    """
    Transcribe a complete audio clip.

    Args:
        settings: Settings snapshot (``offline_mode`` disables the request)
        audio: Encoded audio file contents
        api_key: API key (default: resolved from environment or keyring)
        filename: File name sent with the upload; its extension sets the MIME type
        endpoint: Base URL of the OpenAI-compatible API
        model: Transcription model name
        timeout: Request timeout in seconds

    Returns:
        Transcribed text; empty in offline mode, or a demo notice when no key
        is configured

    Raises:
        TranscriptionError: If the request fails
    """
    if settings.offline_mode:
        logger.info("Offline mode: skipping transcription")
        return ""

    key = api_key or credentials.resolve_api_key("groq")
    if not key:
        logger.info("No transcription API key configured")
        return STT_DEMO_MESSAGE

    try:
        client = OpenAI(base_url=endpoint, api_key=key)
        response = client.audio.transcriptions.create(
            model=model,
            file=(filename, audio, guess_mime_type(filename)),
            timeout=timeout,
        )
        text = (getattr(response, "text", None) or "").strip()
        logger.info("Transcription finished: %d characters", len(text))
        return text
    except Exception as e:
        raise TranscriptionError(f"Transcription failed: {e}") from e
