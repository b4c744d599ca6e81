"""End-to-end dictation: transcribe, mask, format, mask again, deliver."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from dictate_privacy import clipboard, masking
from dictate_privacy.dlp import DlpBlockedError
from dictate_privacy.events import DLP_BLOCKED, DLP_WARNING, EventBus
from dictate_privacy.formatting import FormattingError, format_text
from dictate_privacy.settings_service import SettingsService
from dictate_privacy.transcription import transcribe_once

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DictationResult:
    """Outcome of one dictation run.

    ``text`` is None when nothing may be shown: a blocked run or an empty
    transcript.
    """

    text: str | None
    blocked: bool = False
    warned: bool = False
    copied: bool = False
    pasted: bool = False


class DictationPipeline:
    """Runs recorded audio through transcription, masking, and formatting."""

    def __init__(
        self,
        settings_service: SettingsService,
        events: EventBus | None = None,
        debug_logging: bool = False,
    ):
        self.settings_service = settings_service
        self.events = events or settings_service.events
        self.debug_logging = debug_logging

    def process_audio(
        self,
        audio: bytes,
        filename: str = "audio.wav",
        copy: bool = True,
        paste: bool = True,
    ) -> DictationResult:
        """
        Turn an audio clip into masked text and deliver it.

        The transcript is masked before it is sent to the formatter and the
        formatter's output goes through the DLP gate and built-in detectors
        again before it reaches the clipboard. Custom rules run once, on the
        transcript.

        Args:
            audio: Encoded audio file contents
            filename: Upload file name (its extension sets the MIME type)
            copy: Copy the final text to the clipboard
            paste: Paste into the active window after copying

        Returns:
            DictationResult describing what happened

        Raises:
            TranscriptionError: If the transcription request fails
            ClipboardError: If copying or pasting fails (a failed clear after
                pasting is only logged)
        """
        settings = self.settings_service.get()

        raw = transcribe_once(settings, audio, filename=filename)
        if not raw.strip():
            logger.info("Empty transcript; nothing to deliver")
            return DictationResult(text=None)

        try:
            first = masking.mask(settings, raw)
            formatted = self._format(settings, first.text)
            final = masking.mask(settings, formatted, custom_rules=False)
        except DlpBlockedError as e:
            self.events.emit(DLP_BLOCKED, sorted(e.flagged))
            return DictationResult(text=None, blocked=True)

        warned = first.warned or final.warned
        if warned:
            self.events.emit(DLP_WARNING, sorted(first.flagged | final.flagged))

        copied = pasted = False
        if copy:
            clipboard.copy_text(final.text)
            copied = True
            if paste:
                clipboard.paste_into_active_window()
                pasted = True
                if settings.auto_clear_clipboard:
                    try:
                        clipboard.clear_clipboard()
                    except clipboard.ClipboardError as e:
                        logger.warning("Could not clear clipboard after paste: %s", e)

        return DictationResult(text=final.text, warned=warned, copied=copied, pasted=pasted)

    def _format(self, settings, text: str) -> str:
        try:
            formatted = format_text(settings, text, debug_logging=self.debug_logging)
        except FormattingError as e:
            logger.warning("Formatting failed, using masked transcript: %s", e)
            return text
        if not formatted:
            logger.info("Formatter returned nothing, using masked transcript")
            return text
        return formatted
