"""Tests for the end-to-end dictation pipeline."""

from unittest.mock import MagicMock, patch

import pytest

from dictate_privacy.clipboard import ClipboardError
from dictate_privacy.dictation import DictationPipeline, DictationResult
from dictate_privacy.events import DLP_BLOCKED, DLP_WARNING
from dictate_privacy.formatting import FormattingError
from dictate_privacy.settings_model import ReplaceRule, Settings
from dictate_privacy.settings_service import SettingsService
from dictate_privacy.transcription import TranscriptionError


def make_pipeline(**overrides):
    service = SettingsService(Settings.defaults().model_copy(update=overrides))
    return DictationPipeline(service)


@pytest.fixture
def mock_clipboard():
    with patch("dictate_privacy.dictation.clipboard.copy_text") as copy_text, patch(
        "dictate_privacy.dictation.clipboard.paste_into_active_window"
    ) as paste, patch("dictate_privacy.dictation.clipboard.clear_clipboard") as clear:
        yield MagicMock(copy_text=copy_text, paste=paste, clear=clear)


class TestProcessAudio:
    """Tests for DictationPipeline.process_audio."""

    @patch("dictate_privacy.dictation.format_text")
    @patch("dictate_privacy.dictation.transcribe_once", return_value="   ")
    def test_empty_transcript(self, mock_transcribe, mock_format, mock_clipboard):
        """Test that silence produces no text and no delivery."""
        result = make_pipeline().process_audio(b"audio")

        assert result == DictationResult(text=None)
        mock_format.assert_not_called()
        mock_clipboard.copy_text.assert_not_called()

    @patch("dictate_privacy.dictation.format_text", side_effect=lambda s, text, **kw: text)
    @patch("dictate_privacy.dictation.transcribe_once", return_value="mail a@b.com please")
    def test_transcript_masked_before_formatting(
        self, mock_transcribe, mock_format, mock_clipboard
    ):
        """Test that the formatter only ever sees masked text."""
        result = make_pipeline().process_audio(b"audio", filename="take.webm")

        assert mock_format.call_args.args[1] == "mail ＜メール＞ please"
        assert mock_transcribe.call_args.kwargs["filename"] == "take.webm"
        assert result.text == "mail ＜メール＞ please"

    @patch("dictate_privacy.dictation.format_text", return_value="折り返しは090-1234-5678まで")
    @patch("dictate_privacy.dictation.transcribe_once", return_value="折り返してください")
    def test_formatter_output_masked_again(self, mock_transcribe, mock_format, mock_clipboard):
        """Test that PII introduced by the formatter is masked before delivery."""
        result = make_pipeline().process_audio(b"audio")

        assert result.text == "折り返しは＜電話番号＞まで"
        mock_clipboard.copy_text.assert_called_once_with("折り返しは＜電話番号＞まで")

    @patch("dictate_privacy.dictation.transcribe_once", return_value="ありがとう")
    def test_custom_rules_applied_once(self, mock_transcribe, mock_clipboard):
        """Test that a rule that is not idempotent is not applied a second time."""
        pipeline = make_pipeline(
            enable_gemini=False,
            custom_replace_rules=[ReplaceRule(pattern="ありがとう", replace="ありがとうございます")],
        )

        result = pipeline.process_audio(b"audio", copy=False)

        assert result.text == "ありがとうございます"

    @patch("dictate_privacy.dictation.format_text", side_effect=lambda s, text, **kw: text + "。")
    @patch("dictate_privacy.dictation.transcribe_once", return_value="ありがとう")
    def test_custom_rules_not_rerun_on_formatter_output(
        self, mock_transcribe, mock_format, mock_clipboard
    ):
        """Test that formatter output gets built-in masking only."""
        pipeline = make_pipeline(
            custom_replace_rules=[ReplaceRule(pattern="ありがとう", replace="ありがとうございます")],
        )

        result = pipeline.process_audio(b"audio", copy=False)

        assert mock_format.call_args.args[1] == "ありがとうございます"
        assert result.text == "ありがとうございます。"

    @patch("dictate_privacy.dictation.format_text", side_effect=FormattingError("down"))
    @patch("dictate_privacy.dictation.transcribe_once", return_value="hello a@b.com")
    def test_formatting_error_falls_back(self, mock_transcribe, mock_format, mock_clipboard):
        """Test that a formatter failure delivers the masked transcript."""
        result = make_pipeline().process_audio(b"audio")

        assert result.text == "hello ＜メール＞"

    @patch("dictate_privacy.dictation.format_text", return_value=None)
    @patch("dictate_privacy.dictation.transcribe_once", return_value="hello")
    def test_empty_formatter_output_falls_back(
        self, mock_transcribe, mock_format, mock_clipboard
    ):
        """Test that an empty model response delivers the masked transcript."""
        assert make_pipeline().process_audio(b"audio").text == "hello"

    @patch("dictate_privacy.dictation.format_text")
    @patch("dictate_privacy.dictation.transcribe_once", return_value="mail a@b.com")
    def test_block_stops_everything(self, mock_transcribe, mock_format, mock_clipboard):
        """Test that a block emits an event and nothing leaves the machine."""
        pipeline = make_pipeline(dlp_action="block")
        blocked = []
        pipeline.events.subscribe(DLP_BLOCKED, blocked.append)

        result = pipeline.process_audio(b"audio")

        assert result == DictationResult(text=None, blocked=True)
        assert blocked == [["email"]]
        mock_format.assert_not_called()
        mock_clipboard.copy_text.assert_not_called()

    @patch("dictate_privacy.dictation.format_text", return_value="ID 1234567")
    @patch("dictate_privacy.dictation.transcribe_once", return_value="ID please")
    def test_block_on_formatter_output(self, mock_transcribe, mock_format, mock_clipboard):
        """Test that the second pass also enforces the block policy."""
        result = make_pipeline(dlp_action="block").process_audio(b"audio")

        assert result.blocked is True
        mock_clipboard.copy_text.assert_not_called()

    @patch("dictate_privacy.dictation.format_text", side_effect=lambda s, text, **kw: text)
    @patch("dictate_privacy.dictation.transcribe_once", return_value="mail a@b.com")
    def test_warn_emits_event(self, mock_transcribe, mock_format, mock_clipboard):
        """Test that warn delivers masked text and announces the warning."""
        pipeline = make_pipeline(dlp_action="warn")
        warnings = []
        pipeline.events.subscribe(DLP_WARNING, warnings.append)

        result = pipeline.process_audio(b"audio")

        assert result.warned is True
        assert result.text == "mail ＜メール＞"
        assert warnings == [["email"]]

    @patch("dictate_privacy.dictation.format_text", return_value="done")
    @patch("dictate_privacy.dictation.transcribe_once", return_value="done")
    def test_copy_paste_and_clear(self, mock_transcribe, mock_format, mock_clipboard):
        """Test delivery with auto clear enabled."""
        result = make_pipeline(auto_clear_clipboard=True).process_audio(b"audio")

        assert result.copied is True
        assert result.pasted is True
        mock_clipboard.copy_text.assert_called_once_with("done")
        mock_clipboard.paste.assert_called_once()
        mock_clipboard.clear.assert_called_once()

    @patch("dictate_privacy.dictation.format_text", return_value="done")
    @patch("dictate_privacy.dictation.transcribe_once", return_value="done")
    def test_no_clear_when_disabled(self, mock_transcribe, mock_format, mock_clipboard):
        """Test that the clipboard is kept when auto clear is off."""
        make_pipeline(auto_clear_clipboard=False).process_audio(b"audio")

        mock_clipboard.clear.assert_not_called()

    @patch("dictate_privacy.dictation.format_text", return_value="done")
    @patch("dictate_privacy.dictation.transcribe_once", return_value="done")
    def test_copy_only(self, mock_transcribe, mock_format, mock_clipboard):
        """Test that paste=False copies without pasting or clearing."""
        result = make_pipeline().process_audio(b"audio", paste=False)

        assert result.copied is True
        assert result.pasted is False
        mock_clipboard.paste.assert_not_called()
        mock_clipboard.clear.assert_not_called()

    @patch("dictate_privacy.dictation.format_text", return_value="done")
    @patch("dictate_privacy.dictation.transcribe_once", return_value="done")
    def test_no_delivery(self, mock_transcribe, mock_format, mock_clipboard):
        """Test that copy=False leaves the clipboard alone."""
        result = make_pipeline().process_audio(b"audio", copy=False)

        assert result == DictationResult(text="done")
        mock_clipboard.copy_text.assert_not_called()

    @patch("dictate_privacy.dictation.format_text", return_value="done")
    @patch("dictate_privacy.dictation.transcribe_once", return_value="done")
    def test_clear_failure_only_logged(self, mock_transcribe, mock_format, mock_clipboard, caplog):
        """Test that a failed clear after pasting does not fail the run."""
        mock_clipboard.clear.side_effect = ClipboardError("locked")

        result = make_pipeline().process_audio(b"audio")

        assert result.pasted is True
        assert "Could not clear clipboard" in caplog.text

    @patch("dictate_privacy.dictation.transcribe_once", side_effect=TranscriptionError("boom"))
    def test_transcription_error_propagates(self, mock_transcribe, mock_clipboard):
        """Test that STT failures reach the caller."""
        with pytest.raises(TranscriptionError):
            make_pipeline().process_audio(b"audio")

    @patch("dictate_privacy.dictation.format_text", side_effect=lambda s, text, **kw: text)
    @patch("dictate_privacy.dictation.transcribe_once", return_value="a@b.com")
    def test_uses_latest_settings(self, mock_transcribe, mock_format, mock_clipboard):
        """Test that each run reads a fresh settings snapshot."""
        pipeline = make_pipeline()
        pipeline.settings_service.update({"maskEmail": False, "enableDlpScan": False})

        assert pipeline.process_audio(b"audio", copy=False).text == "a@b.com"
