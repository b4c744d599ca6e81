"""Command-line interface for dictate-privacy."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from dictate_privacy import clipboard, credentials
from dictate_privacy.dictation import DictationPipeline, DictationResult
from dictate_privacy.dlp import DLP_BLOCK_MESSAGE, DlpBlockedError
from dictate_privacy.logging_config import setup_logging
from dictate_privacy.masking import mask
from dictate_privacy.settings_model import SettingsValidationError, merge_settings
from dictate_privacy.settings_service import SettingsService
from dictate_privacy.settings_store import load_settings
from dictate_privacy.transcription import TranscriptionError

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BLOCKED = 2


def parse_override(raw: str) -> tuple[str, Any]:
    """Parse ``KEY=VALUE`` where VALUE is JSON, falling back to a plain string."""
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got {raw!r}")
    try:
        return key.strip(), json.loads(value)
    except json.JSONDecodeError:
        return key.strip(), value


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_mask(args: argparse.Namespace) -> int:
    text = args.text if args.text is not None else sys.stdin.read()
    settings = load_settings(args.settings)
    if args.overrides:
        try:
            settings = merge_settings(settings, dict(args.overrides))
        except SettingsValidationError as e:
            print(e, file=sys.stderr)
            return EXIT_ERROR

    try:
        result = mask(settings, text)
    except DlpBlockedError as e:
        print(e, file=sys.stderr)
        return EXIT_BLOCKED

    if result.warned:
        print(
            "(DLP) warning: sensitive content detected: " + ", ".join(sorted(result.flagged)),
            file=sys.stderr,
        )
    sys.stdout.write(result.text)
    if not result.text.endswith("\n"):
        sys.stdout.write("\n")
    return EXIT_OK


def cmd_settings(args: argparse.Namespace) -> int:
    service = SettingsService.load(args.settings)
    if args.settings_command == "show":
        _print_json(service.get().to_wire())
        return EXIT_OK

    try:
        patch = json.loads(args.patch)
    except json.JSONDecodeError as e:
        print(f"Patch is not valid JSON: {e}", file=sys.stderr)
        return EXIT_ERROR
    try:
        updated = service.update(patch)
    except SettingsValidationError as e:
        print(e, file=sys.stderr)
        return EXIT_ERROR
    _print_json(updated.to_wire())
    return EXIT_OK


def cmd_keys(args: argparse.Namespace) -> int:
    try:
        if args.keys_command == "status":
            presence = credentials.keys_status()
            print(f"groq:   {'stored' if presence.has_groq else 'missing'}")
            print(f"gemini: {'stored' if presence.has_gemini else 'missing'}")
        elif args.keys_command == "set":
            if not args.groq and not args.gemini:
                print("Nothing to store: pass --groq and/or --gemini", file=sys.stderr)
                return EXIT_ERROR
            credentials.set_keys(groq=args.groq, gemini=args.gemini)
            print("Saved keys")
        else:
            credentials.clear_keys(args.which)
            print("Cleared keys")
    except (credentials.CredentialStorageError, ValueError) as e:
        print(e, file=sys.stderr)
        return EXIT_ERROR
    return EXIT_OK


def _report(result: DictationResult) -> int:
    if result.blocked:
        print(DLP_BLOCK_MESSAGE, file=sys.stderr)
        return EXIT_BLOCKED
    if result.text is None:
        print("(silence or no text)")
        return EXIT_OK
    if result.warned:
        print("(DLP) warning: sensitive content detected", file=sys.stderr)
    print(result.text)
    if result.pasted:
        print("(pasted into active window)", file=sys.stderr)
    elif result.copied:
        print("(copied to clipboard)", file=sys.stderr)
    return EXIT_OK


def cmd_transcribe(args: argparse.Namespace) -> int:
    audio_path = Path(args.audio_file)
    try:
        audio = audio_path.read_bytes()
    except OSError as e:
        print(f"Could not read {audio_path}: {e}", file=sys.stderr)
        return EXIT_ERROR

    pipeline = DictationPipeline(SettingsService.load(args.settings), debug_logging=args.verbose)
    try:
        result = pipeline.process_audio(
            audio,
            filename=audio_path.name,
            copy=args.copy or args.paste,
            paste=args.paste,
        )
    except (TranscriptionError, clipboard.ClipboardError) as e:
        print(e, file=sys.stderr)
        return EXIT_ERROR
    return _report(result)


def cmd_record(args: argparse.Namespace) -> int:
    from dictate_privacy.audio import AudioRecorder, to_wav_bytes
    from dictate_privacy.push_to_talk import PushToTalk

    service = SettingsService.load(args.settings)
    pipeline = DictationPipeline(service, debug_logging=args.verbose)
    device = args.input_device
    if device is not None and device.isdigit():
        device = int(device)
    recorder = AudioRecorder(device=device)
    ptt = PushToTalk(recorder, events=service.events)

    try:
        while True:
            input("Press Enter to start recording (Ctrl+C to quit)... ")
            try:
                ptt.start()
            except Exception as e:
                print(f"Could not start input device: {e}", file=sys.stderr)
                return EXIT_ERROR
            input("[REC] Speak now. Press Enter to stop... ")
            samples = ptt.stop()
            try:
                if samples is None:
                    print("(no audio captured)")
                    continue
                result = pipeline.process_audio(
                    to_wav_bytes(samples, recorder.sample_rate), paste=args.paste
                )
                _report(result)
            except (TranscriptionError, clipboard.ClipboardError) as e:
                print(e, file=sys.stderr)
            finally:
                ptt.finish()
    except (KeyboardInterrupt, EOFError):
        print("\nQuitting.")
    finally:
        recorder.shutdown()
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dictate-privacy",
        description="Dictation backend that masks PII before text leaves the machine",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Settings file (default: ~/.dictate_privacy/settings.json)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_mask = sub.add_parser("mask", help="Mask PII in text (reads stdin when TEXT is omitted)")
    p_mask.add_argument("text", nargs="?", default=None)
    p_mask.add_argument(
        "--set",
        dest="overrides",
        action="append",
        type=parse_override,
        default=[],
        metavar="KEY=JSON",
        help="Override a setting for this run, e.g. --set dlpAction='\"block\"'",
    )
    p_mask.set_defaults(func=cmd_mask)

    p_settings = sub.add_parser("settings", help="Show or update saved settings")
    settings_sub = p_settings.add_subparsers(dest="settings_command", required=True)
    settings_sub.add_parser("show", help="Print the current settings as JSON")
    p_update = settings_sub.add_parser("update", help="Deep-merge a JSON patch into the settings")
    p_update.add_argument("patch", help='JSON object, e.g. \'{"maskPhone": false}\'')
    p_settings.set_defaults(func=cmd_settings)

    p_keys = sub.add_parser("keys", help="Manage provider API keys in the system keyring")
    keys_sub = p_keys.add_subparsers(dest="keys_command", required=True)
    keys_sub.add_parser("status", help="Show which keys are stored")
    p_set = keys_sub.add_parser("set", help="Store provider keys")
    p_set.add_argument("--groq", default=None, help="Groq API key (transcription)")
    p_set.add_argument("--gemini", default=None, help="Gemini API key (formatting)")
    p_clear = keys_sub.add_parser("clear", help="Delete stored keys")
    p_clear.add_argument("which", nargs="?", choices=["groq", "gemini"], default=None)
    p_keys.set_defaults(func=cmd_keys)

    p_transcribe = sub.add_parser("transcribe", help="Transcribe, mask, and format an audio file")
    p_transcribe.add_argument("audio_file")
    p_transcribe.add_argument("--copy", action="store_true", help="Copy the result to the clipboard")
    p_transcribe.add_argument(
        "--paste", action="store_true", help="Copy and paste into the active window"
    )
    p_transcribe.set_defaults(func=cmd_transcribe)

    p_record = sub.add_parser("record", help="Push-to-talk dictation from the terminal")
    p_record.add_argument("--input-device", default=None, help="Input device index or name")
    p_record.add_argument(
        "--no-paste",
        dest="paste",
        action="store_false",
        help="Only copy to the clipboard, do not paste",
    )
    p_record.set_defaults(func=cmd_record)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
