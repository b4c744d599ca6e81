"""LLM reformatting of (already masked) transcripts."""

import logging
import time

from openai import OpenAI

from dictate_privacy import credentials
from dictate_privacy.config import (
    DEFAULT_FORMAT_ENDPOINT,
    DEFAULT_FORMAT_MODEL,
    DEFAULT_FORMAT_TEMP,
    DEFAULT_FORMAT_TIMEOUT,
)
from dictate_privacy.settings_model import Settings

logger = logging.getLogger(__name__)

INSTRUCTION_INTRO = "あなたは入力テキストを自然な文に整形します。"
INSTRUCTION_SAME_LANGUAGE = "出力は入力と同じ言語で返してください。"

# Settings flag -> instruction line
FLAG_INSTRUCTIONS: tuple[tuple[str, str], ...] = (
    ("naturalize_expressions", "不自然な口語のつなぎを自然に置換します。"),
    ("auto_punctuation", "句読点を適切に挿入します。"),
    ("unify_foreign_words", "外来語の表記を統一します（全角/半角の揺れも統一）。"),
    ("preserve_original_proper_nouns", "固有名詞は原文のまま保持します。"),
    ("no_summary_or_embellishment", "要約や脚色はしません。事実の追加・削除も行いません。"),
)


class FormattingError(Exception):
    """Raised when LLM formatting fails."""


def build_format_instructions(settings: Settings) -> str:
    """Build the system prompt from the formatting flags and custom rules."""
    lines = [INSTRUCTION_INTRO]
    lines.extend(line for flag, line in FLAG_INSTRUCTIONS if getattr(settings, flag))
    lines.append(INSTRUCTION_SAME_LANGUAGE)
    for rule in settings.custom_replace_rules:
        lines.append(f"次の置換規則を適用: /{rule.pattern}/ -> {rule.replace}")
    return "\n".join(line for line in lines if line)


def format_text(
    settings: Settings,
    text: str,
    api_key: str | None = None,
    endpoint: str = DEFAULT_FORMAT_ENDPOINT,
    model: str = DEFAULT_FORMAT_MODEL,
    temperature: float = DEFAULT_FORMAT_TEMP,
    debug_logging: bool = False,
    timeout: float = DEFAULT_FORMAT_TIMEOUT,
) -> str | None:
    """
    Send ``text`` to an OpenAI-compatible LLM for reformatting.

    Callers must mask ``text`` before calling this; it leaves the machine.

    Args:
        settings: Settings snapshot (``enable_gemini``, ``offline_mode`` and
            the formatting flags)
        text: Masked transcript
        api_key: API key (default: resolved from environment or keyring)
        endpoint: Base URL of the OpenAI-compatible API
        model: Model name
        temperature: Sampling temperature
        debug_logging: When True, log the prompt payload and the response
        timeout: Request timeout in seconds

    Returns:
        Formatted text; the input unchanged when formatting is disabled or no
        key is configured; None when the model returned nothing

    Raises:
        FormattingError: If the request fails
    """
    if not settings.enable_gemini or settings.offline_mode:
        return text

    if not text.strip():
        return ""

    key = api_key or credentials.resolve_api_key("gemini")
    if not key:
        logger.info("No formatting API key configured; returning text unchanged")
        return text

    messages = [
        {"role": "system", "content": build_format_instructions(settings)},
        {"role": "user", "content": text},
    ]

    if debug_logging:
        logger.info(
            "Formatting prompt payload: endpoint=%s model=%s temperature=%s messages=%s",
            endpoint,
            model,
            temperature,
            messages,
        )

    try:
        client = OpenAI(base_url=endpoint, api_key=key)

        start_time = time.perf_counter()
        first_token_time = None

        stream = client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            timeout=timeout,
            stream=True,
            stream_options={"include_usage": True},
        )

        collected_text = []
        usage_info = None

        for chunk in stream:
            if chunk.choices:
                content = chunk.choices[0].delta.content
                if content:
                    if first_token_time is None:
                        first_token_time = time.perf_counter()
                    collected_text.append(content)

            # Usage typically arrives in the last chunk
            if getattr(chunk, "usage", None) is not None:
                usage_info = chunk.usage

        total_time = time.perf_counter() - start_time
        time_to_first_token = (first_token_time - start_time) if first_token_time else 0.0

        result = "".join(collected_text).strip()

        if usage_info:
            input_tokens = getattr(usage_info, "prompt_tokens", 0)
            output_tokens = getattr(usage_info, "completion_tokens", 0)
            total_tokens = getattr(usage_info, "total_tokens", input_tokens + output_tokens)
            token_rate = output_tokens / total_time if total_time > 0 else 0

            logger.info(
                "Formatting statistics: time_to_first_token=%.3fs total_time=%.3fs "
                "input_tokens=%d output_tokens=%d total_tokens=%d token_rate=%.1f tok/s",
                time_to_first_token,
                total_time,
                input_tokens,
                output_tokens,
                total_tokens,
                token_rate,
            )
        else:
            logger.info(
                "Formatting statistics: time_to_first_token=%.3fs total_time=%.3fs "
                "(token usage not available)",
                time_to_first_token,
                total_time,
            )

        if debug_logging:
            logger.info("Formatting response: %s", result)

        return result or None
    except Exception as e:
        raise FormattingError(f"Formatting failed: {e}") from e
