"""Settings schema, defaults, and structural patch merging."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
)
from pydantic.alias_generators import to_camel

DlpAction = Literal["mask", "warn", "block"]

DEFAULT_SETTINGS_VERSION = 1


class SettingsValidationError(Exception):
    """Raised when settings do not match the schema."""


class ReplaceRule(BaseModel):
    """A user-defined pattern/replacement pair applied after built-in masking."""

    model_config = ConfigDict(frozen=True)

    pattern: StrictStr
    replace: StrictStr
    flags: StrictStr | None = None


class Settings(BaseModel):
    """Versioned configuration for masking, DLP, formatting, and retention.

    Keys are camelCase on disk and over the wire; snake_case field names are
    accepted on input as well. Unknown keys are carried along untouched.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    settings_version: StrictInt = Field(ge=0)
    security_master_mode: StrictStr = "standard"
    enable_gemini: StrictBool = True
    no_save: StrictBool = True
    encrypt_temp_files: StrictBool = True
    auto_clear_clipboard: StrictBool = True
    clear_all_on_exit: StrictBool = True

    # PII masking
    mask_strength: StrictStr = "standard"
    mask_phone: StrictBool = True
    mask_email: StrictBool = True
    mask_address: StrictBool = True  # reserved: needs locale resources
    mask_numbers: StrictBool = True
    mask_names: StrictBool = False  # reserved: needs locale resources
    whitelist_words: list[StrictStr] = Field(default_factory=list)

    # API security
    send_text_only_to_gemini: StrictBool = True
    disable_data_training: StrictBool = True
    region_preference: StrictStr = "nearest"
    use_byo_key: StrictBool = True
    save_email_display_name: StrictBool = False
    short_lived_session: StrictBool = True
    clear_tokens_on_logout: StrictBool = True

    # Diagnostics
    enable_error_logs: StrictBool = False
    enable_usage_stats: StrictBool = False
    auto_delete_logs_after_days: StrictInt = Field(default=90, ge=0)

    # Runtime guards
    enable_dlp_scan: StrictBool = True
    dlp_action: DlpAction = "mask"
    offline_mode: StrictBool = False

    # Formatting instructions
    naturalize_expressions: StrictBool = True
    auto_punctuation: StrictBool = True
    unify_foreign_words: StrictBool = True
    preserve_original_proper_nouns: StrictBool = True
    no_summary_or_embellishment: StrictBool = True

    custom_replace_rules: list[ReplaceRule] = Field(default_factory=list)

    @classmethod
    def defaults(cls) -> Settings:
        """Return the documented default settings."""
        return cls(settings_version=DEFAULT_SETTINGS_VERSION)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


def validate_settings(data: Any) -> Settings:
    """Validate ``data`` against the settings schema.

    Raises:
        SettingsValidationError: If the data is malformed
    """
    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsValidationError(f"Invalid settings: {e}") from e


def deep_merge(current: Any, patch: Any) -> Any:
    """Structurally merge ``patch`` onto ``current`` without mutating either.

    Mappings merge key by key, so keys missing from the patch keep their
    current value. Everything else in the patch, lists included, replaces the
    current value outright.
    """
    if isinstance(current, Mapping) and isinstance(patch, Mapping):
        merged = dict(current)
        for key, value in patch.items():
            merged[key] = deep_merge(current.get(key), value)
        return merged
    return copy.deepcopy(patch)


def normalize_patch_keys(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Rewrite top-level snake_case field names to their camelCase keys."""
    aliases = {name: info.alias or to_camel(name) for name, info in Settings.model_fields.items()}
    return {aliases.get(key, key): value for key, value in patch.items()}


def merge_settings(current: Settings, patch: Mapping[str, Any]) -> Settings:
    """Apply a partial update to ``current`` and re-validate the result.

    Args:
        current: Settings to start from (left untouched)
        patch: Arbitrarily shaped partial update

    Returns:
        A new, validated Settings instance

    Raises:
        SettingsValidationError: If the patch is not a mapping or the merged
            result does not match the schema
    """
    if not isinstance(patch, Mapping):
        raise SettingsValidationError(
            f"Settings patch must be an object, got {type(patch).__name__}"
        )
    merged = deep_merge(current.to_wire(), normalize_patch_keys(patch))
    return validate_settings(merged)
