"""API key storage in the system keyring.

Keys for the transcription (Groq) and formatting (Gemini) providers are kept
in the operating system's credential store rather than in the settings file.
Environment variables take precedence over stored keys.
"""

import logging
import os
from dataclasses import dataclass
from typing import Literal

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from dictate_privacy.config import GEMINI_API_KEY_ENV, GROQ_API_KEY_ENV

logger = logging.getLogger(__name__)

# Service name for keyring storage
SERVICE_NAME = "DictatePrivacy"

# Credential keys
GROQ_API_KEY = "groq_api_key"
GEMINI_API_KEY = "gemini_api_key"

Provider = Literal["groq", "gemini"]

_PROVIDER_KEYS: dict[str, tuple[str, str]] = {
    "groq": (GROQ_API_KEY, GROQ_API_KEY_ENV),
    "gemini": (GEMINI_API_KEY, GEMINI_API_KEY_ENV),
}


class CredentialStorageError(Exception):
    """Raised when credential storage operations fail."""


@dataclass(frozen=True)
class KeysPresence:
    """Which provider keys are stored, without revealing them."""

    has_groq: bool
    has_gemini: bool


def store_credential(key: str, value: str) -> None:
    """Store a credential in the system keyring.

    Raises:
        CredentialStorageError: If storage fails
        ValueError: If key or value is empty
    """
    if not key or not key.strip():
        raise ValueError("Credential key cannot be empty")

    if not value or not value.strip():
        raise ValueError("Credential value cannot be empty")

    try:
        keyring.set_password(SERVICE_NAME, key, value)
        logger.info(f"Stored credential: {key}")
    except KeyringError as e:
        logger.error(f"Failed to store credential {key}: {e}")
        raise CredentialStorageError(f"Failed to store credential: {e}") from e
    except Exception as e:
        # Backend initialization issues surface as arbitrary exceptions
        logger.error(f"Unexpected error storing credential {key}: {e}")
        raise CredentialStorageError(f"Unexpected error storing credential: {e}") from e


def retrieve_credential(key: str) -> str | None:
    """Retrieve a credential from the system keyring.

    Returns:
        The credential value if found, None otherwise

    Raises:
        CredentialStorageError: If retrieval fails
        ValueError: If key is empty
    """
    if not key or not key.strip():
        raise ValueError("Credential key cannot be empty")

    try:
        value = keyring.get_password(SERVICE_NAME, key)
        if value:
            logger.debug(f"Retrieved credential: {key}")
        else:
            logger.debug(f"No credential found for: {key}")
        return value
    except KeyringError as e:
        logger.error(f"Failed to retrieve credential {key}: {e}")
        raise CredentialStorageError(f"Failed to retrieve credential: {e}") from e
    except Exception as e:
        logger.error(f"Unexpected error retrieving credential {key}: {e}")
        raise CredentialStorageError(f"Unexpected error retrieving credential: {e}") from e


def delete_credential(key: str) -> None:
    """Delete a credential from the system keyring.

    A credential that does not exist is not an error.

    Raises:
        CredentialStorageError: If deletion fails
        ValueError: If key is empty
    """
    if not key or not key.strip():
        raise ValueError("Credential key cannot be empty")

    try:
        keyring.delete_password(SERVICE_NAME, key)
        logger.info(f"Deleted credential: {key}")
    except PasswordDeleteError:
        logger.debug(f"No credential to delete: {key}")
    except KeyringError as e:
        logger.error(f"Failed to delete credential {key}: {e}")
        raise CredentialStorageError(f"Failed to delete credential: {e}") from e
    except Exception as e:
        logger.error(f"Unexpected error deleting credential {key}: {e}")
        raise CredentialStorageError(f"Unexpected error deleting credential: {e}") from e


def keys_status() -> KeysPresence:
    """Report which provider keys are stored in the keyring."""
    return KeysPresence(
        has_groq=_is_stored(GROQ_API_KEY),
        has_gemini=_is_stored(GEMINI_API_KEY),
    )


def set_keys(groq: str | None = None, gemini: str | None = None) -> None:
    """Store the given provider keys. Empty or missing values are left as they are."""
    if groq:
        store_credential(GROQ_API_KEY, groq)
    if gemini:
        store_credential(GEMINI_API_KEY, gemini)


def clear_keys(which: Provider | None = None) -> None:
    """Delete one provider's key, or both when ``which`` is None."""
    if which is None:
        delete_credential(GROQ_API_KEY)
        delete_credential(GEMINI_API_KEY)
        return
    if which not in _PROVIDER_KEYS:
        raise ValueError(f"Unknown provider: {which!r}")
    delete_credential(_PROVIDER_KEYS[which][0])


def resolve_api_key(provider: Provider) -> str | None:
    """Return the API key for ``provider`` from the environment or the keyring.

    Keyring failures are logged and treated as a missing key.
    """
    if provider not in _PROVIDER_KEYS:
        raise ValueError(f"Unknown provider: {provider!r}")
    credential_key, env_var = _PROVIDER_KEYS[provider]

    env_value = os.environ.get(env_var, "").strip()
    if env_value:
        return env_value

    try:
        return retrieve_credential(credential_key) or None
    except CredentialStorageError as e:
        logger.warning(f"Could not read {provider} API key: {e}")
        return None


def _is_stored(key: str) -> bool:
    try:
        return retrieve_credential(key) is not None
    except CredentialStorageError:
        return False
