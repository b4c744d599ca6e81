"""Configuration constants for dictate-privacy."""

from pathlib import Path

# Application data lives under the user's home directory
APP_DIR = Path.home() / ".dictate_privacy"

# Audio defaults
SAMPLE_RATE = 16000
INPUT_CHANNELS = 1
CHUNK_MS = 50

# Speech-to-text defaults (Groq, OpenAI-compatible)
DEFAULT_STT_ENDPOINT = "https://api.groq.com/openai/v1"
DEFAULT_STT_MODEL = "whisper-large-v3"
DEFAULT_STT_TIMEOUT = 60.0
STT_DEMO_MESSAGE = "(demo: STT disabled; set GROQ_API_KEY)"

# Formatting defaults (Gemini, OpenAI-compatible)
DEFAULT_FORMAT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_FORMAT_MODEL = "gemini-1.5-flash"
DEFAULT_FORMAT_TEMP = 0.1
DEFAULT_FORMAT_TIMEOUT = 30.0

# Clipboard defaults
DEFAULT_PASTE_DELAY = 0.15

# Environment variables that take precedence over stored API keys
GROQ_API_KEY_ENV = "GROQ_API_KEY"
GEMINI_API_KEY_ENV = "GEMINI_API_KEY"
