"""
Hadal Configuration System
==========================

This file contains ALL configuration for the Hadal assessment system.
- User settings at the top (things users might want to change)
- Internal constants at the bottom (technical defaults)
"""
import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# USER SETTINGS - Edit these to customize Hadal's behavior
# =============================================================================

# Optional: Google Cloud project used for live transcription
GOOGLE_CLOUD_PROJECT = None
GOOGLE_APPLICATION_CREDENTIALS = None  # Optional: path to credentials JSON

# Practice settings
DEFAULT_LEVEL = 1
WORKDIR = "./_hadal"

# Feedback language ("so" for Somali, "en" for English)
FEEDBACK_LOCALE = "so"
SUPPORTED_LOCALES = ("en", "so")

# Speech settings
LANGUAGE_CODE = "en-US"
SAVE_ANSWER_AUDIO = False  # Keep the last recorded answer as a WAV file in WORKDIR

# Enforcement policy
MIN_RELEVANCE_THRESHOLD = 30
SUBSCORE_FLOOR = 20
FALLBACK_PASS_THRESHOLD = 50
SCORING_TIMEOUT_SECONDS = 2.0

# Silence detection
SILENCE_THRESHOLD_SECONDS = 5
SILENCE_COUNTDOWN_SECONDS = 3

# Logging
LOG_FILE = "./_hadal/hadal.log"
LOG_LEVEL = "INFO"


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

# Audio capture
SAMPLE_RATE_CAPTURE = 48000
SAMPLE_RATE_TARGET = 16000
CHANNELS = 1
FRAME_MS = 100
CAPTURE_QUEUE_MAX_CHUNKS = 600

# Session loop
TICK_INTERVAL_SECONDS = 1.0
PUMP_INTERVAL_SECONDS = 0.2

# Streaming transcription
TRANSCRIPTION_MAX_RESTARTS = 3
TRANSCRIPTION_RESTART_BACKOFF_SECONDS = 1.0
TRANSCRIPTION_FINISH_TIMEOUT_SECONDS = 5.0

# Attempts
HELP_AFTER_FAILED_ATTEMPTS = 2
ATTEMPT_LOG_FILENAME = "attempts.jsonl"
ANSWER_AUDIO_FILENAME = "last_answer.wav"


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    google_cloud_project: Optional[str] = GOOGLE_CLOUD_PROJECT
    google_application_credentials: Optional[str] = GOOGLE_APPLICATION_CREDENTIALS
    default_level: int = DEFAULT_LEVEL
    workdir: str = WORKDIR
    feedback_locale: str = FEEDBACK_LOCALE
    language_code: str = LANGUAGE_CODE
    save_answer_audio: bool = SAVE_ANSWER_AUDIO
    min_relevance_threshold: int = MIN_RELEVANCE_THRESHOLD
    subscore_floor: int = SUBSCORE_FLOOR
    fallback_pass_threshold: int = FALLBACK_PASS_THRESHOLD
    scoring_timeout_seconds: float = SCORING_TIMEOUT_SECONDS
    silence_threshold_seconds: int = SILENCE_THRESHOLD_SECONDS
    silence_countdown_seconds: int = SILENCE_COUNTDOWN_SECONDS
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL

    @property
    def attempt_log_path(self) -> str:
        """Location of the JSON-lines attempt log."""
        return os.path.join(self.workdir, ATTEMPT_LOG_FILENAME)

    @property
    def answer_audio_path(self) -> Optional[str]:
        """Where live answers are saved, or None when saving is off."""
        if not self.save_answer_audio:
            return None
        return os.path.join(self.workdir, ANSWER_AUDIO_FILENAME)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_config() -> Config:
    """Load configuration, letting HADAL_* environment variables override defaults."""
    locale = os.getenv("HADAL_LOCALE") or FEEDBACK_LOCALE
    if locale not in SUPPORTED_LOCALES:
        raise ValueError(f"HADAL_LOCALE must be one of {SUPPORTED_LOCALES}, got {locale!r}")

    default_level = _env_int("HADAL_DEFAULT_LEVEL", DEFAULT_LEVEL)
    if not 1 <= default_level <= 4:
        raise ValueError(f"HADAL_DEFAULT_LEVEL must be between 1 and 4, got {default_level}")

    workdir = os.getenv("HADAL_WORKDIR") or WORKDIR

    return Config(
        google_cloud_project=os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT,
        google_application_credentials=os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or GOOGLE_APPLICATION_CREDENTIALS,
        default_level=default_level,
        workdir=workdir,
        feedback_locale=locale,
        language_code=os.getenv("HADAL_LANGUAGE_CODE") or LANGUAGE_CODE,
        save_answer_audio=_env_flag("HADAL_SAVE_AUDIO", SAVE_ANSWER_AUDIO),
        min_relevance_threshold=_env_int("HADAL_MIN_RELEVANCE", MIN_RELEVANCE_THRESHOLD),
        subscore_floor=_env_int("HADAL_SUBSCORE_FLOOR", SUBSCORE_FLOOR),
        fallback_pass_threshold=_env_int("HADAL_FALLBACK_PASS_THRESHOLD", FALLBACK_PASS_THRESHOLD),
        scoring_timeout_seconds=_env_float("HADAL_SCORING_TIMEOUT", SCORING_TIMEOUT_SECONDS),
        silence_threshold_seconds=_env_int("HADAL_SILENCE_THRESHOLD", SILENCE_THRESHOLD_SECONDS),
        silence_countdown_seconds=_env_int("HADAL_SILENCE_COUNTDOWN", SILENCE_COUNTDOWN_SECONDS),
        log_file=os.getenv("HADAL_LOG_FILE") or os.path.join(workdir, "hadal.log"),
        log_level=os.getenv("HADAL_LOG_LEVEL") or LOG_LEVEL,
    )
