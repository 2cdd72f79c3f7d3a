"""Configuration constants and helpers for VoxAurora."""

import os
from pathlib import Path

VOX_DIR: Path = Path.home() / ".voxaurora"


def _env_float(name: str, default: float) -> float:
    """Return a float from the environment, or *default* if unset/invalid."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    """Return an int from the environment, or *default* if unset/invalid."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Return a comma-separated list from the environment."""
    raw = os.environ.get(name)
    if not raw:
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


def frames_for(seconds: float, frame_duration: float) -> int:
    """Convert a duration to a whole number of frames (at least 1)."""
    return max(1, round(seconds / frame_duration))


# --- Audio capture configuration ---

AUDIO_FRAME_DURATION: float = _env_float("VOXAURORA_FRAME_DURATION", 0.03)
FRAME_QUEUE_SECONDS: float = _env_float("VOXAURORA_FRAME_QUEUE_SECONDS", 2.0)
UTTERANCE_QUEUE_SIZE: int = _env_int("VOXAURORA_UTTERANCE_QUEUE_SIZE", 8)
STT_SAMPLE_RATE: int = 16000


# --- Voice activity detection ---

VAD_ENERGY_THRESHOLD: float = _env_float("VOXAURORA_VAD_THRESHOLD", 0.01)
VAD_START_DURATION: float = _env_float("VOXAURORA_VAD_START_DURATION", 0.09)
VAD_HANGOVER_DURATION: float = _env_float("VOXAURORA_VAD_HANGOVER_DURATION", 0.6)
VAD_MIN_UTTERANCE_DURATION: float = _env_float(
    "VOXAURORA_VAD_MIN_UTTERANCE_DURATION", 0.25
)
VAD_MAX_UTTERANCE_DURATION: float = _env_float(
    "VOXAURORA_VAD_MAX_UTTERANCE_DURATION", 15.0
)


# --- Wake phrase ---

WAKE_PHRASES: tuple[str, ...] = _env_list(
    "VOXAURORA_WAKE_PHRASES",
    (
        "aurora",
        "auroha",
        "arora",
        "auroura",
        "uroha",
        "laura",
        "vox aurora",
        "vox oroha",
        "vox-oroha",
        "vox au rohe",
        "vox-orore",
        "vox ouroho",
    ),
)
WAKE_MATCH_THRESHOLD: float = _env_float("VOXAURORA_WAKE_THRESHOLD", 80.0)
WAKE_DEBOUNCE_SECONDS: float = _env_float("VOXAURORA_WAKE_DEBOUNCE", 1.5)
WAKE_START_ACTIVE: bool = _env_bool("VOXAURORA_WAKE_START_ACTIVE", False)


# --- Speech-to-text (whisper.cpp) ---

DEFAULT_MODEL_PATH: str = "./models/ggml-small.bin"
STT_LANGUAGE: str = os.environ.get("VOXAURORA_LANGUAGE", "en")
STT_THREADS: int = _env_int("VOXAURORA_STT_THREADS", 4)
STT_TIMEOUT: float = _env_float("VOXAURORA_STT_TIMEOUT", 30.0)


# --- LanguageTool correction ---

LANGUAGETOOL_URL: str = os.environ.get(
    "VOXAURORA_LANGUAGETOOL_URL", "http://localhost:8081"
)
LANGUAGETOOL_LANGUAGE: str = os.environ.get("VOXAURORA_LANGUAGETOOL_LANGUAGE", "en-US")
CORRECTION_TIMEOUT: float = _env_float("VOXAURORA_CORRECTION_TIMEOUT", 3.0)
CORRECTION_HEALTH_CHECK_INTERVAL: float = 60.0  # Re-check LanguageTool every 60s


# --- Dictionaries for the word-merge pass ---

DICTIONARY_URLS: dict[str, str] = {
    "fr": "https://raw.githubusercontent.com/LibreOffice/dictionaries/master/fr_FR/fr.dic",
    "en": "https://raw.githubusercontent.com/LibreOffice/dictionaries/master/en/en_US.dic",
}
DICTIONARY_LANGUAGES: tuple[str, ...] = _env_list(
    "VOXAURORA_DICTIONARY_LANGUAGES", ("en", "fr")
)
DICTIONARY_CACHE_DIR: Path = Path(
    os.environ.get("VOXAURORA_DICTIONARY_CACHE_DIR", str(VOX_DIR / "dics"))
)
DICTIONARY_DOWNLOAD_TIMEOUT: float = _env_float("VOXAURORA_DICTIONARY_TIMEOUT", 30.0)
COMMON_WORDS_FILE: str = os.environ.get("VOXAURORA_COMMON_WORDS_FILE", "")


# --- Semantic command matching ---

EMBEDDING_MODEL: str = os.environ.get(
    "VOXAURORA_EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2"
)
MATCH_THRESHOLD: float = _env_float("VOXAURORA_MATCH_THRESHOLD", 0.75)
MATCH_TIE_TOLERANCE: float = 1e-6
EMBEDDING_TIMEOUT: float = _env_float("VOXAURORA_EMBEDDING_TIMEOUT", 10.0)


# --- Action dispatch ---

TYPE_METHOD: str = os.environ.get("VOXAURORA_TYPE_METHOD", "")
DISPATCH_TIMEOUT: float = _env_float("VOXAURORA_DISPATCH_TIMEOUT", 10.0)
TYPE_TRAILING_SPACE: bool = _env_bool("VOXAURORA_TYPE_TRAILING_SPACE", True)
