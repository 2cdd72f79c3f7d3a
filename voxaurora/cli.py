"""Command-line interface for VoxAurora.

``vox-aurora [MODEL_PATH] [CONFIG_PATHS...]`` loads the whisper model and the
command files, then listens until SIGINT/SIGTERM.  When MODEL_PATH is
omitted the model path, command files and input device are asked for
interactively.  The entry point is registered via ``pyproject.toml`` as
``vox-aurora = "voxaurora.cli:main"``.
"""

import asyncio
import logging
import signal

import click

from voxaurora.audio.microphone import list_input_devices, resolve_device
from voxaurora.commands.dispatcher import ActionDispatcher
from voxaurora.commands.embeddings import SentenceEmbedder
from voxaurora.commands.loader import build_command_set, load_config_files
from voxaurora.commands.matcher import CommandMatcher
from voxaurora.config import (
    DEFAULT_MODEL_PATH,
    DICTIONARY_LANGUAGES,
    LANGUAGETOOL_LANGUAGE,
    MATCH_THRESHOLD,
    STT_LANGUAGE,
    WAKE_DEBOUNCE_SECONDS,
    WAKE_MATCH_THRESHOLD,
    WAKE_PHRASES,
    WAKE_START_ACTIVE,
)
from voxaurora.engine import VoiceEngine
from voxaurora.errors import VoxAuroraError
from voxaurora.stt.transcriber import WhisperTranscriber
from voxaurora.text.corrector import LanguageToolCorrector
from voxaurora.text.dictionary import load_dictionary
from voxaurora.text.normalizer import TranscriptNormalizer
from voxaurora.wake.gate import WakeGate
from voxaurora.wake.phrases import WakePhrases
from voxaurora.wake.types import WakeState

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool, log_file: str | None) -> None:
    """Configure the root logger for console and optional file output."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    formatter = logging.Formatter(_LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setFormatter(formatter)
        root.addHandler(handler)


def _print_devices() -> None:
    devices = list_input_devices()
    if not devices:
        click.echo(click.style("No input devices found.", fg="yellow"))
        return
    click.echo("Available input devices:")
    for index, name in devices:
        click.echo(f"  {index}: {name}")


def _prompt_device() -> int | None:
    """Show the input devices and ask for one; blank keeps the default."""
    _print_devices()
    choice = click.prompt(
        "Select input device (blank for default)", default="", show_default=False
    )
    return resolve_device(choice)


def _language_tag(language: str) -> str:
    """LanguageTool wants a variant for English; other languages pass through."""
    if language == "en":
        return LANGUAGETOOL_LANGUAGE
    return language


def build_engine(
    model_path: str,
    config_paths: list[str],
    *,
    device: int | None,
    threshold: float,
    language: str,
) -> VoiceEngine:
    """Load every model and config needed by the engine.

    Raises a VoxAuroraError subclass on any fatal startup problem.
    """
    entries = load_config_files(config_paths)
    logger.info("Loaded %d commands from %d file(s)", len(entries), len(config_paths))

    transcriber = WhisperTranscriber(model_path, language=language)
    transcriber.load()

    embedder = SentenceEmbedder()
    embedder.load()
    commands = build_command_set(entries, embedder)
    matcher = CommandMatcher(commands, embedder, threshold=threshold)

    languages = [language] + [lang for lang in DICTIONARY_LANGUAGES if lang != language]
    dictionary = load_dictionary(languages)
    normalizer = TranscriptNormalizer(
        dictionary, LanguageToolCorrector(language=_language_tag(language))
    )

    gate = WakeGate(
        WakePhrases(WAKE_PHRASES, threshold=WAKE_MATCH_THRESHOLD),
        debounce_seconds=WAKE_DEBOUNCE_SECONDS,
        initial_state=WakeState.ACTIVE if WAKE_START_ACTIVE else WakeState.ASLEEP,
    )

    return VoiceEngine(
        transcriber=transcriber,
        normalizer=normalizer,
        matcher=matcher,
        dispatcher=ActionDispatcher(),
        gate=gate,
        device=device,
    )


async def _run(engine: VoiceEngine) -> None:
    """Run *engine* until SIGINT or SIGTERM."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    await engine.start()
    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down")
        await engine.stop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


@click.command()
@click.argument("model_path", required=False)
@click.argument("config_paths", nargs=-1, type=click.Path(dir_okay=False))
@click.option("--device", default=None, help="Input device index (default: system default)")
@click.option(
    "--threshold",
    default=MATCH_THRESHOLD,
    show_default=True,
    type=click.FloatRange(-1.0, 1.0),
    help="Minimum cosine similarity for a command match",
)
@click.option("--language", default=STT_LANGUAGE, show_default=True, help="Speech language")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False), help="Also log to this file")
@click.option("--list-devices", is_flag=True, help="List input devices and exit")
def main(
    model_path: str | None,
    config_paths: tuple[str, ...],
    device: str | None,
    threshold: float,
    language: str,
    verbose: bool,
    log_file: str | None,
    list_devices: bool,
) -> None:
    """VoxAurora -- wake-word voice commands and dictation."""
    _setup_logging(verbose, log_file)

    if list_devices:
        _print_devices()
        return

    paths = list(config_paths)
    if model_path is None:
        model_path = click.prompt("Model path", default=DEFAULT_MODEL_PATH)
        if not paths:
            raw = click.prompt(
                "Command config files (space separated, blank for none)",
                default="",
                show_default=False,
            )
            paths = raw.split()
        device_index = resolve_device(device) if device is not None else _prompt_device()
    else:
        device_index = resolve_device(device)

    try:
        engine = build_engine(
            model_path,
            paths,
            device=device_index,
            threshold=threshold,
            language=language,
        )
    except VoxAuroraError as exc:
        click.echo(click.style(f"Error: {exc}", fg="red"))
        raise SystemExit(1)

    click.echo(click.style("VoxAurora ready. Say the wake word to start.", fg="green"))
    try:
        asyncio.run(_run(engine))
    except VoxAuroraError as exc:
        click.echo(click.style(f"Error: {exc}", fg="red"))
        raise SystemExit(1)
