"""Loading command configuration files into a CommandSet."""

import json
import logging
from pathlib import Path
from typing import Iterable

import numpy as np
from pydantic import ValidationError

from voxaurora.commands.embeddings import Embedder
from voxaurora.commands.types import (
    Command,
    CommandEntry,
    CommandSet,
    CommandsFile,
    parse_action,
)
from voxaurora.errors import ConfigError, ModelLoadError

logger = logging.getLogger(__name__)


def load_config_file(path: str | Path) -> list[CommandEntry]:
    """Parse one ``{"commands": [...]}`` file.  Raises ConfigError."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Malformed JSON in {path}: {exc}") from exc

    try:
        parsed = CommandsFile.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid command config {path}: {exc}") from exc

    logger.info("Loaded %d commands from %s", len(parsed.commands), path)
    return parsed.commands


def load_config_files(paths: Iterable[str | Path]) -> list[CommandEntry]:
    """Concatenate commands from *paths*, preserving file then entry order."""
    entries: list[CommandEntry] = []
    for path in paths:
        entries.extend(load_config_file(path))
    return entries


def build_command_set(entries: list[CommandEntry], embedder: Embedder) -> CommandSet:
    """Decode actions and embed every trigger in a single batch call."""
    if not entries:
        logger.warning("No commands configured — everything heard will be typed")
        return CommandSet()

    triggers = [entry.trigger for entry in entries]
    try:
        embeddings = np.asarray(embedder.encode(triggers), dtype=np.float32)
    except Exception as exc:
        raise ModelLoadError(f"Cannot embed command triggers: {exc}") from exc

    commands = []
    for index, (entry, vector) in enumerate(zip(entries, embeddings)):
        vector = vector.copy()
        vector.flags.writeable = False
        commands.append(
            Command(
                trigger=entry.trigger,
                action=parse_action(entry.action),
                embedding=vector,
                index=index,
            )
        )
    return CommandSet(commands=tuple(commands))
