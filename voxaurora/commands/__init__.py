"""Command configuration, semantic matching, and action dispatch."""

from voxaurora.commands.dispatcher import ActionDispatcher, resolve_action
from voxaurora.commands.embeddings import Embedder, SentenceEmbedder
from voxaurora.commands.loader import build_command_set, load_config_file, load_config_files
from voxaurora.commands.matcher import CommandMatcher
from voxaurora.commands.types import (
    ActionDescriptor,
    Command,
    CommandEntry,
    CommandSet,
    MatchResult,
    ShellCommand,
    TypedText,
    parse_action,
)

__all__ = [
    "ActionDescriptor",
    "ActionDispatcher",
    "Command",
    "CommandEntry",
    "CommandMatcher",
    "CommandSet",
    "Embedder",
    "MatchResult",
    "SentenceEmbedder",
    "ShellCommand",
    "TypedText",
    "build_command_set",
    "load_config_file",
    "load_config_files",
    "parse_action",
    "resolve_action",
]
