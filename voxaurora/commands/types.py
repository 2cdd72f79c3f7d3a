"""Pydantic models for configured commands and match results."""

from __future__ import annotations

from typing import Annotated, Literal, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

SHELL_PREFIX = "cmd:"


class ShellCommand(BaseModel):
    """Run ``command_line`` through the shell."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["shell"] = "shell"
    command_line: str


class TypedText(BaseModel):
    """Type ``text`` as keystrokes into the focused window."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


ActionDescriptor = Annotated[Union[ShellCommand, TypedText], Field(discriminator="kind")]


def parse_action(action: str) -> ShellCommand | TypedText:
    """Decode a config action string using the ``cmd:`` prefix convention."""
    if action.startswith(SHELL_PREFIX):
        return ShellCommand(command_line=action[len(SHELL_PREFIX):].strip())
    return TypedText(text=action)


class CommandEntry(BaseModel):
    """One ``{"trigger": ..., "action": ...}`` object from a config file."""

    trigger: str = Field(min_length=1)
    action: str


class CommandsFile(BaseModel):
    """Top-level shape of a command configuration file."""

    commands: list[CommandEntry]


class Command(BaseModel):
    """A loaded command with its decoded action and trigger embedding."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    trigger: str
    action: ActionDescriptor
    embedding: np.ndarray
    index: int = Field(ge=0)


class CommandSet(BaseModel):
    """Commands in load order; earlier entries win similarity ties."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    commands: tuple[Command, ...] = ()

    def __len__(self) -> int:
        return len(self.commands)

    @property
    def triggers(self) -> list[str]:
        return [c.trigger for c in self.commands]


class MatchResult(BaseModel):
    """Best command for a transcript, or ``command=None`` below threshold."""

    model_config = ConfigDict(frozen=True)

    command: Command | None
    similarity: float
    text: str

    @property
    def matched(self) -> bool:
        return self.command is not None
