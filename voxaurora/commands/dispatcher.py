"""Turns match results into actions: run a shell command or type text.

Keystroke backends:
1. pynput — synthetic keyboard events into the focused window (default).
2. xdotool — ``xdotool type`` on X11.
3. tmux — ``tmux send-keys`` into the current pane.
"""

from __future__ import annotations

import asyncio
import logging
import shutil

from voxaurora.commands.types import MatchResult, ShellCommand, TypedText
from voxaurora.config import DISPATCH_TIMEOUT, TYPE_METHOD, TYPE_TRAILING_SPACE

logger = logging.getLogger(__name__)

_TYPE_METHODS = ("pynput", "xdotool", "tmux")


def resolve_action(result: MatchResult) -> ShellCommand | TypedText:
    """The matched command's action, or the heard text to be typed."""
    if result.command is not None:
        return result.command.action
    return TypedText(text=result.text)


class ActionDispatcher:
    """Executes resolved actions without ever raising into the pipeline."""

    def __init__(
        self,
        *,
        type_method: str = TYPE_METHOD,
        trailing_space: bool = TYPE_TRAILING_SPACE,
        timeout: float = DISPATCH_TIMEOUT,
    ) -> None:
        self._requested_method = type_method
        self._trailing_space = trailing_space
        self._timeout = timeout
        self._method: str | None = None
        self._keyboard = None
        self._shell_tasks: set[asyncio.Task] = set()

    async def start(self) -> None:
        """Pick the keystroke backend."""
        self._method = self._select_method(self._requested_method)
        logger.info("Keystroke injection method: %s", self._method)

    async def stop(self) -> None:
        """Stop watching running shell commands (the commands keep running)."""
        for task in list(self._shell_tasks):
            task.cancel()
        if self._shell_tasks:
            await asyncio.gather(*self._shell_tasks, return_exceptions=True)
        self._shell_tasks.clear()
        self._method = None

    @property
    def is_available(self) -> bool:
        return self._method is not None

    @property
    def method(self) -> str | None:
        """Return the typing method name ('pynput', 'xdotool', 'tmux') or None."""
        return self._method

    @property
    def running_commands(self) -> int:
        return len(self._shell_tasks)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def dispatch(self, result: MatchResult) -> bool:
        """Run or type the action for *result*.  Returns True on success."""
        action = resolve_action(result)
        try:
            if isinstance(action, ShellCommand):
                return await self.run_shell(action.command_line)
            return await self.type_text(action.text)
        except Exception:
            logger.warning("Dispatch failed for %r", action, exc_info=True)
            return False

    async def run_shell(self, command_line: str) -> bool:
        """Launch ``sh -c command_line``; its exit status is logged later."""
        if not command_line:
            logger.warning("Empty shell command — nothing to run")
            return False
        try:
            proc = await asyncio.create_subprocess_exec(
                "sh", "-c", command_line,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError:
            logger.warning("Could not launch shell command: %s", command_line, exc_info=True)
            return False

        logger.info("Launched shell command (pid %s): %s", proc.pid, command_line)
        task = asyncio.create_task(self._watch_process(proc, command_line))
        self._shell_tasks.add(task)
        task.add_done_callback(self._shell_tasks.discard)
        return True

    async def type_text(self, text: str) -> bool:
        """Inject *text* as keystrokes, waiting up to the dispatch timeout."""
        if not self._method:
            logger.warning("Dispatch unavailable — cannot type: %s", text)
            return False
        text = text.strip()
        if not text:
            return False
        if self._trailing_space:
            text += " "

        try:
            if self._method == "tmux":
                ok = await asyncio.wait_for(self._type_tmux(text), self._timeout)
            elif self._method == "xdotool":
                ok = await asyncio.wait_for(self._type_xdotool(text), self._timeout)
            else:
                ok = await asyncio.wait_for(
                    asyncio.to_thread(self._type_pynput, text), self._timeout
                )
        except asyncio.TimeoutError:
            logger.warning("Typing timed out after %.1fs", self._timeout)
            return False

        if ok:
            logger.info("Typed via %s: %s", self._method, text)
        return ok

    # ------------------------------------------------------------------
    # Backends
    # ------------------------------------------------------------------

    async def _watch_process(self, proc, command_line: str) -> None:
        returncode = await proc.wait()
        if returncode != 0:
            logger.warning("Shell command exited with status %s: %s", returncode, command_line)
        else:
            logger.debug("Shell command finished: %s", command_line)

    def _type_pynput(self, text: str) -> bool:
        """pynput: synthetic key events.  Runs in a worker thread."""
        if self._keyboard is None:
            from pynput.keyboard import Controller

            self._keyboard = Controller()
        self._keyboard.type(text)
        return True

    async def _type_xdotool(self, text: str) -> bool:
        """Linux X11: Use xdotool to type text."""
        proc = await asyncio.create_subprocess_exec(
            "xdotool", "type", "--clearmodifiers", "--", text,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            logger.warning("xdotool type failed: %s", stderr.decode())
            return False
        return True

    async def _type_tmux(self, text: str) -> bool:
        """tmux: send the text literally to the current pane."""
        proc = await asyncio.create_subprocess_exec(
            "tmux", "send-keys", "-l", text,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            logger.warning("tmux send-keys failed: %s", stderr.decode())
            return False
        return True

    @staticmethod
    def _select_method(requested: str) -> str:
        """Validate a forced method, falling back to pynput."""
        method = (requested or "pynput").strip().lower()
        if method not in _TYPE_METHODS:
            logger.warning("Unknown typing method %r — using pynput", requested)
            return "pynput"
        if method != "pynput" and not shutil.which(method):
            logger.warning("%s not found on PATH — using pynput", method)
            return "pynput"
        return method
