"""Copy raw prompt text to the system clipboard with transient feedback."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from collections.abc import Callable
from typing import Any

from .scheduler import ScheduledTask, Scheduler
from .views import CopyFeedbackView

logger = logging.getLogger(__name__)

IDLE_LABEL = "Copy Prompt"
COPIED_LABEL = "Copied!"
SUCCESS_MESSAGE = "Paste this into ChatGPT, Claude, Gemini, or your preferred LLM"
ERROR_MESSAGE = "Copy failed. Please try selecting and copying the text manually."
DEFAULT_REVERT_SECONDS = 5.0

# Tried in order; the first one found on PATH wins.
CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)

ClipboardWriter = Callable[[str], None]


class ClipboardError(RuntimeError):
    """Raised when text could not be placed on the clipboard."""


class CommandClipboardWriter:
    """Pipe text into a platform clipboard command."""

    def __init__(self, command: tuple[str, ...]) -> None:
        self.command = command

    def __call__(self, text: str) -> None:
        try:
            subprocess.run(list(self.command), input=text, text=True, check=True, capture_output=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise ClipboardError(f"{self.command[0]} failed: {exc}") from exc


class TkClipboardWriter:
    """Copy through a hidden Tk window.

    On X11 the window that owns the selection serves it to other programs,
    and the contents vanish when that window is destroyed unless a clipboard
    manager has taken them over. The window therefore stays open after a copy
    until :meth:`close` is called.
    """

    def __init__(self) -> None:
        self._root: Any = None

    def __call__(self, text: str) -> None:
        try:
            import tkinter
        except ImportError as exc:
            raise ClipboardError("tkinter is not available") from exc
        if self._root is None:
            try:
                self._root = tkinter.Tk()
                self._root.withdraw()
            except tkinter.TclError as exc:
                self._root = None
                raise ClipboardError(f"Could not open a clipboard window: {exc}") from exc
        try:
            self._root.clipboard_clear()
            self._root.clipboard_append(text)
            self._root.update()
        except tkinter.TclError as exc:
            self.close()
            raise ClipboardError(f"Clipboard copy failed: {exc}") from exc

    def close(self) -> None:
        """Destroy the clipboard window, giving up clipboard ownership."""
        if self._root is not None:
            root, self._root = self._root, None
            root.destroy()


def detect_primary_writer(which: Callable[[str], str | None] = shutil.which) -> ClipboardWriter | None:
    """Return a command-based writer if the platform has a clipboard command."""
    for command in CLIPBOARD_COMMANDS:
        if command[0] == "clip" and not sys.platform.startswith("win"):
            continue
        if which(command[0]):
            return CommandClipboardWriter(command)
    return None


class ClipboardExporter:
    """Copy text and drive the copy control's feedback states.

    Success and failure both revert to the idle state after ``revert_delay``
    seconds. A newer copy or an explicit reset cancels the pending revert.
    """

    def __init__(
        self,
        feedback: CopyFeedbackView,
        scheduler: Scheduler,
        primary: ClipboardWriter | None,
        fallback: ClipboardWriter,
        revert_delay: float = DEFAULT_REVERT_SECONDS,
    ) -> None:
        self._feedback = feedback
        self._scheduler = scheduler
        self._primary = primary
        self._fallback = fallback
        self._revert_delay = revert_delay
        self._revert_task: ScheduledTask | None = None

    def copy(self, text: str) -> bool:
        """Copy text; return whether it reached the clipboard."""
        writer = self._primary if self._primary is not None else self._fallback
        try:
            writer(text)
        except ClipboardError as exc:
            logger.warning("Copy failed: %s", exc)
            self._feedback.show_error(ERROR_MESSAGE)
            self._schedule_revert()
            return False
        self._feedback.show_success(COPIED_LABEL, SUCCESS_MESSAGE)
        self._schedule_revert()
        return True

    def reset(self) -> None:
        """Return the copy control to idle immediately."""
        self._cancel_revert()
        self._feedback.reset(IDLE_LABEL)

    def _schedule_revert(self) -> None:
        self._cancel_revert()
        self._revert_task = self._scheduler.call_later(self._revert_delay, self._revert)

    def _cancel_revert(self) -> None:
        if self._revert_task is not None:
            self._revert_task.cancel()
            self._revert_task = None

    def _revert(self) -> None:
        self._revert_task = None
        self._feedback.reset(IDLE_LABEL)
