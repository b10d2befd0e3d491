"""Focused-window sampling through an external command."""

from __future__ import annotations

import logging
import subprocess
from typing import Optional, Protocol, Sequence

DEFAULT_SAMPLER_COMMAND: tuple[str, ...] = ("xdotool", "getwindowfocus", "getwindowname")
DEFAULT_SAMPLER_TIMEOUT_SECONDS = 0.5


class WindowSampler(Protocol):
    """Capability returning the focused window title, or None when unavailable."""
    def current_window_title(self) -> Optional[str]:
        ...


class CommandWindowSampler:
    """Runs a short-lived command and reads the window title from its stdout.

    Any failure (missing binary, timeout, non-zero exit, empty output) yields
    None and a debug log line; the caller simply skips the sample.
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_SAMPLER_COMMAND,
        *,
        timeout_seconds: float = DEFAULT_SAMPLER_TIMEOUT_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        if not command:
            raise ValueError("sampler command cannot be empty")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        self._command = tuple(command)
        self._timeout_seconds = timeout_seconds
        self._logger = logger or logging.getLogger("activity.sampler")

    def current_window_title(self) -> Optional[str]:
        try:
            completed = subprocess.run(
                self._command,
                capture_output=True,
                timeout=self._timeout_seconds,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as error:
            self._logger.debug("Window sample failed: %s", error)
            return None

        if completed.returncode != 0:
            self._logger.debug(
                "Window sample command exited with %s: %s",
                completed.returncode,
                _decode(completed.stderr).strip(),
            )
            return None

        title = _decode(completed.stdout).strip()
        return title or None


def _decode(raw: bytes) -> str:
    # Window titles are not guaranteed to be valid UTF-8.
    return raw.decode("utf-8", errors="replace")


class NullWindowSampler:
    """Sampler used when window sampling is disabled."""
    def current_window_title(self) -> Optional[str]:
        return None
