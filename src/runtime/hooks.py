"""Fire-and-forget shell hook run when a block finishes."""

from __future__ import annotations

import logging
import subprocess
import threading
from typing import Optional, Protocol


class ShellRunner(Protocol):
    def run(self) -> None:
        ...


class SubprocessShellRunner:
    """Starts the configured command in its own session.

    The tick loop never waits on the hook; a daemon thread reaps the child when
    it exits.
    """

    def __init__(self, command: str, *, logger: Optional[logging.Logger] = None):
        if not command.strip():
            raise ValueError("hook command cannot be empty")
        self._command = command
        self._logger = logger or logging.getLogger("runtime.hooks")

    def run(self) -> None:
        try:
            process = subprocess.Popen(
                ["/bin/sh", "-c", self._command],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as error:
            self._logger.error("Block-end hook failed to start: %s", error)
            return
        self._logger.info("Block-end hook started (pid=%s): %s", process.pid, self._command)
        threading.Thread(target=process.wait, name="block-end-hook", daemon=True).start()


class NullShellRunner:
    def run(self) -> None:
        return None
