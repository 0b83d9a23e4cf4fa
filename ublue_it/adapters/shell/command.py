"""
Shell adapter — runs rpm-ostree and systemctl on the real host.

Commands are run from their argv, never through a shell, and without a
timeout: a rebase may take many minutes, and ``systemctl reboot`` may
not return at all. Output streams to the terminal so the user sees
rpm-ostree's progress, unless the action (or ``--json``) asks for it
to be captured.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from ublue_it.adapters.base import Adapter, ExecutionContext
from ublue_it.core.models.action import Receipt

logger = logging.getLogger(__name__)


def describe_status(exit_status: int) -> str:
    """``exit status 1`` or, for a negative status, the killing signal."""
    if exit_status < 0:
        return f"terminated by signal {-exit_status}"
    return f"exit status {exit_status}"


class ShellCommandAdapter(Adapter):
    """Runs an Action's argv with subprocess."""

    def __init__(self, capture: bool = False):
        self._capture = capture

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("rpm-ostree") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.argv:
            return False, "Action has no command"
        if shutil.which(context.argv[0]) is None:
            return False, f"Command not found: {context.argv[0]}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action
        capture = self._capture if action.capture is None else action.capture
        program = action.argv[0]

        logger.debug("exec %s (capture=%s)", action.argv, capture)
        start = time.monotonic()
        try:
            proc = subprocess.run(action.argv, capture_output=capture, text=True, check=False)
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Could not start {program}: {e}",
            )
        elapsed_ms = int((time.monotonic() - start) * 1000)

        stdout = (proc.stdout or "").strip()
        stderr = (proc.stderr or "").strip()

        if proc.returncode != 0:
            error = f"{program} failed with {describe_status(proc.returncode)}"
            if stderr:
                error += f": {stderr.splitlines()[-1]}"
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=error,
                exit_status=proc.returncode,
                output=stdout,
                stderr=stderr,
                duration_ms=elapsed_ms,
            )

        return Receipt.success(
            adapter=self.name,
            action_id=action.id,
            output=stdout,
            stderr=stderr,
            exit_status=0,
            duration_ms=elapsed_ms,
        )
