"""
Action and Receipt models — the execution contract.

An Action is one host command the workflow wants run (``rpm-ostree
rebase ...``, ``rpm-ostree kargs ...``, ``systemctl reboot``). A Receipt
is what came back: ``ok``, ``failed`` with the process exit status, or
``skipped`` (dry run, reboot left to the user).

Adapters return Receipts. They never raise.
"""

from __future__ import annotations

import shlex
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """A host command to run through the adapter registry."""

    model_config = ConfigDict(frozen=True)

    id: str                         # "<operation_id>:<step>"
    step: str = ""                  # rebase, kargs-cleanup, kargs-append, reboot
    argv: list[str] = Field(default_factory=list)
    adapter: str = "shell"
    capture: bool | None = None     # None = adapter default

    @property
    def command(self) -> str:
        """The argv as a copy-pasteable shell line."""
        return shlex.join(self.argv)


StepStatus = Literal["ok", "failed", "skipped"]


class Receipt(BaseModel):
    """Outcome of one host command, or of a workflow step built from several."""

    adapter: str
    action_id: str
    status: StepStatus = "ok"

    finished_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    stderr: str = ""
    error: str | None = None
    exit_status: int | None = None  # None = process never ran

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        """Receipt for a command that exited 0."""
        return cls(adapter=adapter, action_id=action_id, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        """Receipt for a command that failed or could not be started."""
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Receipt for a command that was deliberately not run."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
