"""
Workflow models — states, failure kinds and the final result of a run.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ublue_it.core.models.action import Receipt
from ublue_it.core.models.image import ImageReference
from ublue_it.core.models.selection import Selection


class WorkflowState(str, Enum):
    """States of the rebase workflow."""

    RESOLVING = "resolving"
    REBASING = "rebasing"
    CONFIGURING_KARGS = "configuring_kargs"
    REBOOTING = "rebooting"
    DONE = "done"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (WorkflowState.DONE, WorkflowState.FAILED)


class FailureKind(str, Enum):
    """Why a run ended in the failed state."""

    INPUT_VALIDATION = "input_validation"
    VERSION_UNAVAILABLE = "version_unavailable"
    REBASE_FAILED = "rebase_failed"
    KARGS_FAILED = "kargs_failed"


class WorkflowResult(BaseModel):
    """Aggregate outcome of one workflow run."""

    operation_id: str = ""
    state: WorkflowState = WorkflowState.RESOLVING
    states: list[WorkflowState] = Field(default_factory=list)

    selection: Selection | None = None
    release: str | None = None
    reference: ImageReference | None = None

    steps: dict[str, Receipt] = Field(default_factory=dict)

    failure: FailureKind | None = None
    error: str | None = None

    rebase_staged: bool = False       # a new deployment is pending
    reboot_required: bool = False
    manual_actions: list[str] = Field(default_factory=list)

    dry_run: bool = False
    mock: bool = False

    @property
    def ok(self) -> bool:
        """Whether the run reached the done state."""
        return self.state == WorkflowState.DONE

    @property
    def partial(self) -> bool:
        """New image staged but the run did not finish cleanly."""
        return self.state == WorkflowState.FAILED and self.rebase_staged

    @property
    def status(self) -> str:
        if self.ok:
            return "ok"
        if self.partial:
            return "partial"
        return "failed"

    def enter(self, state: WorkflowState) -> None:
        """Record a state transition."""
        self.state = state
        self.states.append(state)

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation_id": self.operation_id,
            "status": self.status,
            "state": self.state.value,
            "states": [s.value for s in self.states],
            "selection": self.selection.model_dump(mode="json") if self.selection else None,
            "release": self.release,
            "reference": str(self.reference) if self.reference else None,
            "steps": {name: r.model_dump(mode="json") for name, r in self.steps.items()},
            "failure": self.failure.value if self.failure else None,
            "error": self.error,
            "rebase_staged": self.rebase_staged,
            "reboot_required": self.reboot_required,
            "manual_actions": list(self.manual_actions),
            "dry_run": self.dry_run,
            "mock": self.mock,
        }
