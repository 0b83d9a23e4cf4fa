"""
Adapter base — how host commands reach the host.

Workflow steps build Actions and hand them to the AdapterRegistry. The
registry picks an Adapter: the shell adapter on a real host, a mock or
SimulatedHost under ``--mock`` and in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from ublue_it.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """The action being run and how it is being run."""

    action: Action
    dry_run: bool = False

    @property
    def argv(self) -> list[str]:
        return self.action.argv


class Adapter(ABC):
    """Runs Actions and reports Receipts.

    ``execute`` must not raise: a command that fails, or cannot be
    started, comes back as a failed Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key; Actions select an adapter by this name."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the host tools this adapter drives are installed."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check an action before running it. Returns (ok, reason)."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
