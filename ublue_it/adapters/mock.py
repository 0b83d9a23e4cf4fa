"""
Mock adapters — test doubles for host operations.

MockAdapter records every call and returns success unless told
otherwise. SimulatedHost also models the host state that rpm-ostree
and systemctl change: the pending deployment, the kernel command line
and reboots. ``ublue-it rebase --mock`` runs against a SimulatedHost.
"""

from __future__ import annotations

from ublue_it.adapters.base import Adapter, ExecutionContext
from ublue_it.core.models.action import Action, Receipt
from ublue_it.core.services.kargs import KARGS_COMMAND, apply_karg_edits
from ublue_it.core.services.rebase import REBASE_COMMAND
from ublue_it.core.services.reboot import REBOOT_ARGV


class MockAdapter(Adapter):
    """Records every Action and answers ``ok`` unless scripted otherwise.

    Scripted receipts are keyed by action id (``op-1:rebase``) or by step
    (``rebase``, ``kargs-cleanup``, ``kargs-append``, ``reboot``).
    """

    def __init__(self, adapter_name: str = "mock", available: bool = True):
        self._name = adapter_name
        self._available = available
        self._scripted: dict[str, Receipt] = {}
        self.calls: list[Action] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def called_steps(self) -> list[str]:
        return [action.step for action in self.calls]

    def is_available(self) -> bool:
        return self._available

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def set_response(self, key: str, receipt: Receipt) -> None:
        self._scripted[key] = receipt

    def set_failure(self, key: str, error: str = "Mock failure", exit_status: int = 1) -> None:
        self.set_response(
            key,
            Receipt.failure(adapter=self._name, action_id=key, error=error, exit_status=exit_status),
        )

    def reset(self) -> None:
        self.calls.clear()
        self._scripted.clear()

    def _scripted_for(self, action: Action) -> Receipt | None:
        key = next((k for k in (action.id, action.step) if k in self._scripted), None)
        if key is None:
            return None
        return self._scripted[key].model_copy(update={"action_id": action.id})

    def _run(self, action: Action) -> Receipt:
        return Receipt.success(
            adapter=self._name,
            action_id=action.id,
            output=f"[mock] {action.command}",
            exit_status=0,
        )

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action
        self.calls.append(action)
        scripted = self._scripted_for(action)
        return scripted if scripted is not None else self._run(action)


class SimulatedHost(MockAdapter):
    """A MockAdapter that also plays the part of rpm-ostree and systemctl.

    Attributes:
        booted: Reference of the running deployment.
        staged: Reference of the pending deployment, if any.
        kargs: Kernel arguments of the pending deployment.
        reboots: Number of accepted reboot requests.
    """

    def __init__(self, booted: str = "", kargs: list[str] | None = None):
        super().__init__(adapter_name="simulated-host")
        self.booted = booted
        self.staged: str | None = None
        self.kargs: list[str] = list(kargs or [])
        self.reboots = 0

    def _ok(self, action: Action, output: str) -> Receipt:
        return Receipt.success(adapter=self._name, action_id=action.id, output=output, exit_status=0)

    def _run(self, action: Action) -> Receipt:
        argv = action.argv
        n = len(REBASE_COMMAND)

        if tuple(argv[:n]) == REBASE_COMMAND and len(argv) == n + 1:
            self.staged = argv[n]
            return self._ok(action, f"[mock] Staged deployment {self.staged}")

        if tuple(argv[:2]) == KARGS_COMMAND:
            try:
                self.kargs = apply_karg_edits(self.kargs, argv)
            except ValueError as e:
                return Receipt.failure(
                    adapter=self._name, action_id=action.id, error=f"error: {e}", exit_status=1
                )
            return self._ok(action, f"[mock] Kernel arguments: {' '.join(self.kargs)}")

        if tuple(argv) == REBOOT_ARGV:
            self.reboots += 1
            if self.staged:
                self.booted, self.staged = self.staged, None
            return self._ok(action, "[mock] Reboot requested")

        return Receipt.failure(
            adapter=self._name,
            action_id=action.id,
            error=f"[mock] Unknown command: {action.command}",
            exit_status=127,
        )
