"""
Rebase workflow — the state machine behind ``ublue-it rebase``.

    resolving → rebasing → [configuring_kargs] → rebooting → done
         ↘           ↘               ↘
          failed      failed          failed

Rules:
    - Nothing touches the host until the image reference is resolved.
    - A failed rebase stops the run: there is no deployment to configure.
    - NVIDIA kernel arguments are set before any reboot. If they cannot
      be set the run fails with the new image staged, and no reboot.
    - Reboot always ends in done; a skipped reboot leaves a manual step.

Nothing is retried. Every transition is logged.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from ublue_it.adapters.registry import AdapterRegistry
from ublue_it.core.errors import InputValidationError, VersionUnavailable
from ublue_it.core.models.selection import Selection
from ublue_it.core.models.workflow import FailureKind, WorkflowResult, WorkflowState
from ublue_it.core.services.kargs import configure_kernel_args, manual_kargs_command
from ublue_it.core.services.os_release import current_os_release
from ublue_it.core.services.rebase import rebase
from ublue_it.core.services.reboot import MANUAL_REBOOT_COMMAND, maybe_reboot
from ublue_it.core.services.resolver import resolve_selection, validate_selection

logger = logging.getLogger(__name__)

ReleaseProvider = Callable[[], str]


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"


class Workflow:
    """Sequences resolve → rebase → kargs → reboot for one selection.

    Args:
        registry: Dispatches host operations.
        release_provider: Returns the installed OS release; defaults to
            reading /etc/fedora-release.
        dry_run: Validate each host operation but do not run it.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        release_provider: ReleaseProvider | None = None,
        dry_run: bool = False,
    ):
        self._registry = registry
        self._release_provider = release_provider or current_os_release
        self._dry_run = dry_run

    def run(self, selection: Selection, operation_id: str | None = None) -> WorkflowResult:
        """Run the workflow to a terminal state."""
        result = WorkflowResult(
            operation_id=operation_id or generate_operation_id(),
            selection=selection,
            dry_run=self._dry_run,
            mock=self._registry.mock_mode,
        )

        state = WorkflowState.RESOLVING
        while not state.terminal:
            result.enter(state)
            logger.debug("[%s] → %s", result.operation_id, state.value)
            state = self._step(state, selection, result)

        result.enter(state)
        logger.info(
            "[%s] finished: %s%s",
            result.operation_id,
            state.value,
            f" ({result.failure.value})" if result.failure else "",
        )
        return result

    def _step(
        self,
        state: WorkflowState,
        selection: Selection,
        result: WorkflowResult,
    ) -> WorkflowState:
        if state == WorkflowState.RESOLVING:
            return self._resolve(selection, result)
        if state == WorkflowState.REBASING:
            return self._rebase(result)
        if state == WorkflowState.CONFIGURING_KARGS:
            return self._configure_kargs(result)
        if state == WorkflowState.REBOOTING:
            return self._reboot(selection, result)
        raise ValueError(f"No transition from state {state.value}")

    # ── States ──────────────────────────────────────────────────────

    def _resolve(self, selection: Selection, result: WorkflowResult) -> WorkflowState:
        try:
            validate_selection(selection)
            result.release = self._release_provider()
            result.reference = resolve_selection(selection, result.release)
        except InputValidationError as e:
            return self._fail(result, FailureKind.INPUT_VALIDATION, str(e))
        except VersionUnavailable as e:
            return self._fail(result, FailureKind.VERSION_UNAVAILABLE, str(e))

        logger.info("Resolved image: %s", result.reference)
        return WorkflowState.REBASING

    def _rebase(self, result: WorkflowResult) -> WorkflowState:
        reference = result.reference
        if reference is None:
            raise ValueError("Cannot rebase before an image reference is resolved")
        receipt = rebase(reference, self._registry, result.operation_id, self._dry_run)
        result.steps["rebase"] = receipt

        if receipt.failed:
            return self._fail(
                result,
                FailureKind.REBASE_FAILED,
                f"Rebasing failed: {receipt.error}",
            )

        result.rebase_staged = receipt.ok
        if reference.nvidia:
            return WorkflowState.CONFIGURING_KARGS
        return WorkflowState.REBOOTING

    def _configure_kargs(self, result: WorkflowResult) -> WorkflowState:
        receipt = configure_kernel_args(self._registry, result.operation_id, self._dry_run)
        result.steps["kargs"] = receipt

        if receipt.failed:
            result.manual_actions.append(
                f"Set the NVIDIA kernel arguments manually: {manual_kargs_command()}"
            )
            result.manual_actions.append(
                "Do not assume the new deployment boots with GPU acceleration until they are set."
            )
            return self._fail(
                result,
                FailureKind.KARGS_FAILED,
                f"Image staged but kernel arguments not set: {receipt.error}",
            )

        return WorkflowState.REBOOTING

    def _reboot(self, selection: Selection, result: WorkflowResult) -> WorkflowState:
        receipt = maybe_reboot(
            selection.auto_reboot, self._registry, result.operation_id, self._dry_run
        )
        result.steps["reboot"] = receipt

        if receipt.ok:
            result.reboot_required = False
        else:
            result.reboot_required = result.rebase_staged or self._dry_run
            if receipt.failed:
                logger.warning("Reboot request failed: %s", receipt.error)
            if result.reboot_required:
                result.manual_actions.append(
                    f"Reboot to boot into the new image: {MANUAL_REBOOT_COMMAND}"
                )

        return WorkflowState.DONE

    def _fail(self, result: WorkflowResult, kind: FailureKind, error: str) -> WorkflowState:
        result.failure = kind
        result.error = error
        logger.error("[%s] %s: %s", result.operation_id, kind.value, error)
        return WorkflowState.FAILED
