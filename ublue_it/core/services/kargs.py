"""
Kernel argument configurator — NVIDIA boot parameters after a rebase.

The NVIDIA images need nouveau blacklisted and DRM modesetting enabled
before the new deployment is booted. Configuration runs in two phases
through ``rpm-ostree kargs``:

    1. cleanup  — ``--delete-if-exists`` for each argument
    2. append   — ``--append`` for each argument

Cleanup makes repeated runs safe: the arguments never end up on the
kernel command line twice.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ublue_it.core.models.action import Action, Receipt

if TYPE_CHECKING:
    from ublue_it.adapters.registry import AdapterRegistry

logger = logging.getLogger(__name__)

NVIDIA_KARGS: tuple[str, ...] = (
    "rd.driver.blacklist=nouveau",
    "modprobe.blacklist=nouveau",
    "nvidia-drm.modeset=1",
)

KARGS_COMMAND = ("rpm-ostree", "kargs")


def cleanup_argv(kargs: Sequence[str] = NVIDIA_KARGS) -> list[str]:
    """Command line removing ``kargs`` where present."""
    return [*KARGS_COMMAND, *(f"--delete-if-exists={k}" for k in kargs)]


def append_argv(kargs: Sequence[str] = NVIDIA_KARGS) -> list[str]:
    """Command line appending ``kargs``."""
    return [*KARGS_COMMAND, *(f"--append={k}" for k in kargs)]


def manual_kargs_command(kargs: Sequence[str] = NVIDIA_KARGS) -> str:
    """Shell line a user can run to finish configuration by hand."""
    return f"{shlex.join(cleanup_argv(kargs))} && {shlex.join(append_argv(kargs))}"


def apply_karg_edits(current: Sequence[str], argv: Sequence[str]) -> list[str]:
    """Apply an ``rpm-ostree kargs`` edit to a kernel command line.

    Pure model of the primitive's edit options:

        --append=K             add K (duplicates allowed)
        --append-if-missing=K  add K unless present
        --delete=K             remove K, error if absent
        --delete-if-exists=K   remove every K, no-op if absent

    Args:
        current: Kernel arguments before the edit.
        argv: Full command line, starting with ``rpm-ostree kargs``.

    Returns:
        Kernel arguments after the edit.

    Raises:
        ValueError: Not a kargs command, unknown option, or ``--delete``
            of an absent argument.
    """
    if tuple(argv[:2]) != KARGS_COMMAND:
        raise ValueError(f"Not an rpm-ostree kargs command: {list(argv)}")

    result = list(current)
    for option in argv[2:]:
        flag, sep, value = option.partition("=")
        if not sep or not value:
            raise ValueError(f"Unsupported kargs option: {option}")

        if flag == "--append":
            result.append(value)
        elif flag == "--append-if-missing":
            if value not in result:
                result.append(value)
        elif flag == "--delete":
            if value not in result:
                raise ValueError(f"No karg '{value}' found")
            result.remove(value)
        elif flag == "--delete-if-exists":
            result = [k for k in result if k != value]
        else:
            raise ValueError(f"Unsupported kargs option: {option}")

    return result


def configure_kernel_args(
    registry: AdapterRegistry,
    operation_id: str,
    dry_run: bool = False,
    kargs: Sequence[str] = NVIDIA_KARGS,
) -> Receipt:
    """Remove stale NVIDIA kernel arguments, then append them.

    A failing cleanup phase fails the step; the append phase is not
    attempted on top of an unknown kernel command line.

    Returns:
        One receipt for the whole step, with per-phase receipts in
        ``metadata["phases"]``.
    """
    step_id = f"{operation_id}:kargs"

    cleanup = registry.execute_action(
        Action(
            id=f"{operation_id}:kargs-cleanup",
            step="kargs-cleanup",
            argv=cleanup_argv(kargs),
        ),
        dry_run=dry_run,
    )
    phases = {"cleanup": cleanup.model_dump(mode="json")}

    if cleanup.failed:
        logger.error("Kernel argument cleanup failed: %s", cleanup.error)
        return Receipt.failure(
            adapter=cleanup.adapter,
            action_id=step_id,
            error=f"Removing stale kernel arguments failed: {cleanup.error}",
            exit_status=cleanup.exit_status,
            metadata={"phases": phases},
        )

    append = registry.execute_action(
        Action(
            id=f"{operation_id}:kargs-append",
            step="kargs-append",
            argv=append_argv(kargs),
        ),
        dry_run=dry_run,
    )
    phases["append"] = append.model_dump(mode="json")

    if append.failed:
        logger.error("Appending kernel arguments failed: %s", append.error)
        return Receipt.failure(
            adapter=append.adapter,
            action_id=step_id,
            error=f"Setting kernel arguments failed: {append.error}",
            exit_status=append.exit_status,
            metadata={"phases": phases},
        )

    if append.skipped:
        return Receipt.skip(
            adapter=append.adapter,
            action_id=step_id,
            reason=f"{cleanup.output}\n{append.output}",
            metadata={"phases": phases},
        )

    return Receipt.success(
        adapter=append.adapter,
        action_id=step_id,
        output=f"Kernel arguments set: {' '.join(kargs)}",
        exit_status=append.exit_status,
        duration_ms=cleanup.duration_ms + append.duration_ms,
        metadata={"phases": phases},
    )
