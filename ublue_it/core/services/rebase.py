"""
Rebase executor — stage a new base image with rpm-ostree.

The image is pulled through the ``ostree-unverified-registry``
transport, which rpm-ostree still gates behind ``--experimental``.
Both are fixed for this workflow. A rebase is never retried: the
operator decides what to do with a failed one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ublue_it.core.models.action import Action, Receipt
from ublue_it.core.models.image import ImageReference

if TYPE_CHECKING:
    from ublue_it.adapters.registry import AdapterRegistry

logger = logging.getLogger(__name__)

REBASE_COMMAND = ("rpm-ostree", "rebase", "--experimental")


def rebase_argv(reference: ImageReference) -> list[str]:
    """Command line rebasing onto ``reference``."""
    return [*REBASE_COMMAND, str(reference)]


def rebase(
    reference: ImageReference,
    registry: AdapterRegistry,
    operation_id: str,
    dry_run: bool = False,
) -> Receipt:
    """Rebase the host onto ``reference``.

    Mutates host state: on success a new deployment is pending and
    becomes active on next boot.
    """
    action = Action(
        id=f"{operation_id}:rebase",
        step="rebase",
        argv=rebase_argv(reference),
    )
    receipt = registry.execute_action(action, dry_run=dry_run)

    if receipt.failed:
        logger.error("Rebase onto %s failed: %s", reference, receipt.error)
    else:
        logger.info("Rebase onto %s → %s", reference, receipt.status)
    return receipt
