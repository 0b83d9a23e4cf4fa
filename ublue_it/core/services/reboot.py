"""
Reboot controller — restart into the new deployment, or tell the user to.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ublue_it.core.models.action import Action, Receipt

if TYPE_CHECKING:
    from ublue_it.adapters.registry import AdapterRegistry

logger = logging.getLogger(__name__)

REBOOT_ARGV = ("systemctl", "reboot")
MANUAL_REBOOT_COMMAND = "systemctl reboot"


def maybe_reboot(
    auto_reboot: bool,
    registry: AdapterRegistry,
    operation_id: str,
    dry_run: bool = False,
) -> Receipt:
    """Reboot the host if ``auto_reboot`` is set.

    When the reboot goes through, this call usually never returns:
    the host tears the process down. If it does return with status 0
    the restart request was accepted.

    Returns:
        ``skipped`` when auto reboot is off, otherwise the receipt of
        ``systemctl reboot``.
    """
    action_id = f"{operation_id}:reboot"
    if not auto_reboot:
        logger.info("Auto reboot disabled — leaving reboot to the user")
        return Receipt.skip(
            adapter="shell",
            action_id=action_id,
            reason=f"Reboot manually with: {MANUAL_REBOOT_COMMAND}",
        )

    logger.warning("Rebooting the host")
    return registry.execute_action(
        Action(id=action_id, step="reboot", argv=list(REBOOT_ARGV)),
        dry_run=dry_run,
    )
