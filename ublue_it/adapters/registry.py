"""
Adapter registry — the one place host commands are dispatched from.

    Action ─▶ pick adapter ─▶ validate ─▶ dry run? skip : execute ─▶ Receipt

In mock mode every Action goes to the mock adapter regardless of the
adapter it names. Dispatch never raises.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from ublue_it.adapters.base import Adapter, ExecutionContext
from ublue_it.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus the mock and dry-run switches."""

    def __init__(self, mock_mode: bool = False, mock_adapter: Adapter | None = None):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock_adapter = mock_adapter

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    @property
    def mock_adapter(self) -> Adapter | None:
        return self._mock_adapter

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        """Route every action to ``mock_adapter`` (or succeed blindly if None)."""
        self._mock_mode = enabled
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %s", adapter.name)
        self._adapters[adapter.name] = adapter

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Availability of each registered adapter, for ``ublue-it detect``."""
        return {
            name: {"available": adapter.is_available(), "type": type(adapter).__name__}
            for name, adapter in self._adapters.items()
        }

    # ── Dispatch ────────────────────────────────────────────────────

    def _adapter_for(self, action: Action) -> Adapter | None:
        if self._mock_mode:
            return self._mock_adapter
        return self._adapters.get(action.adapter)

    def execute_action(self, action: Action, dry_run: bool = False) -> Receipt:
        """Run ``action`` and return its Receipt.

        With ``dry_run`` the action is validated (for the shell adapter:
        the command exists) and then skipped.
        """
        adapter = self._adapter_for(action)

        if adapter is None and self._mock_mode:
            return Receipt.success(
                adapter="mock",
                action_id=action.id,
                output=f"[mock] {action.command}",
                exit_status=0,
            )
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        context = ExecutionContext(action=action, dry_run=dry_run)
        valid, reason = adapter.validate(context)
        if not valid:
            return Receipt.failure(
                adapter=adapter.name,
                action_id=action.id,
                error=f"Validation failed: {reason}",
            )

        if dry_run:
            return Receipt.skip(
                adapter=adapter.name,
                action_id=action.id,
                reason=f"[dry-run] Would run: {action.command}",
            )

        logger.info("%s: %s", action.step or action.id, action.command)
        start = time.monotonic()
        receipt = adapter.execute(context)
        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt
