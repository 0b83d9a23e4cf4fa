"""
Audit ledger — append-only history of rebase runs.

Each ``ublue-it rebase`` run appends one line of JSON to
``<state_dir>/audit.ndjson``: what was selected, which image it
resolved to, how each step ended. ``ublue-it history`` reads it back.

Lines are never rewritten. A ledger that cannot be written is logged
and otherwise ignored: by then the host has already been changed and
the run's outcome must still be reported.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from ublue_it.core.models.workflow import WorkflowResult

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


class AuditEntry(BaseModel):
    """One rebase run, flattened for the ledger."""

    timestamp: str = Field(default_factory=_utc_now)
    operation_id: str = ""

    desktop_env: str = ""
    has_nvidia: bool = False
    nvidia_vers: str = ""
    auto_reboot: bool = False
    release: str | None = None
    reference: str | None = None

    status: str = ""                # ok | partial | failed
    state: str = ""
    failure: str | None = None
    error: str | None = None
    steps: dict[str, str] = Field(default_factory=dict)   # rebase → ok, ...
    reboot_required: bool = False
    dry_run: bool = False
    mock: bool = False

    @classmethod
    def from_result(cls, result: WorkflowResult) -> AuditEntry:
        selection = result.selection.model_dump() if result.selection else {}
        return cls(
            operation_id=result.operation_id,
            **selection,
            release=result.release,
            reference=str(result.reference) if result.reference else None,
            status=result.status,
            state=result.state.value,
            failure=result.failure.value if result.failure else None,
            error=result.error,
            steps={name: receipt.status for name, receipt in result.steps.items()},
            reboot_required=result.reboot_required,
            dry_run=result.dry_run,
            mock=result.mock,
        )


class AuditLedger:
    """NDJSON file of AuditEntry lines, oldest first."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, entry: AuditEntry) -> bool:
        """Append ``entry``. Returns False (and logs) if the file can't be written."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(entry.model_dump_json() + "\n")
        except OSError as e:
            logger.error("Could not record run %s in %s: %s", entry.operation_id, self._path, e)
            return False
        logger.debug("Recorded run %s in %s", entry.operation_id, self._path)
        return True

    def entries(self) -> Iterator[AuditEntry]:
        """Yield every readable entry. Unparseable lines are skipped."""
        if not self._path.is_file():
            return
        with self._path.open("rb") as f:
            for lineno, raw in enumerate(f, start=1):
                if not raw.strip():
                    continue
                try:
                    yield AuditEntry.model_validate(json.loads(raw.decode("utf-8")))
                except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
                    logger.warning("%s:%d: skipping unreadable entry (%s)", self._path, lineno, e)

    def recent(self, limit: int = 20) -> list[AuditEntry]:
        """The last ``limit`` entries, oldest first."""
        if limit <= 0:
            return []
        return list(deque(self.entries(), maxlen=limit))
