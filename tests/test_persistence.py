"""
Tests for the audit ledger.
"""

import json
from pathlib import Path

from ublue_it.core.models.action import Receipt
from ublue_it.core.models.image import ImageReference
from ublue_it.core.models.selection import Selection
from ublue_it.core.models.workflow import FailureKind, WorkflowResult, WorkflowState
from ublue_it.core.persistence.audit import AuditEntry, AuditLedger


def _result() -> WorkflowResult:
    return WorkflowResult(
        operation_id="op-1",
        state=WorkflowState.FAILED,
        selection=Selection(desktop_env="kde", has_nvidia=True),
        release="39",
        reference=ImageReference(image_name="kinoite-nvidia", tag="39", nvidia=True),
        steps={
            "rebase": Receipt.success(adapter="shell", action_id="op-1:rebase"),
            "kargs": Receipt.failure(adapter="shell", action_id="op-1:kargs", error="x"),
        },
        failure=FailureKind.KARGS_FAILED,
        error="Image staged but kernel arguments not set: x",
        rebase_staged=True,
    )


class TestAuditEntry:
    def test_from_result(self):
        entry = AuditEntry.from_result(_result())
        assert entry.operation_id == "op-1"
        assert entry.desktop_env == "kde"
        assert entry.has_nvidia is True
        assert entry.status == "partial"
        assert entry.failure == "kargs_failed"
        assert entry.steps == {"rebase": "ok", "kargs": "failed"}
        assert entry.reference == "ostree-unverified-registry:ghcr.io/ublue-os/kinoite-nvidia:39"

    def test_without_selection(self):
        entry = AuditEntry.from_result(WorkflowResult(operation_id="op-2"))
        assert entry.desktop_env == ""
        assert entry.reference is None


class TestAuditLedger:
    def test_write_and_read(self, tmp_state_dir: Path):
        ledger = AuditLedger(tmp_state_dir / "audit.ndjson")
        assert ledger.append(AuditEntry(operation_id="op-1", status="ok"))
        assert ledger.append(AuditEntry(operation_id="op-2", status="failed"))
        entries = list(ledger.entries())
        assert [e.operation_id for e in entries] == ["op-1", "op-2"]

    def test_one_json_line_per_entry(self, tmp_state_dir: Path):
        path = tmp_state_dir / "audit.ndjson"
        AuditLedger(path).append(AuditEntry.from_result(_result()))
        lines = path.read_text().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["operation_id"] == "op-1"

    def test_creates_directory(self, tmp_path: Path):
        path = tmp_path / "a" / "b" / "audit.ndjson"
        assert AuditLedger(path).append(AuditEntry(operation_id="op-1"))
        assert path.is_file()

    def test_unwritable_returns_false(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        assert AuditLedger(blocker / "audit.ndjson").append(AuditEntry()) is False

    def test_missing_file(self, tmp_state_dir: Path):
        assert list(AuditLedger(tmp_state_dir / "none.ndjson").entries()) == []

    def test_skips_corrupt_lines(self, tmp_state_dir: Path):
        path = tmp_state_dir / "audit.ndjson"
        ledger = AuditLedger(path)
        ledger.append(AuditEntry(operation_id="op-1"))
        with path.open("a") as f:
            f.write("not json\n\n")
        ledger.append(AuditEntry(operation_id="op-2"))
        assert [e.operation_id for e in ledger.entries()] == ["op-1", "op-2"]

    def test_skips_undecodable_lines(self, tmp_state_dir: Path):
        path = tmp_state_dir / "audit.ndjson"
        ledger = AuditLedger(path)
        ledger.append(AuditEntry(operation_id="op-1"))
        with path.open("ab") as f:
            f.write(b"\xff\xfe garbage\n")
        ledger.append(AuditEntry(operation_id="op-2"))
        assert [e.operation_id for e in ledger.recent(5)] == ["op-1", "op-2"]

    def test_recent(self, tmp_state_dir: Path):
        ledger = AuditLedger(tmp_state_dir / "audit.ndjson")
        for i in range(5):
            ledger.append(AuditEntry(operation_id=f"op-{i}"))
        assert [e.operation_id for e in ledger.recent(2)] == ["op-3", "op-4"]
        assert ledger.recent(0) == []
