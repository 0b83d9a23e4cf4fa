"""
Tests for the rebase and resolve use cases.
"""

from pathlib import Path

from ublue_it.adapters.mock import MockAdapter, SimulatedHost
from ublue_it.adapters.registry import AdapterRegistry
from ublue_it.core.config.loader import Config, RebaseDefaults
from ublue_it.core.persistence.audit import AuditLedger
from ublue_it.core.use_cases.rebase import (
    SelectionFlags,
    build_selection,
    default_registry,
    resolve_image,
    run_rebase,
)


class TestBuildSelection:
    def test_config_defaults(self):
        config = Config(defaults=RebaseDefaults(desktop_env="kde", has_nvidia=True))
        s = build_selection(SelectionFlags(), config)
        assert (s.desktop_env, s.has_nvidia) == ("kde", True)

    def test_flags_win(self):
        config = Config(defaults=RebaseDefaults(desktop_env="kde", has_nvidia=True, auto_reboot=True))
        s = build_selection(SelectionFlags(desktop_env="xfce", has_nvidia=False), config)
        assert (s.desktop_env, s.has_nvidia, s.auto_reboot) == ("xfce", False, True)


class TestDefaultRegistry:
    def test_real_host(self):
        registry = default_registry()
        assert not registry.mock_mode
        assert registry.list_adapters() == ["shell"]

    def test_mock(self):
        registry = default_registry(mock_mode=True)
        assert registry.mock_mode
        assert isinstance(registry.mock_adapter, SimulatedHost)


class TestRunRebase:
    def test_success_writes_audit(self, tmp_state_dir: Path):
        config = tmp_state_dir / "config.yml"
        config.write_text(f"state_dir: {tmp_state_dir}\n")
        mock = MockAdapter()
        result = run_rebase(
            SelectionFlags(desktop_env="kde"),
            config_path=config,
            registry=AdapterRegistry(mock_mode=True, mock_adapter=mock),
            release_provider=lambda: "39",
        )
        assert result.ok
        assert result.audit_written
        assert result.audit_path == tmp_state_dir / "audit.ndjson"
        entries = list(AuditLedger(result.audit_path).entries())
        assert entries[0].reference.endswith("kinoite-main:39")
        assert mock.called_steps == ["rebase"]

    def test_failure_is_audited(self):
        mock = MockAdapter()
        mock.set_failure("rebase", error="network unreachable")
        result = run_rebase(
            SelectionFlags(),
            release="39",
            registry=AdapterRegistry(mock_mode=True, mock_adapter=mock),
        )
        assert not result.ok
        assert "network unreachable" in result.error
        assert AuditLedger(result.audit_path).recent(1)[0].status == "failed"

    def test_config_error(self, tmp_path: Path):
        result = run_rebase(SelectionFlags(), config_path=tmp_path / "missing.yml")
        assert result.workflow is None
        assert not result.ok
        assert result.to_dict() == {"status": "failed", "error": result.error}

    def test_mock_mode_uses_simulated_host(self):
        result = run_rebase(SelectionFlags(auto_reboot=True), release="40", mock_mode=True)
        assert result.ok
        assert result.workflow.mock


class TestResolveImage:
    def test_ok(self):
        result = resolve_image(SelectionFlags(desktop_env="lxqt", has_nvidia=True), release="39")
        assert str(result.reference).endswith("lxqt-nvidia:39")
        assert result.to_dict()["error"] is None

    def test_bad_release(self):
        result = resolve_image(SelectionFlags(), release="thirty-nine")
        assert result.error_kind == "version_unavailable"

    def test_config_error(self, tmp_path: Path):
        result = resolve_image(SelectionFlags(), config_path=tmp_path / "missing.yml")
        assert result.error_kind == "config"
