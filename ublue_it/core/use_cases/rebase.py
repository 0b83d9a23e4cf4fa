"""
Rebase use case — from CLI flags to an audited workflow run.

Loads config, merges it with the flags into a Selection, wires up the
adapter registry, runs the workflow and appends the outcome to the
audit ledger. Also hosts the read-only ``resolve`` use case, which stops
after resolving the image reference.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from ublue_it.adapters.mock import SimulatedHost
from ublue_it.adapters.registry import AdapterRegistry
from ublue_it.adapters.shell.command import ShellCommandAdapter
from ublue_it.core.config.loader import Config, ConfigError, load_config
from ublue_it.core.engine.workflow import ReleaseProvider, Workflow
from ublue_it.core.errors import InputValidationError, VersionUnavailable
from ublue_it.core.models.image import ImageReference
from ublue_it.core.models.selection import Selection
from ublue_it.core.models.workflow import WorkflowResult
from ublue_it.core.persistence.audit import AuditEntry, AuditLedger
from ublue_it.core.services.os_release import check_release, current_os_release
from ublue_it.core.services.resolver import resolve_selection, validate_selection

logger = logging.getLogger(__name__)


@dataclass
class SelectionFlags:
    """Selection flags as given on the command line (None = not given)."""

    desktop_env: str | None = None
    has_nvidia: bool | None = None
    nvidia_vers: str | None = None
    auto_reboot: bool | None = None


def build_selection(flags: SelectionFlags, config: Config) -> Selection:
    """Merge CLI flags over config defaults."""
    merged = config.defaults.model_dump()
    merged.update({k: v for k, v in asdict(flags).items() if v is not None})
    return Selection(**merged)


def release_provider_for(config: Config, release: str | None = None) -> ReleaseProvider:
    """Release source: an explicit override, else the configured release file."""
    if release is not None:
        return lambda: check_release(release)
    return lambda: current_os_release(config.release_file)


def default_registry(mock_mode: bool = False, capture_output: bool = False) -> AdapterRegistry:
    """Registry wired to the real host, or to a SimulatedHost in mock mode.

    ``capture_output`` keeps rpm-ostree output off the terminal (for --json).
    """
    registry = AdapterRegistry(
        mock_mode=mock_mode,
        mock_adapter=SimulatedHost() if mock_mode else None,
    )
    registry.register(ShellCommandAdapter(capture=capture_output))
    return registry


@dataclass
class RebaseRunResult:
    """Result of ``ublue-it rebase``."""

    workflow: WorkflowResult | None = None
    audit_path: Path | None = None
    audit_written: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.workflow is not None and self.workflow.ok

    def to_dict(self) -> dict:
        if self.workflow is None:
            return {"status": "failed", "error": self.error}
        result = self.workflow.to_dict()
        result["audit_path"] = str(self.audit_path) if self.audit_path else None
        result["audit_written"] = self.audit_written
        return result


def run_rebase(
    flags: SelectionFlags,
    config_path: Path | None = None,
    release: str | None = None,
    dry_run: bool = False,
    mock_mode: bool = False,
    capture_output: bool = False,
    registry: AdapterRegistry | None = None,
    release_provider: ReleaseProvider | None = None,
) -> RebaseRunResult:
    """Rebase the host according to ``flags``.

    Args:
        flags: Selection flags from the command line.
        config_path: Optional explicit config file.
        release: Override for the installed OS release.
        dry_run: Validate each host operation without running it.
        mock_mode: Run against a SimulatedHost instead of the real host.
        capture_output: Capture host command output instead of streaming it.
        registry: Optional pre-configured adapter registry.
        release_provider: Optional release source; takes precedence over
            ``release`` and the configured release file.

    Returns:
        RebaseRunResult with the workflow result.
    """
    result = RebaseRunResult()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    selection = build_selection(flags, config)
    logger.debug("Selection: %s", selection)

    if registry is None:
        registry = default_registry(mock_mode, capture_output)
    if release_provider is None:
        release_provider = release_provider_for(config, release)

    workflow = Workflow(registry, release_provider=release_provider, dry_run=dry_run)
    result.workflow = workflow.run(selection)
    result.error = result.workflow.error

    result.audit_path = config.audit_path
    result.audit_written = AuditLedger(config.audit_path).append(
        AuditEntry.from_result(result.workflow)
    )
    return result


@dataclass
class ResolveResult:
    """Result of ``ublue-it resolve``."""

    selection: Selection | None = None
    release: str | None = None
    reference: ImageReference | None = None
    error: str | None = None
    error_kind: str | None = None

    def to_dict(self) -> dict:
        return {
            "selection": self.selection.model_dump(mode="json") if self.selection else None,
            "release": self.release,
            "reference": str(self.reference) if self.reference else None,
            "image_name": self.reference.image_name if self.reference else None,
            "tag": self.reference.tag if self.reference else None,
            "error": self.error,
            "error_kind": self.error_kind,
        }


def resolve_image(
    flags: SelectionFlags,
    config_path: Path | None = None,
    release: str | None = None,
) -> ResolveResult:
    """Resolve the image reference a rebase would use, without running it."""
    result = ResolveResult()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        result.error_kind = "config"
        return result

    result.selection = build_selection(flags, config)
    try:
        validate_selection(result.selection)
        result.release = release_provider_for(config, release)()
        result.reference = resolve_selection(result.selection, result.release)
    except InputValidationError as e:
        result.error = str(e)
        result.error_kind = "input_validation"
    except VersionUnavailable as e:
        result.error = str(e)
        result.error_kind = "version_unavailable"

    return result
