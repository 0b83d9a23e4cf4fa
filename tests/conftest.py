"""
Shared test fixtures and configuration.
"""

import logging
from pathlib import Path

import pytest

from ublue_it.adapters.mock import MockAdapter, SimulatedHost
from ublue_it.adapters.registry import AdapterRegistry


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch):
    """Keep config lookup and the audit ledger inside tmp_path."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))
    for var in ("UBLUE_IT_CONFIG", "UBLUE_IT_LOG_LEVEL", "UBLUE_IT_LOG_FILE", "UBLUE_IT_LOG_FILE_LEVEL"):
        monkeypatch.delenv(var, raising=False)

    # CLI runs reconfigure the root logger; restore it afterwards.
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def tmp_state_dir(tmp_path: Path) -> Path:
    """Return a temporary directory for state files."""
    state_dir = tmp_path / "state"
    state_dir.mkdir()
    return state_dir


@pytest.fixture
def fedora_release(tmp_path: Path) -> Path:
    """A fedora-release file for Fedora 39."""
    path = tmp_path / "fedora-release"
    path.write_text("Fedora release 39 (Thirty Nine)\n")
    return path


@pytest.fixture
def mock_adapter() -> MockAdapter:
    return MockAdapter()


@pytest.fixture
def mock_registry(mock_adapter: MockAdapter) -> AdapterRegistry:
    """Registry routing every action to ``mock_adapter``."""
    return AdapterRegistry(mock_mode=True, mock_adapter=mock_adapter)


@pytest.fixture
def host() -> SimulatedHost:
    return SimulatedHost(booted="ostree-image-signed:docker://quay.io/fedora/fedora-silverblue:39")


@pytest.fixture
def host_registry(host: SimulatedHost) -> AdapterRegistry:
    """Registry routing every action to a SimulatedHost."""
    return AdapterRegistry(mock_mode=True, mock_adapter=host)
