"""
Tests for the image reference resolver.
"""

import logging

import pytest

from ublue_it.core.errors import (
    InputValidationError,
    UnsupportedDriverVersion,
    UnsupportedEnvironment,
    VersionUnavailable,
)
from ublue_it.core.models.selection import Selection
from ublue_it.core.services.resolver import (
    normalize_driver_version,
    resolve,
    resolve_selection,
    supported_desktops,
    supported_driver_versions,
    validate_selection,
)

PREFIX = "ostree-unverified-registry:ghcr.io/ublue-os/"


class TestResolve:
    @pytest.mark.parametrize(
        "desktop, nvidia, vers, expected",
        [
            ("gnome", False, "", "silverblue-main:39"),
            ("kde", True, "525", "kinoite-nvidia:39-525"),
            ("bluefin", False, "", "bluefin:39"),
            ("bluefin", True, "", "bluefin-nvidia:39"),
            ("xfce", True, "470", "vauxite-nvidia:39-470"),
            ("mate", False, "", "mate-main:39"),
            ("lxqt", True, "current", "lxqt-nvidia:39-current"),
        ],
    )
    def test_table(self, desktop, nvidia, vers, expected):
        assert str(resolve(desktop, nvidia, vers, "39")) == PREFIX + expected

    def test_latest_alias_has_no_suffix(self):
        assert resolve("kde", True, "latest", "39").tag == "39"
        assert resolve("kde", True, None, "39").tag == "39"

    def test_case_insensitive(self):
        assert resolve("KDE", True, "Current", "39").image_name == "kinoite-nvidia"

    def test_nvidia_flag_recorded(self):
        assert resolve("kde", True, "", "39").nvidia is True
        assert resolve("kde", False, "", "39").nvidia is False

    def test_deterministic(self):
        assert resolve("xfce", True, "525", "40") == resolve("xfce", True, "525", "40")

    def test_unknown_desktop(self):
        with pytest.raises(UnsupportedEnvironment) as exc:
            resolve("cinnamon", False, "", "39")
        assert exc.value.desktop_env == "cinnamon"
        assert "Choices are" in str(exc.value)
        assert isinstance(exc.value, InputValidationError)

    def test_unknown_driver(self):
        with pytest.raises(UnsupportedDriverVersion) as exc:
            resolve("kde", True, "390", "39")
        assert "470" in str(exc.value)

    def test_empty_release(self):
        with pytest.raises(VersionUnavailable):
            resolve("gnome", False, "", "")

    @pytest.mark.parametrize("release", ["39 (Thirty Nine)", "f39", "39;reboot"])
    def test_malformed_release(self, release):
        with pytest.raises(VersionUnavailable, match="Unrecognised Fedora release"):
            resolve("gnome", False, "", release)

    def test_release_normalized(self):
        assert resolve("gnome", False, "", " Rawhide ").tag == "rawhide"

    def test_driver_without_nvidia_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            ref = resolve("gnome", False, "525", "39")
        assert ref.image_name == "silverblue-main"
        assert ref.tag == "39-525"
        assert "without --has-nvidia" in caplog.text


class TestHelpers:
    def test_supported_lists(self):
        assert supported_desktops() == ["bluefin", "gnome", "kde", "lxqt", "mate", "xfce"]
        assert supported_driver_versions() == ["470", "525", "current", "latest"]

    @pytest.mark.parametrize("value, expected", [("", ""), ("latest", ""), (" 525 ", "525")])
    def test_normalize_driver_version(self, value, expected):
        assert normalize_driver_version(value) == expected

    def test_validate_selection(self):
        validate_selection(Selection(desktop_env="kde", nvidia_vers="470"))
        with pytest.raises(UnsupportedEnvironment):
            validate_selection(Selection(desktop_env="budgie"))
        with pytest.raises(UnsupportedDriverVersion):
            validate_selection(Selection(nvidia_vers="999"))

    def test_resolve_selection(self):
        ref = resolve_selection(Selection(desktop_env="kde", has_nvidia=True), "40")
        assert str(ref) == PREFIX + "kinoite-nvidia:40"
