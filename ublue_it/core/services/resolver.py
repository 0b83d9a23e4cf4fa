"""
Image reference resolver — pure mapping from a selection to an image.

    (desktop, nvidia, driver version, release) → ImageReference

No I/O, no subprocess. Invalid input raises a typed
InputValidationError; only the CLI decides what that means for the
process exit code.
"""

from __future__ import annotations

import logging

from ublue_it.core.errors import UnsupportedDriverVersion, UnsupportedEnvironment
from ublue_it.core.models.image import (
    IMAGE_VARIANTS,
    DesktopEnvironment,
    ImageReference,
    ImageVariant,
)
from ublue_it.core.models.selection import Selection
from ublue_it.core.services.os_release import check_release

logger = logging.getLogger(__name__)

# Driver series published as tag suffixes on the -nvidia images.
NVIDIA_DRIVER_VERSIONS = ("470", "525", "current")

# Aliases for "no suffix" (whatever the bare release tag ships).
NVIDIA_LATEST_ALIASES = ("latest", "")


def supported_desktops() -> list[str]:
    """Desktop environment names accepted by :func:`resolve`."""
    return [d.value for d in IMAGE_VARIANTS]


def supported_driver_versions() -> list[str]:
    """Driver version values accepted by :func:`resolve` ("" shown as latest)."""
    return list(NVIDIA_DRIVER_VERSIONS) + ["latest"]


def normalize_driver_version(nvidia_vers: str | None) -> str:
    """Validate a driver version hint and return its tag suffix.

    Returns ``""`` for latest. Never re-prompts: an unknown value
    raises UnsupportedDriverVersion immediately.
    """
    value = (nvidia_vers or "").strip().lower()
    if value in NVIDIA_LATEST_ALIASES:
        return ""
    if value in NVIDIA_DRIVER_VERSIONS:
        return value
    raise UnsupportedDriverVersion(nvidia_vers or "", supported_driver_versions())


def _variant_for(desktop_env: str) -> ImageVariant:
    key = (desktop_env or "").strip().lower()
    try:
        return IMAGE_VARIANTS[DesktopEnvironment(key)]
    except ValueError:
        raise UnsupportedEnvironment(desktop_env, supported_desktops()) from None


def validate_selection(selection: Selection) -> None:
    """Check a selection's desktop and driver version without a release.

    Lets callers reject bad input before reading anything from the host.

    Raises:
        UnsupportedEnvironment, UnsupportedDriverVersion
    """
    _variant_for(selection.desktop_env)
    normalize_driver_version(selection.nvidia_vers)


def resolve(
    desktop_env: str,
    has_nvidia: bool,
    nvidia_vers: str | None,
    os_release: str,
) -> ImageReference:
    """Resolve the image reference for a desktop environment.

    Args:
        desktop_env: Desktop environment name (case-insensitive).
        has_nvidia: Whether to use the NVIDIA image.
        nvidia_vers: Driver version hint; ``""``/``"latest"`` for no suffix.
        os_release: Installed Fedora release, e.g. ``"39"``.

    Returns:
        The resolved ImageReference.

    Raises:
        UnsupportedEnvironment: Desktop is not in the variant table.
        UnsupportedDriverVersion: Driver hint is not in the vocabulary.
        VersionUnavailable: Release is empty or not a release identifier.
    """
    variant = _variant_for(desktop_env)

    driver = normalize_driver_version(nvidia_vers)
    if driver and not has_nvidia:
        logger.warning(
            "NVIDIA driver version '%s' given without --has-nvidia; "
            "tag will still carry the driver suffix",
            driver,
        )

    release = check_release(os_release)

    tag = f"{release}-{driver}" if driver else release

    reference = ImageReference(
        image_name=variant.image_name(has_nvidia),
        tag=tag,
        nvidia=has_nvidia,
    )
    logger.debug("Resolved %s (nvidia=%s) → %s", variant.desktop.value, has_nvidia, reference)
    return reference


def resolve_selection(selection: Selection, os_release: str) -> ImageReference:
    """Resolve the image reference for a Selection."""
    return resolve(
        selection.desktop_env,
        selection.has_nvidia,
        selection.nvidia_vers,
        os_release,
    )
