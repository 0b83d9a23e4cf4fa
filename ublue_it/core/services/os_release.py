"""
OS release reader — which Fedora release is this host running?

Reads ``/etc/fedora-release`` (``Fedora release 39 (Thirty Nine)``)
and returns the release field. Anything that does not look like a
release is reported as VersionUnavailable rather than used as a tag.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from ublue_it.core.errors import VersionUnavailable

logger = logging.getLogger(__name__)

FEDORA_RELEASE_FILE = Path("/etc/fedora-release")

_RELEASE_RE = re.compile(r"^(\d+|rawhide)$", re.IGNORECASE)


def parse_fedora_release(text: str) -> str:
    """Extract the release number from fedora-release content.

    The release is the third whitespace-separated field of the first
    line.

    Raises:
        VersionUnavailable: Content is empty or malformed.
    """
    lines = text.strip().splitlines()
    if not lines:
        raise VersionUnavailable("fedora-release is empty")

    fields = lines[0].split()
    if len(fields) < 3:
        raise VersionUnavailable(f"Unrecognised fedora-release content: {lines[0]!r}")

    return check_release(fields[2])


def check_release(release: str) -> str:
    """Validate a release identifier (``39``, ``rawhide``) and normalize it.

    Raises:
        VersionUnavailable: Not a release identifier.
    """
    value = (release or "").strip()
    if not _RELEASE_RE.match(value):
        raise VersionUnavailable(f"Unrecognised Fedora release: {release!r}")
    return value.lower()


def current_os_release(path: Path | None = None) -> str:
    """Read the installed Fedora release from the host.

    Args:
        path: Release file to read (default: /etc/fedora-release).

    Raises:
        VersionUnavailable: The file is missing, unreadable or malformed.
    """
    path = path or FEDORA_RELEASE_FILE
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise VersionUnavailable(f"Cannot read {path}: {e}") from e

    release = parse_fedora_release(raw)
    logger.debug("Detected Fedora release %s from %s", release, path)
    return release
