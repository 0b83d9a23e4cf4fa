"""
Hardware probe — does this host have an NVIDIA GPU?

Read-only: parses ``lspci -nn``. Used by ``ublue-it detect`` to suggest
``--has-nvidia``; the rebase workflow never guesses on its own.
"""

from __future__ import annotations

import logging
import re
import subprocess

logger = logging.getLogger(__name__)

_PCI_ID_RE = re.compile(r"\[([0-9a-f]{4}:[0-9a-f]{4})\]", re.IGNORECASE)

_VENDOR_IDS = {"10de": "nvidia", "1002": "amd", "8086": "intel"}


# ── lspci helpers ──────────────────────────────────────────

def _extract_gpu_model(line: str) -> str:
    """Extract GPU model from an lspci line."""
    # e.g. "01:00.0 VGA compatible controller [0300]: NVIDIA Corporation ... [10de:2684]"
    parts = line.split(":", 2)
    if len(parts) >= 3:
        return re.sub(r"\s*\[[0-9a-f:]+\]\s*(\(rev [0-9a-f]+\))?\s*$", "", parts[2].strip())
    return line.strip()


def _extract_pci_id(line: str) -> str | None:
    """Extract PCI vendor:device ID from an lspci line."""
    ids = _PCI_ID_RE.findall(line)
    return ids[-1].lower() if ids else None


def _vendor_of(line: str, pci_id: str | None) -> str:
    if pci_id:
        vendor = _VENDOR_IDS.get(pci_id.split(":", 1)[0])
        if vendor:
            return vendor
    upper = line.upper()
    if "NVIDIA" in upper:
        return "nvidia"
    if "AMD" in upper or "ATI" in upper:
        return "amd"
    if "INTEL" in upper:
        return "intel"
    return "unknown"


def parse_lspci_gpus(output: str) -> list[dict]:
    """List display controllers found in ``lspci -nn`` output."""
    gpus = []
    for line in output.splitlines():
        if "VGA" not in line and "3D controller" not in line and "Display controller" not in line:
            continue
        pci_id = _extract_pci_id(line)
        gpus.append({
            "vendor": _vendor_of(line, pci_id),
            "model": _extract_gpu_model(line),
            "pci_id": pci_id,
        })
    return gpus


def detect_gpus() -> dict:
    """Probe the host's GPUs.

    Returns::

        {
            "probed": True/False,       # False when lspci is unavailable
            "nvidia": True/False,
            "gpus": [{"vendor": "nvidia", "model": "...", "pci_id": "10de:2684"}],
        }
    """
    try:
        r = subprocess.run(
            ["lspci", "-nn"],
            capture_output=True, text=True, timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("lspci unavailable: %s", e)
        return {"probed": False, "nvidia": False, "gpus": []}

    gpus = parse_lspci_gpus(r.stdout)
    return {
        "probed": r.returncode == 0,
        "nvidia": any(g["vendor"] == "nvidia" for g in gpus),
        "gpus": gpus,
    }
