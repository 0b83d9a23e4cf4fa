"""
Error taxonomy for ublue-it.

Only input and environment problems are raised as exceptions.
Failures of the external primitives (rpm-ostree, systemctl) are
never raised: adapters capture them in a Receipt and the workflow
engine maps them to a FailureKind.
"""

from __future__ import annotations


class UblueItError(Exception):
    """Base class for all ublue-it errors."""


class InputValidationError(UblueItError):
    """The user's selection cannot be turned into an image reference."""


class UnsupportedEnvironment(InputValidationError):
    """Desktop environment is not in the image table."""

    def __init__(self, desktop_env: str, supported: list[str]):
        self.desktop_env = desktop_env
        self.supported = supported
        super().__init__(
            f"Unsupported desktop environment '{desktop_env}'. "
            f"Choices are: {', '.join(supported)}."
        )


class UnsupportedDriverVersion(InputValidationError):
    """NVIDIA driver version is not in the known vocabulary."""

    def __init__(self, nvidia_vers: str, supported: list[str]):
        self.nvidia_vers = nvidia_vers
        self.supported = supported
        super().__init__(
            f"Unsupported NVIDIA driver version '{nvidia_vers}'. "
            f"Choices are: {', '.join(supported)}."
        )


class VersionUnavailable(UblueItError):
    """The installed OS release could not be determined."""
