"""
Selection — the user's choices for one run.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from ublue_it.core.models.image import DEFAULT_DESKTOP


class Selection(BaseModel):
    """Immutable input record for one rebase run.

    ``desktop_env`` and ``nvidia_vers`` are kept as plain strings and
    only normalized here; the resolver decides whether they are valid
    so that bad input surfaces as an InputValidationError.
    """

    model_config = ConfigDict(frozen=True)

    desktop_env: str = DEFAULT_DESKTOP.value
    has_nvidia: bool = False
    nvidia_vers: str = ""           # "" = latest
    auto_reboot: bool = False

    @field_validator("desktop_env", "nvidia_vers", mode="before")
    @classmethod
    def _normalize(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str):
            return value.strip().lower()
        return value
