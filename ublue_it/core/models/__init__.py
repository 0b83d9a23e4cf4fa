"""
Domain models — Pydantic types for ublue-it.

All models are re-exported here for convenient access:

    from ublue_it.core.models import Selection, ImageReference, Receipt, WorkflowResult
"""

from ublue_it.core.models.action import Action, Receipt
from ublue_it.core.models.image import (
    IMAGE_VARIANTS,
    DesktopEnvironment,
    ImageReference,
    ImageVariant,
)
from ublue_it.core.models.selection import Selection
from ublue_it.core.models.workflow import FailureKind, WorkflowResult, WorkflowState

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # image.py
    "DesktopEnvironment",
    "IMAGE_VARIANTS",
    "ImageReference",
    "ImageVariant",
    # selection.py
    "Selection",
    # workflow.py
    "FailureKind",
    "WorkflowResult",
    "WorkflowState",
]
