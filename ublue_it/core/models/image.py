"""
Image models — the variant table and the resolved image reference.

The variant table is the single source of truth for which desktop
environments map to which uBlue image. Every desktop gets ``-main``
without NVIDIA and ``-nvidia`` with it, except Bluefin, which is its
own product line and has no ``-main`` flavour.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

TRANSPORT = "ostree-unverified-registry"
REGISTRY = "ghcr.io"
NAMESPACE = "ublue-os"

MAIN_SUFFIX = "-main"
NVIDIA_SUFFIX = "-nvidia"


class DesktopEnvironment(str, Enum):
    """Supported desktop environments."""

    BLUEFIN = "bluefin"
    GNOME = "gnome"
    KDE = "kde"
    LXQT = "lxqt"
    MATE = "mate"
    XFCE = "xfce"


DEFAULT_DESKTOP = DesktopEnvironment.GNOME


class ImageVariant(BaseModel):
    """One row of the variant table."""

    model_config = ConfigDict(frozen=True)

    desktop: DesktopEnvironment
    base_image: str
    has_main_flavour: bool = True   # False = no suffix when NVIDIA is off

    def image_name(self, nvidia: bool) -> str:
        """Image name for this variant with the GPU profile applied."""
        if nvidia:
            return self.base_image + NVIDIA_SUFFIX
        if self.has_main_flavour:
            return self.base_image + MAIN_SUFFIX
        return self.base_image


IMAGE_VARIANTS: dict[DesktopEnvironment, ImageVariant] = {
    v.desktop: v
    for v in (
        ImageVariant(desktop=DesktopEnvironment.BLUEFIN, base_image="bluefin", has_main_flavour=False),
        ImageVariant(desktop=DesktopEnvironment.GNOME, base_image="silverblue"),
        ImageVariant(desktop=DesktopEnvironment.KDE, base_image="kinoite"),
        ImageVariant(desktop=DesktopEnvironment.LXQT, base_image="lxqt"),
        ImageVariant(desktop=DesktopEnvironment.MATE, base_image="mate"),
        ImageVariant(desktop=DesktopEnvironment.XFCE, base_image="vauxite"),
    )
}

SUPPORTED_IMAGE_NAMES: frozenset[str] = frozenset(
    v.image_name(nvidia) for v in IMAGE_VARIANTS.values() for nvidia in (False, True)
)


class ImageReference(BaseModel):
    """A fully-qualified, immutable OS image reference.

    Renders as ``ostree-unverified-registry:ghcr.io/ublue-os/<image>:<tag>``.
    """

    model_config = ConfigDict(frozen=True)

    image_name: str
    tag: str
    nvidia: bool = False
    transport: str = TRANSPORT
    registry: str = REGISTRY
    namespace: str = NAMESPACE

    @model_validator(mode="after")
    def _check_reference(self) -> ImageReference:
        if self.image_name not in SUPPORTED_IMAGE_NAMES:
            raise ValueError(f"Unknown image name: {self.image_name!r}")
        if not self.tag.strip():
            raise ValueError("Image tag must not be empty")
        return self

    @property
    def repository(self) -> str:
        """Registry host and namespace, e.g. ``ghcr.io/ublue-os``."""
        return f"{self.registry}/{self.namespace}"

    @property
    def pull_spec(self) -> str:
        """Reference without the ostree transport prefix."""
        return f"{self.repository}/{self.image_name}:{self.tag}"

    def __str__(self) -> str:
        return f"{self.transport}:{self.pull_spec}"
