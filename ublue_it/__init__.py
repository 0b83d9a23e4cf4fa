"""ublue-it — rebase Fedora Atomic hosts onto uBlue images."""

__version__ = "0.1.0"
