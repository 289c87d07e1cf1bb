"""Exception hierarchy shared across the package."""

from __future__ import annotations


class ModelcatError(RuntimeError):
    """Base class for errors raised by modelcat."""
