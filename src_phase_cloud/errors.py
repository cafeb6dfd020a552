"""
Error taxonomy for the phase cloud pipeline.

Every failure aborts the run. The stage that raised is recorded on the
exception so the command line can report where the pipeline stopped.
"""

from typing import Optional


class PhaseCloudError(Exception):
    """Base class for all pipeline failures."""

    stage = "pipeline"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class InputError(PhaseCloudError):
    """Missing file, unreadable array format or malformed input array."""

    stage = "input"


class ShapeMismatchError(InputError):
    """Phase and quality arrays are not co-registered."""


class ConfigError(PhaseCloudError, ValueError):
    """Malformed configuration or command-line value."""

    stage = "config"


class InsufficientDataError(PhaseCloudError):
    """Too few points survived the quality filter to fit the surface."""

    stage = "fit"


class FitDivergenceError(PhaseCloudError):
    """The least-squares solve failed numerically."""

    stage = "fit"


class RenderError(PhaseCloudError):
    """Output could not be written or the external renderer failed."""

    stage = "render"
