"""
Phase cloud pipeline: turns an unwrapped phase map and its quality map into
a calibrated, colour-mapped 3D point-cloud image.

This package provides:
- Point cloud construction with quality filtering
- Rational surface fitting and residual computation
- Colour mapping and depth ordering
- Matplotlib and gnuplot render backends
"""

from .errors import (
    PhaseCloudError,
    InputError,
    ShapeMismatchError,
    ConfigError,
    InsufficientDataError,
    FitDivergenceError,
    RenderError
)
from .point_cloud import PointCloud, PointCloudBuilder
from .surface_fit import FitCoefficients, ComputedFit, SuppliedFit, SurfaceFitter, resolve_fit
from .residual import ResidualCalculator
from .render_range import AxisRange, RenderRange
from .color_mapping import (
    ColorRamp,
    ClampedNormalizer,
    PeriodicNormalizer,
    ViewProjection,
    DepthColorMapper,
    ColoredCloud,
    make_normalizer,
    pack_rgb
)
from .pipeline import PhaseCloudPipeline, PipelineResult

__all__ = [
    'PhaseCloudError',
    'InputError',
    'ShapeMismatchError',
    'ConfigError',
    'InsufficientDataError',
    'FitDivergenceError',
    'RenderError',
    'PointCloud',
    'PointCloudBuilder',
    'FitCoefficients',
    'ComputedFit',
    'SuppliedFit',
    'SurfaceFitter',
    'resolve_fit',
    'ResidualCalculator',
    'AxisRange',
    'RenderRange',
    'ColorRamp',
    'ClampedNormalizer',
    'PeriodicNormalizer',
    'ViewProjection',
    'DepthColorMapper',
    'ColoredCloud',
    'make_normalizer',
    'pack_rgb',
    'PhaseCloudPipeline',
    'PipelineResult'
]
