"""
Colour mapping and depth ordering of residual point clouds.

Colours come from a matplotlib colormap evaluated at t in [0, 1], where t is
produced by one of two normalization strategies:
- ClampedNormalizer: linear in a (zmin, zmax) window, clipped to [0, 1]
- PeriodicNormalizer: (z / period) mod 1, wrapping so that z and z + period
  share a colour (fringe-order ambiguity)

Depth ordering projects each point onto the viewing direction of the 3D
chart so that points can be drawn farthest first (painter's algorithm).
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import matplotlib
import numpy as np

from utils.logger_config import get_logger
from .errors import ConfigError
from .point_cloud import PointCloud
from .render_range import RenderRange

logger = get_logger(__name__)

SEQUENTIAL_COLORMAP = 'viridis'
CYCLIC_COLORMAP = 'hsv'
COLOR_MODES = ('clamped', 'periodic')

# matplotlib's default mplot3d box aspect
DEFAULT_BOX_ASPECT = (4.0, 4.0, 3.0)


class ColorRamp:
    """Continuous mapping from t in [0, 1] to RGB, backed by a matplotlib colormap."""

    def __init__(self, name: str = SEQUENTIAL_COLORMAP):
        try:
            self.cmap = matplotlib.colormaps[name]
        except KeyError:
            raise ConfigError(f"Unknown colormap: {name}")
        self.name = name

    @classmethod
    def sequential(cls) -> "ColorRamp":
        """Perceptually uniform ramp for clamped depth views."""
        return cls(SEQUENTIAL_COLORMAP)

    @classmethod
    def cyclic(cls) -> "ColorRamp":
        """Rainbow ramp whose ends meet, for periodic residual views."""
        return cls(CYCLIC_COLORMAP)

    def __call__(self, t: np.ndarray) -> np.ndarray:
        """Return an (N, 3) array of RGB floats in [0, 1]."""
        rgba = self.cmap(np.asarray(t, dtype=np.float64))
        return np.asarray(rgba, dtype=np.float64).reshape(-1, 4)[:, :3]


class ClampedNormalizer:
    def __init__(self, zmin: float, zmax: float):
        self.zmin = float(zmin)
        self.zmax = float(zmax)

    def normalize(self, z: np.ndarray) -> np.ndarray:
        z = np.asarray(z, dtype=np.float64)
        span = self.zmax - self.zmin
        if span == 0:
            return np.full(z.shape, 0.5)
        return np.clip((z - self.zmin) / span, 0.0, 1.0)


class PeriodicNormalizer:
    def __init__(self, period: float = 1.0):
        if not period > 0:
            raise ConfigError(f"Colour period must be positive, got {period}")
        self.period = float(period)

    def normalize(self, z: np.ndarray) -> np.ndarray:
        # np.mod takes the sign of the divisor, so negative z wraps into [0, 1)
        t = np.mod(np.asarray(z, dtype=np.float64) / self.period, 1.0)
        # tiny negative inputs round up to exactly 1.0
        return np.where(t >= 1.0, 0.0, t)


def make_normalizer(mode: str, z_range: Tuple[float, float], period: float = 1.0):
    """
    Select the normalization strategy configured for the colour axis.

    Args:
        mode: 'clamped' or 'periodic'
        z_range: (start, end) of the colour window used by the clamped mode
        period: Wrap length used by the periodic mode

    Returns:
        ClampedNormalizer or PeriodicNormalizer
    """
    if mode == 'clamped':
        return ClampedNormalizer(*z_range)
    if mode == 'periodic':
        return PeriodicNormalizer(period)
    raise ConfigError(f"Unknown colour mode '{mode}', expected one of {COLOR_MODES}")


def default_ramp(mode: str) -> ColorRamp:
    return ColorRamp.cyclic() if mode == 'periodic' else ColorRamp.sequential()


class ViewProjection:
    """
    Viewing direction of the 3D chart.

    Coordinates are normalized into the chart box using each axis' (start, end)
    limits, so reversed axes flip the box exactly as the chart does. The
    projected depth is the component along the direction towards the viewer;
    larger values are nearer.
    """

    def __init__(self, render_range: RenderRange, elevation: float = 30.0,
                 azimuth: float = -60.0, box_aspect: Tuple[float, float, float] = DEFAULT_BOX_ASPECT):
        self.render_range = render_range
        self.elevation = float(elevation)
        self.azimuth = float(azimuth)
        self.box_aspect = np.asarray(box_aspect, dtype=np.float64)

        elev, azim = np.deg2rad(self.elevation), np.deg2rad(self.azimuth)
        self.view_direction = np.array([
            np.cos(elev) * np.cos(azim),
            np.cos(elev) * np.sin(azim),
            np.sin(elev),
        ])

    def normalize(self, cloud: PointCloud) -> np.ndarray:
        """Point coordinates mapped into the unit chart box, (N, 3)."""
        columns = []
        for values, axis in ((cloud.x, self.render_range.x),
                             (cloud.y, self.render_range.y),
                             (cloud.z, self.render_range.z)):
            columns.append((values - axis.start) / axis.span)
        return np.column_stack(columns) if columns[0].size else np.empty((0, 3))

    def projected_depth(self, cloud: PointCloud) -> np.ndarray:
        return (self.normalize(cloud) * self.box_aspect) @ self.view_direction


@dataclass
class ColoredCloud:
    """Point cloud with one RGB colour per point, both in draw order."""

    cloud: PointCloud
    colors: np.ndarray
    depth: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self.cloud)


class DepthColorMapper:
    """Assigns colours to residual points and orders them for drawing."""

    def __init__(self, ramp: ColorRamp, normalizer):
        self.ramp = ramp
        self.normalizer = normalizer

    def colors(self, cloud: PointCloud) -> np.ndarray:
        """One RGB colour per point, parallel to the cloud."""
        if len(cloud) == 0:
            return np.empty((0, 3))
        return self.ramp(self.normalizer.normalize(cloud.z))

    @staticmethod
    def draw_order(depth: np.ndarray) -> np.ndarray:
        """Indices sorting projected depths farthest first."""
        # non-finite depth (undefined residual) goes first so it never occludes
        depth = np.where(np.isfinite(depth), depth, -np.inf)
        return np.argsort(depth, kind='stable')

    def apply(self, cloud: PointCloud, projection: Optional[ViewProjection] = None) -> ColoredCloud:
        """
        Colour the cloud and, given a projection, reorder it for drawing.

        Args:
            cloud: Residual point cloud
            projection: View used to compute the draw order (insertion order if None)

        Returns:
            ColoredCloud: Points, colours and depths in draw order
        """
        colors = self.colors(cloud)
        if projection is None:
            return ColoredCloud(cloud=cloud, colors=colors)

        depth = projection.projected_depth(cloud)
        order = self.draw_order(depth)
        logger.debug(f"Depth-sorted {len(cloud)} points for drawing")
        return ColoredCloud(cloud=cloud.reordered(order), colors=colors[order], depth=depth[order])


def pack_rgb(colors: np.ndarray) -> np.ndarray:
    """Pack float RGB rows into 0xRRGGBB integers."""
    # undefined channels pack as black
    colors = np.nan_to_num(np.asarray(colors, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0)
    rgb = np.clip(np.rint(colors * 255), 0, 255).astype(np.int64)
    if rgb.size == 0:
        return np.empty(0, dtype=np.int64)
    return (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]
