"""
Point cloud construction from co-registered phase and quality arrays.

Input formats:
- Phase field: 2D float array of unwrapped phase, indexed (row, column)
- Quality field: 2D float array of per-pixel confidence, same shape

Output formats:
- PointCloud with an (N, 4) array of [x, y, z, quality] rows, where x is the
  column index, y the row index and z the phase value
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np

from utils.logger_config import get_logger
from .errors import InputError, ShapeMismatchError

logger = get_logger(__name__)

X, Y, Z, QUALITY = range(4)


@dataclass
class PointCloud:
    """
    Filtered point list in row-major scan order (or draw order once mapped).

    After ResidualCalculator runs, the z column holds residuals instead of
    phase and is_residual is set. phase_min/phase_max always describe the
    raw phase of the retained points.
    """

    points: np.ndarray
    source_shape: Tuple[int, int]
    phase_min: Optional[float] = None
    phase_max: Optional[float] = None
    is_residual: bool = False

    def __len__(self) -> int:
        return self.points.shape[0]

    @property
    def x(self) -> np.ndarray:
        return self.points[:, X]

    @property
    def y(self) -> np.ndarray:
        return self.points[:, Y]

    @property
    def z(self) -> np.ndarray:
        return self.points[:, Z]

    @property
    def quality(self) -> np.ndarray:
        return self.points[:, QUALITY]

    def with_z(self, z: np.ndarray, is_residual: bool = True) -> "PointCloud":
        """Return a new cloud sharing x, y and quality but with a replaced z column."""
        points = self.points.copy()
        points[:, Z] = z
        return replace(self, points=points, is_residual=is_residual)

    def reordered(self, order: np.ndarray) -> "PointCloud":
        """Return a new cloud with points taken in the given index order."""
        return replace(self, points=self.points[order])

    def z_range(self) -> Optional[Tuple[float, float]]:
        """Min/max of the finite z values, None if there are none."""
        finite = self.z[np.isfinite(self.z)]
        if finite.size == 0:
            return None
        return float(finite.min()), float(finite.max())


class PointCloudBuilder:
    """
    Filters and flattens phase/quality arrays into a PointCloud.

    A point is retained only when its quality is strictly greater than the
    threshold.
    """

    def __init__(self, threshold: float = 0.0):
        self.threshold = float(threshold)

    def build(self, phase: np.ndarray, quality: np.ndarray) -> PointCloud:
        """
        Build the filtered point cloud.

        The scan runs row by row. Each row contributes a partial min/max of the
        retained phase values, folded into the running extrema, so the phase
        range is known when the scan ends without a second pass.

        Args:
            phase: Unwrapped phase field (H x W)
            quality: Quality field (H x W)

        Returns:
            PointCloud: Retained points in row-major order

        Raises:
            ShapeMismatchError: If the two fields differ in shape
            InputError: If the fields are not two-dimensional
        """
        phase = np.asarray(phase, dtype=np.float64)
        quality = np.asarray(quality, dtype=np.float64)

        if phase.shape != quality.shape:
            raise ShapeMismatchError(
                f"Phase shape {phase.shape} does not match quality shape {quality.shape}")
        if phase.ndim != 2:
            raise InputError(f"Phase and quality must be 2D arrays, got {phase.ndim} dimensions")

        height, width = phase.shape
        columns = np.arange(width, dtype=np.float64)
        rows = []
        phase_min = None
        phase_max = None

        for i in range(height):
            keep = quality[i] > self.threshold
            if not keep.any():
                continue

            row_phase = phase[i, keep]
            row_points = np.empty((row_phase.size, 4), dtype=np.float64)
            row_points[:, X] = columns[keep]
            row_points[:, Y] = i
            row_points[:, Z] = row_phase
            row_points[:, QUALITY] = quality[i, keep]
            rows.append(row_points)

            row_min, row_max = float(row_phase.min()), float(row_phase.max())
            phase_min = row_min if phase_min is None else min(phase_min, row_min)
            phase_max = row_max if phase_max is None else max(phase_max, row_max)

        points = np.concatenate(rows) if rows else np.empty((0, 4), dtype=np.float64)

        logger.info(f"Retained {points.shape[0]}/{height * width} points "
                    f"(quality > {self.threshold})")
        if phase_min is not None:
            logger.debug(f"Retained phase range: [{phase_min:.6g}, {phase_max:.6g}]")

        return PointCloud(points=points, source_shape=(height, width),
                          phase_min=phase_min, phase_max=phase_max)
