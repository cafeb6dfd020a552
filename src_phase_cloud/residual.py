"""
Subtraction of the fitted rational surface from the phase point cloud.

The returned cloud keeps x, y and quality; its z column becomes the residual
(calibrated depth) rather than raw phase.
"""

import numpy as np

from utils.logger_config import get_logger
from .point_cloud import PointCloud
from .surface_fit import FitCoefficients

logger = get_logger(__name__)


class ResidualCalculator:
    """Evaluates the surface at every point and subtracts it."""

    def __init__(self, center: bool = False):
        self.center = center

    def apply(self, cloud: PointCloud, coefficients: FitCoefficients) -> PointCloud:
        """
        Replace z with z - fitted_z, optionally shifting to zero mean.

        The mean used for centering is taken from the residuals, after the
        surface has been subtracted. An empty cloud yields an empty cloud.

        Args:
            cloud: Phase point cloud
            coefficients: Surface parameters, fitted or supplied

        Returns:
            PointCloud: New cloud whose z column is the residual
        """
        if len(cloud) == 0:
            logger.info("Empty point cloud, nothing to subtract")
            return cloud.with_z(cloud.z)

        fitted = coefficients.evaluate(cloud.x, cloud.y)
        residual = cloud.z - fitted

        finite = np.isfinite(residual)
        if not finite.all():
            logger.warning(f"{np.count_nonzero(~finite)} points have a non-finite residual "
                           f"(NaN phase or zero surface denominator)")

        if self.center and finite.any():
            mean = float(residual[finite].mean())
            residual = residual - mean
            logger.info(f"Centered residual by subtracting mean {mean:.6g}")

        result = cloud.with_z(residual, is_residual=True)
        z_range = result.z_range()
        if z_range is not None:
            logger.info(f"Residual range: [{z_range[0]:.6g}, {z_range[1]:.6g}]")
        return result
