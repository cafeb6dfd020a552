"""
Rational surface fitting for projective phase distortion.

A flat reference target imaged through a pinhole camera produces phase that
follows z = (a*x + b*y + c) / (d*x + e*y + 1). Multiplying through by the
denominator gives a system that is linear in (a, b, c, d, e):

    a*x + b*y + c - d*(x*z) - e*(y*z) = z

which is solved in the least-squares sense with an SVD-based solver, giving
the minimum-norm solution when the system is rank deficient (e.g. a
perfectly flat input, where d and e are not identifiable).
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

import numpy as np
from scipy import linalg

from utils.logger_config import get_logger
from .errors import ConfigError, FitDivergenceError, InsufficientDataError
from .point_cloud import PointCloud

logger = get_logger(__name__)

MIN_POINTS = 5
COEFFICIENT_NAMES = ('a', 'b', 'c', 'd', 'e')


@dataclass(frozen=True)
class FitCoefficients:
    """Parameters (a, b, c, d, e) of the rational surface."""

    a: float
    b: float
    c: float
    d: float
    e: float

    @classmethod
    def from_sequence(cls, values: Iterable[float]) -> "FitCoefficients":
        """
        Build coefficients from exactly five real values.

        Raises:
            ConfigError: If the count is wrong or a value is not a real number
        """
        try:
            values = [float(v) for v in values]
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Fit coefficients must be real numbers: {e}")
        if len(values) != len(COEFFICIENT_NAMES):
            raise ConfigError(f"Expected 5 fit coefficients (a,b,c,d,e), got {len(values)}")
        return cls(*values)

    def as_tuple(self) -> Tuple[float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e)

    def evaluate(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Evaluate the rational model at (x, y)."""
        numerator = self.a * x + self.b * y + self.c
        denominator = self.d * x + self.e * y + 1.0
        with np.errstate(divide='ignore', invalid='ignore'):
            return numerator / denominator

    def report(self) -> List[str]:
        """Labelled coefficient lines for console output."""
        return [f"{name} = {value:.10g}" for name, value in zip(COEFFICIENT_NAMES, self.as_tuple())]


@dataclass(frozen=True)
class ComputedFit:
    """Coefficients are to be fitted from this cloud."""

    cloud: PointCloud


@dataclass(frozen=True)
class SuppliedFit:
    """Coefficients were given directly by the caller."""

    coefficients: FitCoefficients


FitSource = Union[ComputedFit, SuppliedFit]


class SurfaceFitter:
    """Fits the rational surface model to a point cloud by linear least squares."""

    def __init__(self, rcond: float = 1e-10):
        # Singular values below rcond * s_max are treated as zero
        self.rcond = rcond
        self.last_rank = None
        self.last_singular_values = None

    @staticmethod
    def design_matrix(cloud: PointCloud) -> np.ndarray:
        """Rows [x, y, 1, -x*z, -y*z] for every point."""
        x, y, z = cloud.x, cloud.y, cloud.z
        return np.column_stack((x, y, np.ones_like(x), -x * z, -y * z))

    def fit(self, cloud: PointCloud) -> FitCoefficients:
        """
        Solve for (a, b, c, d, e).

        Args:
            cloud: Point cloud with at least five points

        Returns:
            FitCoefficients: Minimum-norm least-squares solution

        Raises:
            InsufficientDataError: If fewer than five points are available
            FitDivergenceError: If the solve fails numerically
        """
        n_points = len(cloud)
        if n_points < MIN_POINTS:
            raise InsufficientDataError(
                f"Surface fit needs at least {MIN_POINTS} points, only {n_points} passed the quality filter")

        A = self.design_matrix(cloud)
        b = cloud.z

        if not (np.all(np.isfinite(A)) and np.all(np.isfinite(b))):
            raise FitDivergenceError("Design matrix contains non-finite values (NaN or inf in phase data)")

        try:
            solution, _, rank, singular_values = linalg.lstsq(
                A, b, cond=self.rcond, check_finite=False, lapack_driver='gelsd')
        except linalg.LinAlgError as e:
            raise FitDivergenceError(f"Least-squares solve did not converge: {e}")

        if not np.all(np.isfinite(solution)):
            raise FitDivergenceError("Least-squares solve produced non-finite coefficients")

        self.last_rank = int(rank)
        self.last_singular_values = singular_values

        if rank < A.shape[1]:
            logger.warning(f"Design matrix is rank deficient (rank {rank} of {A.shape[1]}), "
                           f"using minimum-norm solution")

        coefficients = FitCoefficients.from_sequence(solution)
        logger.info(f"Fitted rational surface to {n_points} points")
        return coefficients


def resolve_fit(source: FitSource, fitter: SurfaceFitter = None) -> FitCoefficients:
    """
    Resolve a fit source into concrete coefficients.

    Args:
        source: ComputedFit or SuppliedFit
        fitter: Fitter used for ComputedFit (a default fitter if omitted)

    Returns:
        FitCoefficients
    """
    if isinstance(source, SuppliedFit):
        logger.info("Using supplied fit coefficients")
        return source.coefficients
    if isinstance(source, ComputedFit):
        fitter = fitter or SurfaceFitter()
        return fitter.fit(source.cloud)
    raise TypeError(f"Unknown fit source: {type(source).__name__}")
