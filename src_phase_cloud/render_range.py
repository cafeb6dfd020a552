"""
Axis ranges for the 3D view.

An AxisRange keeps its (start, end) order; start > end means the axis is
drawn reversed, which is how mirroring is expressed.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from utils.logger_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AxisRange:
    start: float
    end: float

    @property
    def span(self) -> float:
        """Signed span, negative for a reversed axis."""
        return self.end - self.start

    @property
    def is_reversed(self) -> bool:
        return self.start > self.end

    def reversed(self) -> "AxisRange":
        return AxisRange(self.end, self.start)

    def widened(self) -> "AxisRange":
        """Expand a zero-width range so it can be drawn, keeping its direction."""
        if self.start != self.end:
            return self
        pad = 0.5 if self.start == 0 else abs(self.start) * 0.05
        return AxisRange(self.start - pad, self.end + pad)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.start, self.end)


@dataclass(frozen=True)
class RenderRange:
    x: AxisRange
    y: AxisRange
    z: AxisRange

    @classmethod
    def derive(
        cls,
        shape: Tuple[int, int],
        z_range: Optional[Tuple[float, float]],
        xlim: Optional[Tuple[float, float]] = None,
        ylim: Optional[Tuple[float, float]] = None,
        zlim: Optional[Tuple[float, float]] = None,
        mirror: bool = False
    ) -> "RenderRange":
        """
        Build ranges from explicit limits, falling back to the data.

        Args:
            shape: (height, width) of the source arrays
            z_range: Observed (min, max) of the residuals, None when empty
            xlim, ylim, zlim: Optional explicit (start, end) per axis
            mirror: Flip the x axis

        Returns:
            RenderRange
        """
        height, width = shape

        x = AxisRange(*xlim) if xlim is not None else AxisRange(0.0, float(width))
        if mirror:
            x = x.reversed()

        # image rows grow downward
        y = AxisRange(*ylim) if ylim is not None else AxisRange(float(height), 0.0)

        if zlim is not None:
            z = AxisRange(*zlim)
        elif z_range is not None:
            z = AxisRange(*z_range)
        else:
            logger.warning("No points to derive a z range from, using 0..1")
            z = AxisRange(0.0, 1.0)

        return cls(x.widened(), y.widened(), z.widened())
