import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from config.config import Config


def rational_surface(coefficients, height, width):
    """Exact z = (a*x + b*y + c) / (d*x + e*y + 1) sampled on a pixel grid."""
    a, b, c, d, e = coefficients
    y, x = np.mgrid[0:height, 0:width].astype(np.float64)
    return (a * x + b * y + c) / (d * x + e * y + 1.0)


@pytest.fixture
def surface_coefficients():
    return (0.5, -0.3, 2.0, 1e-3, -2e-3)


@pytest.fixture
def surface_phase(surface_coefficients):
    return rational_surface(surface_coefficients, 15, 20)


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        values = {
            "unwrapped_path": tmp_path / "phase.npy",
            "quality_path": tmp_path / "quality.npy",
            "output_path": tmp_path / "out.png",
        }
        values.update(overrides)
        return Config(overrides=values)
    return _make
