import numpy as np
import pytest

from src_phase_cloud.errors import InputError, ShapeMismatchError
from src_phase_cloud.point_cloud import PointCloudBuilder


def test_keeps_exactly_points_above_threshold():
    rng = np.random.default_rng(0)
    phase = rng.normal(size=(6, 7))
    quality = rng.uniform(size=(6, 7))

    cloud = PointCloudBuilder(threshold=0.4).build(phase, quality)

    rows, cols = np.nonzero(quality > 0.4)
    assert len(cloud) == rows.size
    np.testing.assert_array_equal(cloud.x, cols)
    np.testing.assert_array_equal(cloud.y, rows)
    np.testing.assert_array_equal(cloud.z, phase[rows, cols])
    np.testing.assert_array_equal(cloud.quality, quality[rows, cols])
    assert cloud.source_shape == (6, 7)


def test_threshold_is_strict():
    phase = np.arange(6, dtype=float).reshape(2, 3)
    quality = np.array([[0.5, 0.6, 0.5], [0.7, 0.5, 0.4]])

    cloud = PointCloudBuilder(threshold=0.5).build(phase, quality)

    assert len(cloud) == 2
    np.testing.assert_array_equal(cloud.z, [1.0, 3.0])


def test_row_major_order():
    phase = np.zeros((3, 3))
    quality = np.ones((3, 3))

    cloud = PointCloudBuilder().build(phase, quality)

    np.testing.assert_array_equal(cloud.y, [0, 0, 0, 1, 1, 1, 2, 2, 2])
    np.testing.assert_array_equal(cloud.x, [0, 1, 2, 0, 1, 2, 0, 1, 2])


def test_phase_extrema_cover_only_retained_points():
    phase = np.array([[100.0, 1.0], [-3.0, 2.0]])
    quality = np.array([[0.0, 1.0], [1.0, 1.0]])

    cloud = PointCloudBuilder(threshold=0.5).build(phase, quality)

    assert cloud.phase_min == -3.0
    assert cloud.phase_max == 2.0


def test_shape_mismatch():
    with pytest.raises(ShapeMismatchError):
        PointCloudBuilder().build(np.zeros((4, 4)), np.ones((4, 5)))


def test_shape_mismatch_is_input_error():
    with pytest.raises(InputError):
        PointCloudBuilder().build(np.zeros((4, 4)), np.ones((5, 4)))


def test_rejects_non_2d_input():
    with pytest.raises(InputError):
        PointCloudBuilder().build(np.zeros(4), np.ones(4))


def test_nothing_retained():
    cloud = PointCloudBuilder(threshold=0.0).build(np.ones((3, 3)), np.zeros((3, 3)))

    assert len(cloud) == 0
    assert cloud.points.shape == (0, 4)
    assert cloud.phase_min is None and cloud.phase_max is None
    assert cloud.z_range() is None
