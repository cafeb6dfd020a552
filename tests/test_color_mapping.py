import numpy as np
import pytest

from src_phase_cloud.color_mapping import (
    ClampedNormalizer,
    ColorRamp,
    DepthColorMapper,
    PeriodicNormalizer,
    ViewProjection,
    make_normalizer,
    pack_rgb,
)
from src_phase_cloud.errors import ConfigError
from src_phase_cloud.point_cloud import PointCloud
from src_phase_cloud.render_range import AxisRange, RenderRange


def cloud_from(x, y, z):
    x, y, z = (np.asarray(v, dtype=float) for v in (x, y, z))
    points = np.column_stack((x, y, z, np.ones_like(x)))
    return PointCloud(points=points, source_shape=(10, 10), is_residual=True)


def random_cloud(n=200, seed=0):
    rng = np.random.default_rng(seed)
    return cloud_from(rng.uniform(0, 10, n), rng.uniform(0, 10, n), rng.normal(size=n))


def test_periodic_wraps_negative_values_into_unit_interval():
    t = PeriodicNormalizer(1.0).normalize(np.array([-0.25, 0.25, 1.5, -1.0]))

    np.testing.assert_allclose(t, [0.75, 0.25, 0.5, 0.0])
    assert np.all((t >= 0) & (t < 1))


def test_periodic_respects_period():
    t = PeriodicNormalizer(2.0).normalize(np.array([-0.5, 3.0]))

    np.testing.assert_allclose(t, [0.75, 0.5])


def test_periodic_never_returns_one():
    t = PeriodicNormalizer(1.0).normalize(np.array([-1e-20]))

    assert t[0] == 0.0


def test_values_one_period_apart_share_a_colour():
    mapper = DepthColorMapper(ColorRamp.cyclic(), PeriodicNormalizer(1.0))
    z = np.array([-0.25, 0.0, 0.25, 0.5, 0.75])

    base = mapper.colors(cloud_from(np.zeros(5), np.zeros(5), z))
    shifted = mapper.colors(cloud_from(np.zeros(5), np.zeros(5), z + 1.0))
    wrapped = mapper.colors(cloud_from(np.zeros(5), np.zeros(5), np.mod(z, 1.0)))

    np.testing.assert_array_equal(base, shifted)
    np.testing.assert_array_equal(base, wrapped)


def test_clamped_normalizer_clips():
    t = ClampedNormalizer(-1.0, 1.0).normalize(np.array([-5.0, -1.0, 0.0, 1.0, 5.0]))

    np.testing.assert_allclose(t, [0.0, 0.0, 0.5, 1.0, 1.0])


def test_clamped_normalizer_degenerate_window():
    t = ClampedNormalizer(2.0, 2.0).normalize(np.array([1.0, 2.0, 3.0]))

    np.testing.assert_allclose(t, 0.5)


def test_make_normalizer_selects_strategy():
    assert isinstance(make_normalizer("clamped", (0.0, 1.0)), ClampedNormalizer)
    assert isinstance(make_normalizer("periodic", (0.0, 1.0), 2.0), PeriodicNormalizer)
    with pytest.raises(ConfigError):
        make_normalizer("spiral", (0.0, 1.0))


def test_period_must_be_positive():
    with pytest.raises(ConfigError):
        PeriodicNormalizer(0.0)


def test_unknown_colormap():
    with pytest.raises(ConfigError):
        ColorRamp("definitely-not-a-colormap")


def test_ramp_returns_rgb_rows():
    colors = ColorRamp.sequential()(np.linspace(0, 1, 7))

    assert colors.shape == (7, 3)
    assert np.all((colors >= 0) & (colors <= 1))


def test_draw_order_is_farthest_first():
    cloud = random_cloud()
    render_range = RenderRange(AxisRange(0, 10), AxisRange(10, 0), AxisRange(-3, 3))
    projection = ViewProjection(render_range, elevation=30, azimuth=-60)

    order = DepthColorMapper.draw_order(projection.projected_depth(cloud))

    depth = projection.projected_depth(cloud)[order]
    assert np.all(np.diff(depth) >= 0)
    assert sorted(order.tolist()) == list(range(len(cloud)))


def test_top_down_view_orders_by_height():
    cloud = cloud_from([1, 2, 3, 4], [1, 2, 3, 4], [0.5, -1.0, 2.0, 0.0])
    render_range = RenderRange(AxisRange(0, 10), AxisRange(0, 10), AxisRange(-2, 2))
    top_down = ViewProjection(render_range, elevation=90, azimuth=0)

    order = DepthColorMapper.draw_order(top_down.projected_depth(cloud))

    np.testing.assert_array_equal(order, [1, 3, 0, 2])


def test_reversed_axis_flips_depth_order():
    cloud = cloud_from([1, 2, 3, 4], [1, 2, 3, 4], [0.5, -1.0, 2.0, 0.0])
    forward = RenderRange(AxisRange(0, 10), AxisRange(0, 10), AxisRange(-2, 2))
    flipped = RenderRange(AxisRange(0, 10), AxisRange(0, 10), AxisRange(2, -2))

    depth = ViewProjection(forward, elevation=90, azimuth=0).projected_depth(cloud)
    flipped_depth = ViewProjection(flipped, elevation=90, azimuth=0).projected_depth(cloud)

    order = DepthColorMapper.draw_order(depth)
    flipped_order = DepthColorMapper.draw_order(flipped_depth)

    np.testing.assert_array_equal(flipped_order, order[::-1])


def test_apply_keeps_colours_attached_to_points():
    cloud = random_cloud(seed=1)
    render_range = RenderRange(AxisRange(10, 0), AxisRange(10, 0), AxisRange(-3, 3))
    mapper = DepthColorMapper(ColorRamp.sequential(), ClampedNormalizer(-3, 3))

    colored = mapper.apply(cloud, ViewProjection(render_range))

    assert len(colored) == len(cloud)
    assert np.all(np.diff(colored.depth) >= 0)
    np.testing.assert_array_equal(colored.colors, mapper.colors(colored.cloud))


def test_apply_without_projection_keeps_insertion_order():
    cloud = random_cloud(n=20)
    mapper = DepthColorMapper(ColorRamp.sequential(), ClampedNormalizer(-3, 3))

    colored = mapper.apply(cloud)

    np.testing.assert_array_equal(colored.cloud.points, cloud.points)
    assert colored.depth is None


def test_empty_cloud_maps_to_no_colours():
    mapper = DepthColorMapper(ColorRamp.sequential(), ClampedNormalizer(0, 1))

    assert mapper.colors(cloud_from([], [], [])).shape == (0, 3)


def test_pack_rgb():
    packed = pack_rgb(np.array([[1.0, 0, 0], [0, 1.0, 0], [0, 0, 1.0], [1.0, 1.0, 1.0], [0, 0, 0]]))

    np.testing.assert_array_equal(packed, [0xFF0000, 0x00FF00, 0x0000FF, 0xFFFFFF, 0])


def test_undefined_depth_is_drawn_first():
    order = DepthColorMapper.draw_order(np.array([0.2, np.nan, -0.5, np.inf]))

    np.testing.assert_array_equal(order, [1, 3, 2, 0])


def test_pack_rgb_with_undefined_channels():
    packed = pack_rgb(np.array([[np.nan, 1.0, 0.0], [1.0, 0.0, 0.0]]))

    np.testing.assert_array_equal(packed, [0x00FF00, 0xFF0000])
