import math

import numpy as np
import pytest

import constants
from core.rain import RainField, smoothstep


@pytest.fixture
def rain():
    return RainField(count=500, seed=7)


def test_initial_field_shape(rain):
    assert rain.positions.shape == (500, 3)
    assert rain.velocities.shape == (500, 3)
    assert rain.sizes.shape == (500,)
    assert not rain.enabled
    assert rain.intensity == 0.0
    assert np.all((rain.positions[:, 1] >= 0) & (rain.positions[:, 1] <= rain.height))
    assert np.all(np.abs(rain.positions[:, 0]) <= rain.width / 2)
    assert np.all((rain.sizes >= 2) & (rain.sizes <= 5))


def test_set_intensity_scales_opacity_and_speed(rain):
    horizontal = rain.velocities[:, [0, 2]].copy()
    rain.set_intensity(1.0)
    assert rain.opacity == pytest.approx(0.6)
    assert rain.base_speed == pytest.approx(-20.0)
    vy = rain.velocities[:, 1]
    assert np.all(vy >= -22.5 - 1e-4) and np.all(vy <= -17.5 + 1e-4)
    np.testing.assert_array_equal(rain.velocities[:, [0, 2]], horizontal)

    rain.set_intensity(0.5)
    assert rain.opacity == pytest.approx(0.3)
    assert rain.base_speed == pytest.approx(-15.0)


def test_set_intensity_rerolls_vertical_jitter(rain):
    rain.set_intensity(0.5)
    before = rain.velocities[:, 1].copy()
    rain.set_intensity(0.5)
    assert not np.array_equal(before, rain.velocities[:, 1])


def test_intensity_is_clamped(rain):
    rain.set_intensity(3.0)
    assert rain.intensity == 1.0
    rain.set_intensity(-1.0)
    assert rain.intensity == 0.0
    assert rain.opacity == 0.0


def test_wind_vector_from_angle(rain):
    rain.set_wind(10.0, math.pi / 2)
    assert rain.wind[0] == pytest.approx(10.0)
    assert rain.wind[1] == 0.0
    assert rain.wind[2] == pytest.approx(0.0, abs=1e-5)
    rain.set_wind(4.0, 0.0)
    assert tuple(rain.wind) == pytest.approx((0.0, 0.0, 4.0))


def test_wind_is_applied_when_sampling(rain):
    rain.enable()
    rain.advance(1.0)
    still = rain.apparent_positions()
    rain.set_wind(5.0, math.pi / 2)
    windy = rain.apparent_positions()
    fallen = rain.positions[:, 1] + rain.velocities[:, 1] * rain.time
    # Drops not recycled and away from the volume edge shift along x only
    moved = (fallen >= constants.RAIN_GROUND_THRESHOLD) & (np.abs(still[:, 0]) < rain.width / 2 - 10)
    assert moved.any()
    np.testing.assert_allclose(windy[moved, 0] - still[moved, 0], 5.0, atol=1e-3)
    np.testing.assert_allclose(windy[:, 1], still[:, 1])


def test_advance_is_noop_while_disabled(rain):
    rain.advance(5.0)
    assert rain.time == 0.0
    rain.enable()
    rain.advance(5.0)
    assert rain.time == pytest.approx(5.0)
    rain.disable()
    rain.advance(5.0)
    assert rain.time == pytest.approx(5.0)
    assert not rain.visible


def test_accumulator_reset_regenerates_positions(rain):
    rain.enable()
    before = rain.positions.copy()
    rain.advance(600)
    assert rain.regenerations == 0
    rain.advance(600)
    assert rain.time == 0.0
    assert rain.regenerations == 1
    assert not np.array_equal(before, rain.positions)
    assert np.all((rain.positions[:, 1] >= 0) & (rain.positions[:, 1] <= rain.height))


def test_drops_recycle_inside_the_volume(rain):
    rain.enable()
    rain.set_intensity(1.0)
    for _ in range(40):
        rain.advance(2.5)
        heights = rain.apparent_positions()[:, 1]
        assert np.all(heights >= constants.RAIN_GROUND_THRESHOLD)
        assert np.all(heights <= rain.height)


def test_recycled_drop_falls_again_from_its_base_column():
    rain = RainField(count=4, seed=1)
    rain.positions[:] = (0.0, 500.0, 0.0)
    rain.velocities[:] = (0.5, -10.0, 0.0)
    rain.enable()
    rain.advance(60.0)
    pos = rain.apparent_positions()
    # 600 units fallen from 500: 510 to reach the ground, then 90 from the top
    np.testing.assert_allclose(pos[:, 1], 910.0, atol=1e-2)
    np.testing.assert_allclose(pos[:, 0], 4.5, atol=1e-3)
    np.testing.assert_allclose(pos[:, 2], 0.0)


@pytest.mark.slow
def test_sustained_storm_keeps_raining_inside_the_volume():
    rain = RainField(2000, seed=3)
    rain.enable()
    rain.set_intensity(1.0)
    rain.set_wind(15.0, 0.7)
    for _ in range(1800):
        rain.advance(1 / 30)
    alphas = rain.drop_alphas()
    assert (alphas > 0.01).mean() > 0.5
    pos = rain.apparent_positions()
    assert np.all(np.abs(pos[:, 0]) <= rain.width / 2)
    assert np.all(np.abs(pos[:, 2]) <= rain.depth / 2)
    assert np.all(pos[:, 1] >= constants.RAIN_GROUND_THRESHOLD)
    assert np.all(pos[:, 1] <= rain.height)
    # Heights spread over the whole volume instead of bunching at the top
    assert np.percentile(pos[:, 1], 25) < rain.height / 2


def test_fade_factors_taper_at_boundaries(rain):
    heights = np.array([-10.0, 0.0, 100.0, 500.0, 900.0, 950.0, 1000.0])
    fade = rain.fade_factors(heights)
    assert fade[0] == 0.0
    assert 0.0 < fade[1] < 1.0
    assert fade[2] == pytest.approx(1.0)
    assert fade[3] == pytest.approx(1.0)
    assert fade[4] == pytest.approx(1.0)
    assert 0.0 < fade[5] < 1.0
    assert fade[6] == 0.0


def test_drop_alphas_follow_opacity(rain):
    assert not rain.drop_alphas().any()
    rain.enable()
    rain.set_intensity(1.0)
    alphas = rain.drop_alphas()
    assert alphas.max() <= 0.6 + 1e-6
    assert alphas.max() > 0


def test_smoothstep_edges():
    values = smoothstep(0.0, 1.0, np.array([-1.0, 0.0, 0.5, 1.0, 2.0]))
    np.testing.assert_allclose(values, [0.0, 0.0, 0.5, 1.0, 1.0])
