"""Tests for the Perlin noise field and fractal accumulation."""

import numpy as np
import pytest


def test_lattice_points_are_half():
    from planetforge.noise import PerlinNoise
    noise = PerlinNoise()
    for x, y in [(0, 0), (3, 7), (-5, 12), (42, 42), (100000, 100000)]:
        assert noise.sample(x, y) == 0.5


def test_sample_range():
    from planetforge.noise import PerlinNoise
    noise = PerlinNoise()
    rng = np.random.RandomState(3)
    xs = rng.uniform(-500, 100500, size=5000)
    ys = rng.uniform(-500, 100500, size=5000)
    values = noise.sample(xs, ys)
    assert values.shape == (5000,)
    assert values.min() >= 0.0
    assert values.max() <= 1.0
    # Coherent noise spreads around the midpoint, not a constant
    assert values.std() > 0.03


def test_scalar_and_array_agree():
    from planetforge.noise import PerlinNoise
    noise = PerlinNoise()
    xs = np.array([0.3, 12.75, -4.2])
    ys = np.array([1.9, 0.1, 8.6])
    arr = noise.sample(xs, ys)
    for i in range(3):
        value = noise.sample(xs[i], ys[i])
        assert isinstance(value, float)
        assert value == arr[i]


def test_same_base_is_reproducible():
    from planetforge.noise import PerlinNoise
    xs, ys = np.meshgrid(np.linspace(0, 9, 40), np.linspace(0, 9, 40))
    np.testing.assert_array_equal(PerlinNoise(7).sample(xs, ys),
                                  PerlinNoise(7).sample(xs, ys))


def test_different_base_differs():
    from planetforge.noise import PerlinNoise
    xs, ys = np.meshgrid(np.linspace(0, 9, 40), np.linspace(0, 9, 40))
    assert not np.array_equal(PerlinNoise(1).sample(xs, ys),
                              PerlinNoise(2).sample(xs, ys))


def test_continuity():
    """Small steps in input give small steps in output."""
    from planetforge.noise import PerlinNoise
    noise = PerlinNoise()
    xs = np.linspace(40.0, 48.0, 2001)
    values = noise.sample(xs, np.full_like(xs, 42.37))
    assert np.abs(np.diff(values)).max() < 0.02


@pytest.mark.parametrize("octaves", [1, 2, 5, 10])
@pytest.mark.parametrize("persistence", [0.0, 0.3, 0.5, 1.0])
def test_accumulate_in_unit_range(octaves, persistence):
    from planetforge.noise import accumulate
    ys, xs = np.mgrid[0:32, 0:32]
    values = accumulate(xs, ys, octaves, persistence, 2.0, 7.5,
                        offset=(1234.0, 1234.0))
    assert values.shape == (32, 32)
    assert values.min() >= 0.0
    assert values.max() <= 1.0


def test_single_octave_is_raw_sample():
    from planetforge.noise import DEFAULT_NOISE, accumulate
    for x, y in [(0, 0), (3, 1), (17, 29)]:
        expected = DEFAULT_NOISE.sample(x / 15.0 * 1.0 + 99.0,
                                        y / 15.0 * 1.0 + 99.0)
        assert accumulate(x, y, 1, 0.5, 2.0, 15.0, (99.0, 99.0)) == expected


def test_zero_persistence_is_single_octave():
    from planetforge.noise import accumulate
    ys, xs = np.mgrid[0:16, 0:16]
    one = accumulate(xs, ys, 1, 0.0, 2.0, 5.0, (10.0, 10.0))
    many = accumulate(xs, ys, 6, 0.0, 2.0, 5.0, (10.0, 10.0))
    np.testing.assert_array_equal(one, many)


def test_octaves_change_detail():
    from planetforge.noise import accumulate
    ys, xs = np.mgrid[0:16, 0:16]
    one = accumulate(xs, ys, 1, 0.5, 2.0, 5.0, (10.0, 10.0))
    four = accumulate(xs, ys, 4, 0.5, 2.0, 5.0, (10.0, 10.0))
    assert not np.array_equal(one, four)


def test_custom_noise_field():
    from planetforge.noise import accumulate

    class Constant:
        def sample(self, x, y):
            return np.full(np.broadcast(x, y).shape, 0.25)

    ys, xs = np.mgrid[0:4, 0:4]
    values = accumulate(xs, ys, 5, 0.7, 2.0, 3.0, noise=Constant())
    np.testing.assert_allclose(values, 0.25)


def test_accumulate_rejects_zero_octaves():
    from planetforge.errors import InvalidParameterError
    from planetforge.noise import accumulate
    with pytest.raises(InvalidParameterError) as exc:
        accumulate(1.0, 2.0, 0, 0.5, 2.0, 10.0)
    assert exc.value.field == "octaves"


@pytest.mark.parametrize("scale", [0.0, -3.0])
def test_accumulate_rejects_bad_scale(scale):
    from planetforge.errors import InvalidParameterError
    from planetforge.noise import accumulate
    with pytest.raises(InvalidParameterError) as exc:
        accumulate(1.0, 2.0, 3, 0.5, 2.0, scale)
    assert exc.value.field == "noise_scale"


def test_field_does_not_tile():
    from planetforge.noise import PerlinNoise
    noise = PerlinNoise()
    xs, ys = np.meshgrid(np.linspace(0.1, 9.9, 30), np.linspace(0.1, 9.9, 30))
    base = noise.sample(xs, ys)
    for shift in (256, 65536, 100000):
        assert not np.allclose(base, noise.sample(xs + shift, ys + shift))


@pytest.mark.parametrize("octaves, lacunarity", [
    (1100, 2.0),
    (3, 1e200),
    (40, -1e20),
])
def test_accumulate_survives_frequency_overflow(octaves, lacunarity):
    import warnings
    from planetforge.noise import accumulate
    ys, xs = np.mgrid[0:8, 0:8]
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        values = accumulate(xs, ys, octaves, 0.5, lacunarity, 10.0,
                            (42.0, 42.0))
    assert np.isfinite(values).all()
    assert values.min() >= 0.0
    assert values.max() <= 1.0


def test_overflowing_octaves_contribute_lattice_value():
    from planetforge.noise import accumulate
    ys, xs = np.mgrid[0:8, 0:8]
    first = accumulate(xs, ys, 1, 1.0, 1e300, 10.0, (3.0, 5.0))
    both = accumulate(xs, ys, 2, 1.0, 1e300, 10.0, (3.0, 5.0))
    np.testing.assert_allclose(both, (first + 0.5) / 2.0)
