"""Coherent noise and fractal accumulation for planet textures."""

import logging

import numpy as np

from .errors import InvalidParameterError

logger = logging.getLogger(__name__)

# Axis and diagonal gradient directions, indexed by the low 3 bits of the hash
_GRADIENTS = np.array([
    [1.0, 1.0], [-1.0, 1.0], [1.0, -1.0], [-1.0, -1.0],
    [1.0, 0.0], [-1.0, 0.0], [0.0, 1.0], [0.0, -1.0],
])

# Cell hash constants (golden-ratio spreads + murmur3 64-bit finalizer)
_MIX_X = np.uint64(0x9E3779B97F4A7C15)
_MIX_Y = np.uint64(0xC2B2AE3D27D4EB4F)
_FMIX_1 = np.uint64(0xFF51AFD7ED558CCD)
_FMIX_2 = np.uint64(0xC4CEB9FE1A85EC53)
_SHIFT = np.uint64(33)
_LOW_BITS = np.uint64(7)

# Amplitude sums below this are treated as degenerate
_MIN_AMPLITUDE = 1e-12

# Every float64 at or beyond 2**53 is an integer, i.e. a lattice point
_MAX_EXACT = 2.0 ** 53
_LATTICE_VALUE = 0.5


def _fade(t):
    """Perlin fade function: 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6 - 15) + 10)


def _hash_cells(xi, yi, salt):
    """64-bit hash of integer cell coordinates. Never repeats in practice."""
    h = xi.astype(np.uint64) * _MIX_X ^ yi.astype(np.uint64) * _MIX_Y ^ salt
    h ^= h >> _SHIFT
    h *= _FMIX_1
    h ^= h >> _SHIFT
    h *= _FMIX_2
    h ^= h >> _SHIFT
    return h


def _grad(h, x, y):
    """Dot product of the hashed corner gradient with the offset vector."""
    g = _GRADIENTS[(h & _LOW_BITS).astype(np.intp)]
    return g[..., 0] * x + g[..., 1] * y


class PerlinNoise:
    """Classic 2D Perlin gradient noise sampled into [0, 1].

    Corner gradients come from a 64-bit hash of the integer cell
    coordinates salted by ``base``, so the field does not tile and a given
    ``base`` yields the same field in every process. Samples at integer
    lattice points are exactly 0.5.

    Args:
        base: Seed for the hash salt.
    """

    def __init__(self, base=0):
        self.base = base
        salt = np.random.RandomState(base).randint(0, 2**62, dtype=np.int64)
        self._salt = np.uint64(salt)

    def sample(self, x, y):
        """Sample the field at (x, y).

        Args:
            x: Scalar or array of x coordinates.
            y: Scalar or array of y coordinates (broadcast against x).

        Returns:
            float for scalar input, otherwise an array of values in [0, 1].
        """
        x, y = np.broadcast_arrays(np.asarray(x, dtype=np.float64),
                                   np.asarray(y, dtype=np.float64))
        scalar = x.ndim == 0
        # Integer hashing on 0-d values would warn on wraparound
        x = np.atleast_1d(x)
        y = np.atleast_1d(y)

        x0 = np.floor(x)
        y0 = np.floor(y)
        xf = x - x0
        yf = y - y0
        xi = x0.astype(np.int64)
        yi = y0.astype(np.int64)

        aa = _hash_cells(xi, yi, self._salt)
        ab = _hash_cells(xi, yi + 1, self._salt)
        ba = _hash_cells(xi + 1, yi, self._salt)
        bb = _hash_cells(xi + 1, yi + 1, self._salt)

        n00 = _grad(aa, xf, yf)
        n10 = _grad(ba, xf - 1, yf)
        n01 = _grad(ab, xf, yf - 1)
        n11 = _grad(bb, xf - 1, yf - 1)

        u = _fade(xf)
        v = _fade(yf)
        nx0 = n00 + u * (n10 - n00)
        nx1 = n01 + u * (n11 - n01)
        value = nx0 + v * (nx1 - nx0)

        # [-1, 1] -> [0, 1]
        result = np.clip((value + 1.0) * 0.5, 0.0, 1.0)
        if scalar:
            return float(result[0])
        return result

    def __repr__(self):
        return f"PerlinNoise(base={self.base})"


DEFAULT_NOISE = PerlinNoise()


def accumulate(x, y, octaves, persistence, lacunarity, noise_scale,
               offset=(0.0, 0.0), noise=None):
    """Fractal Brownian motion over Perlin noise, normalized to [0, 1].

    Each octave samples the field at
    ``(x / noise_scale * frequency + offset[0], y / noise_scale * frequency
    + offset[1])``. The weighted sum is divided by the total amplitude, so
    brightness does not depend on the octave count or persistence.

    Octaves whose coordinates reach 2**53 or overflow to infinity carry no
    fractional detail and contribute the lattice value 0.5, so very high
    octave counts or lacunarities stay finite.

    Args:
        x: Scalar or array of pixel x coordinates.
        y: Scalar or array of pixel y coordinates.
        octaves: Number of noise layers (>= 1).
        persistence: Amplitude multiplier per octave (0-1).
        lacunarity: Frequency multiplier per octave.
        noise_scale: Inverse zoom factor (> 0).
        offset: (x, y) shift applied to every sample coordinate.
        noise: Field with a ``sample(x, y)`` method; defaults to
            ``DEFAULT_NOISE``.

    Returns:
        float for scalar input, otherwise an array of values in [0, 1].

    Raises:
        InvalidParameterError: If ``octaves < 1`` or ``noise_scale <= 0``.
    """
    if octaves < 1:
        raise InvalidParameterError("octaves", f"must be >= 1, got {octaves}")
    if not noise_scale > 0:
        raise InvalidParameterError(
            "noise_scale", f"must be > 0, got {noise_scale}")
    if noise is None:
        noise = DEFAULT_NOISE

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    off_x, off_y = offset

    noise_value = np.zeros(np.broadcast(x, y).shape, dtype=np.float64)
    frequency = 1.0
    amplitude = 1.0
    max_amplitude = 0.0

    x_reach = float(np.abs(x).max(initial=0.0)) / noise_scale
    y_reach = float(np.abs(y).max(initial=0.0)) / noise_scale

    saturated = 0
    for _ in range(octaves):
        reach = max(x_reach * abs(frequency) + abs(off_x),
                    y_reach * abs(frequency) + abs(off_y))
        if reach < _MAX_EXACT:
            sample_x = x / noise_scale * frequency + off_x
            sample_y = y / noise_scale * frequency + off_y
            noise_value += noise.sample(sample_x, sample_y) * amplitude
        else:
            # Coordinates this far out (or non-finite) all land on lattice
            # points, which sample to 0.5
            saturated += 1
            noise_value += _LATTICE_VALUE * amplitude

        max_amplitude += amplitude
        amplitude *= persistence
        frequency *= lacunarity

    if saturated:
        logger.debug(f"{saturated} of {octaves} octaves past the exact "
                     f"coordinate range; used lattice value")

    if max_amplitude < _MIN_AMPLITUDE:
        logger.debug(f"Amplitude sum {max_amplitude:g} floored to "
                     f"{_MIN_AMPLITUDE:g}")
        max_amplitude = _MIN_AMPLITUDE

    result = np.clip(noise_value / max_amplitude, 0.0, 1.0)
    if result.ndim == 0:
        return float(result)
    return result
