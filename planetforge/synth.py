"""Texture synthesis pipeline.

Turns a set of generation parameters into an RGBA pixel buffer: resolve
the seed, derive the noise offset, then render the image in row bands
(optionally on a joblib worker pool) through the fractal accumulator and
the color ramp.
"""

import logging
import math
from dataclasses import dataclass, field, fields, replace
from numbers import Integral, Real

import numpy as np
from joblib import Parallel, delayed, effective_n_jobs
from PIL import Image
from tqdm import tqdm

from .errors import GenerationCancelled, InvalidParameterError
from .gradient import ColorRamp, parse_stop, preset
from .noise import accumulate

logger = logging.getLogger(__name__)

# Fresh seeds are drawn from [SEED_MIN, SEED_MAX); 0 is reserved as "random"
SEED_MIN = 1
SEED_MAX = 100000

OFFSET_MODES = ("diagonal", "independent")

# Diagonal offsets wrap at this magnitude to keep sub-cell float precision
OFFSET_WRAP = 2**24


@dataclass(frozen=True)
class GenerationParameters:
    """Configuration for one texture synthesis run.

    Valid ranges:
        width, height: > 0 pixels.
        seed: any int; 0 picks a fresh random seed per run. Seeds are
            distinct within (-2**24, 2**24); beyond that the diagonal
            offset wraps, so seed and seed + 2**24 give the same texture.
        noise_scale: > 0. Larger values zoom in on the noise.
        octaves: >= 1.
        persistence: 0-1. Amplitude decay per octave.
        lacunarity: finite. Frequency growth per octave (usually > 1).
        offset_mode: "diagonal" shifts the noise window by (seed, seed);
            "independent" draws separate x/y offsets from the seed.
    """

    width: int = 1024
    height: int = 512
    seed: int = 0
    noise_scale: float = 15.0
    octaves: int = 5
    persistence: float = 0.5
    lacunarity: float = 2.0
    color_ramp: ColorRamp = field(default_factory=lambda: preset("planet"))
    offset_mode: str = "diagonal"

    def validate(self):
        """Raise InvalidParameterError naming the first bad field."""
        for name in ("width", "height"):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise InvalidParameterError(
                    name, f"must be a positive integer, got {value!r}")
        if not _is_int(self.seed):
            raise InvalidParameterError(
                "seed", f"must be an integer, got {self.seed!r}")
        if (not isinstance(self.noise_scale, Real)
                or not math.isfinite(self.noise_scale)
                or self.noise_scale <= 0):
            raise InvalidParameterError(
                "noise_scale", f"must be > 0, got {self.noise_scale!r}")
        if not _is_int(self.octaves) or self.octaves < 1:
            raise InvalidParameterError(
                "octaves", f"must be an integer >= 1, got {self.octaves!r}")
        if (not isinstance(self.persistence, Real)
                or not 0.0 <= self.persistence <= 1.0):
            raise InvalidParameterError(
                "persistence", f"must be in [0, 1], got {self.persistence!r}")
        if (not isinstance(self.lacunarity, Real)
                or not math.isfinite(self.lacunarity)):
            raise InvalidParameterError(
                "lacunarity", f"must be finite, got {self.lacunarity!r}")
        if not isinstance(self.color_ramp, ColorRamp):
            raise InvalidParameterError(
                "color_ramp",
                f"must be a ColorRamp, got {type(self.color_ramp).__name__}")
        if not self.color_ramp.stops:
            raise InvalidParameterError(
                "color_ramp", "needs at least one stop")
        if self.offset_mode not in OFFSET_MODES:
            raise InvalidParameterError(
                "offset_mode", f"must be one of {', '.join(OFFSET_MODES)}, "
                f"got {self.offset_mode!r}")

    @classmethod
    def from_dict(cls, data):
        """Build parameters from a plain mapping (e.g. a parsed JSON file).

        ``color_ramp`` may be a preset name, a list of ``[position, color]``
        pairs or ``"POSITION:COLOR"`` strings, or a mapping with ``stops``
        and ``mode`` keys. ``ramp_mode`` sets the mode for the first two
        forms.
        """
        data = dict(data)
        ramp_mode = data.pop("ramp_mode", "blend")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidParameterError(
                unknown[0], "unknown generation parameter")

        if "color_ramp" in data:
            data["color_ramp"] = _ramp_from_config(data["color_ramp"],
                                                   ramp_mode)
        elif ramp_mode != "blend":
            data["color_ramp"] = preset("planet", mode=ramp_mode)
        return cls(**data)


def _is_int(value):
    return isinstance(value, Integral) and not isinstance(value, bool)


def _ramp_from_config(value, mode):
    if isinstance(value, ColorRamp):
        return value
    if isinstance(value, str):
        return preset(value, mode=mode)
    if isinstance(value, dict):
        return _ramp_from_config(value.get("stops", []),
                                 value.get("mode", mode))
    pairs = [parse_stop(item) if isinstance(item, str) else item
             for item in value]
    return ColorRamp.from_pairs(pairs, mode=mode)


@dataclass
class SynthesisResult:
    """Output of :func:`synthesize`.

    Attributes:
        pixels: float64 array of shape (height, width, 4), RGBA in [0, 1].
            ``pixels[y, x]`` is pixel (x, y); row 0 is the top.
        seed: The seed actually used. Pass it back to reproduce the run.
        params: The input parameters with ``seed`` set to the resolved seed.
        offset: The (x, y) noise-space offset derived from the seed.
    """

    pixels: np.ndarray
    seed: int
    params: GenerationParameters
    offset: tuple

    def to_image(self):
        """Convert the buffer to a PIL Image in RGBA mode."""
        rgba = np.clip(np.rint(self.pixels * 255), 0, 255).astype(np.uint8)
        return Image.fromarray(rgba)


def resolve_seed(seed, rng=None):
    """Return ``seed``, or a fresh random seed if it is 0.

    Args:
        seed: Requested seed.
        rng: numpy RandomState used to draw a fresh seed.
    """
    if seed != 0:
        return int(seed)
    if rng is None:
        rng = np.random.RandomState()
    return int(rng.randint(SEED_MIN, SEED_MAX))


def noise_offset(seed, mode="diagonal"):
    """Noise-space (x, y) offset for a seed.

    ``"diagonal"`` uses the seed for both axes, so different seeds slide
    the sampled window along the diagonal. ``"independent"`` draws two
    unrelated offsets from a RandomState seeded with the seed.

    Diagonal offsets are reduced modulo ``OFFSET_WRAP`` (keeping the sign),
    so very large seeds still sample with fractional detail.
    """
    if mode == "diagonal":
        wrapped = abs(int(seed)) % OFFSET_WRAP
        if seed < 0:
            wrapped = -wrapped
        return float(wrapped), float(wrapped)
    if mode == "independent":
        rng = np.random.RandomState(seed % 2**32)
        off_x, off_y = rng.uniform(0, SEED_MAX, size=2)
        return float(off_x), float(off_y)
    raise InvalidParameterError(
        "offset_mode", f"must be one of {', '.join(OFFSET_MODES)}, "
        f"got {mode!r}")


def _render_band(params, offset, y0, y1):
    """Render rows [y0, y1) as a (y1 - y0, width, 4) float64 array."""
    ys, xs = np.mgrid[y0:y1, 0:params.width]
    normalized = accumulate(xs, ys, params.octaves, params.persistence,
                            params.lacunarity, params.noise_scale, offset)
    return params.color_ramp.evaluate(normalized)


def _check_cancel(cancel, done, total):
    if cancel is not None and cancel.is_set():
        logger.info(f"Synthesis cancelled after {done}/{total} bands")
        raise GenerationCancelled(
            f"cancelled after {done} of {total} bands")


def synthesize(params, workers=1, rows_per_band=64, backend="loky",
               progress=False, cancel=None, rng=None):
    """Render a texture from generation parameters.

    Rows are split into disjoint bands. Every band depends only on its own
    coordinates and the shared parameters, so the output is identical for
    any ``workers`` / ``rows_per_band`` combination.

    Args:
        params: GenerationParameters instance.
        workers: Number of joblib workers (1 renders in-process, -1 uses
            every CPU).
        rows_per_band: Rows rendered per task.
        backend: joblib backend used when ``workers != 1``.
        progress: Show a tqdm progress bar.
        cancel: Object with an ``is_set()`` method (e.g. threading.Event),
            polled between bands.
        rng: numpy RandomState used when a fresh seed is needed.

    Returns:
        SynthesisResult.

    Raises:
        InvalidParameterError: Before any rendering, if a parameter is out
            of range.
        GenerationCancelled: If ``cancel`` is set during rendering.
    """
    params.validate()
    if not _is_int(rows_per_band) or rows_per_band < 1:
        raise InvalidParameterError(
            "rows_per_band", f"must be >= 1, got {rows_per_band!r}")
    if not _is_int(workers) or workers == 0:
        raise InvalidParameterError(
            "workers", f"must be a non-zero integer, got {workers!r}")

    seed = resolve_seed(params.seed, rng)
    if params.seed == 0:
        logger.info(f"Seed 0 requested; using fresh seed {seed}")
    resolved = replace(params, seed=seed)
    offset = noise_offset(seed, params.offset_mode)

    logger.info(
        f"Synthesizing {params.width}x{params.height} texture "
        f"(Seed: {seed}, Scale: {params.noise_scale}, "
        f"Octaves: {params.octaves}, Persistence: {params.persistence}, "
        f"Lacunarity: {params.lacunarity})")

    bands = [(y0, min(y0 + rows_per_band, params.height))
             for y0 in range(0, params.height, rows_per_band)]
    pixels = np.empty((params.height, params.width, 4), dtype=np.float64)

    if workers == 1:
        for i, (y0, y1) in enumerate(tqdm(bands, desc="Synthesizing",
                                          leave=False, disable=not progress)):
            _check_cancel(cancel, i, len(bands))
            pixels[y0:y1] = _render_band(resolved, offset, y0, y1)
    else:
        with Parallel(n_jobs=workers, backend=backend) as parallel:
            # Cancellation is polled between batches of one band per worker
            batch_size = effective_n_jobs(workers)
            batches = [bands[i:i + batch_size]
                       for i in range(0, len(bands), batch_size)]
            logger.debug(f"Dispatching {len(bands)} bands in "
                         f"{len(batches)} batches to {workers} workers "
                         f"({backend})")
            done = 0
            for batch in tqdm(batches, desc="Synthesizing", leave=False,
                              disable=not progress):
                _check_cancel(cancel, done, len(bands))
                results = parallel(
                    delayed(_render_band)(resolved, offset, y0, y1)
                    for y0, y1 in batch
                )
                for (y0, y1), band in zip(batch, results):
                    pixels[y0:y1] = band
                done += len(batch)

    logger.info(f"Texture complete. Seed {seed} reproduces this output.")
    return SynthesisResult(pixels=pixels, seed=seed, params=resolved,
                           offset=offset)
