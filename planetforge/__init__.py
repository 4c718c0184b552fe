"""PlanetForge - Procedural planet textures from fractal Perlin noise."""

from .dice import Circumstance, Difficulty, EffectOutcome, RollResult, check, roll_check
from .errors import GenerationCancelled, InvalidParameterError, PlanetForgeError
from .gradient import ColorRamp, ColorStop, preset
from .noise import PerlinNoise, accumulate
from .synth import GenerationParameters, SynthesisResult, synthesize

__version__ = "0.1.0"
__all__ = [
    "generate", "synthesize", "GenerationParameters", "SynthesisResult",
    "ColorRamp", "ColorStop", "preset", "PerlinNoise", "accumulate",
    "roll_check", "check", "RollResult", "Difficulty", "Circumstance",
    "EffectOutcome", "PlanetForgeError", "InvalidParameterError",
    "GenerationCancelled",
]


def generate(seed=0, workers=1, progress=False, **kwargs):
    """Generate a planet texture.

    Args:
        seed: Seed for reproducible generation. 0 picks a fresh seed,
            reported back as ``result.seed``.
        workers: Number of parallel workers (see :func:`synthesize`).
        progress: Show a progress bar.
        **kwargs: Additional GenerationParameters fields (width, height,
            noise_scale, octaves, persistence, lacunarity, color_ramp,
            offset_mode). ``color_ramp`` may also be a preset name.

    Returns:
        SynthesisResult; call ``.to_image()`` for a PIL Image in RGBA mode.
    """
    if isinstance(kwargs.get("color_ramp"), str):
        kwargs["color_ramp"] = preset(kwargs["color_ramp"])
    params = GenerationParameters(seed=seed, **kwargs)
    return synthesize(params, workers=workers, progress=progress)
