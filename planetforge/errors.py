"""Exception types raised by PlanetForge."""


class PlanetForgeError(Exception):
    """Base class for all PlanetForge errors."""


class InvalidParameterError(PlanetForgeError, ValueError):
    """A generation or roll parameter violates its documented range.

    Attributes:
        field: Name of the offending parameter (e.g. ``"octaves"``).
    """

    def __init__(self, field, message):
        super().__init__(f"{field}: {message}")
        self.field = field


class GenerationCancelled(PlanetForgeError):
    """Texture synthesis was cancelled before all bands were rendered."""
