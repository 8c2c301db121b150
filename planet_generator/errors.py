# planet_generator/errors.py

"""
Error taxonomy for the planet generator.

Low-level operations raise these; the public entry points (regenerate,
rescatter, reduce_mesh_complexity, load_assets) catch them, log them and keep
the previous state so a single failure never takes the application down.
Degenerate requests such as a zero or negative scatter count are not errors
at all and simply produce nothing.
"""


class PlanetGeneratorError(Exception):
    """Base class for every recoverable planet generator error."""


class PreconditionViolation(PlanetGeneratorError):
    """An operation was handed input it cannot work on (e.g. an empty prefab set)."""


class OverReduction(PlanetGeneratorError):
    """A simplification target exceeds what the topology can safely lose."""

    def __init__(self, before: int, requested: int, removable: int):
        self.before = before
        self.requested = requested
        self.removable = removable
        super().__init__(
            f"Cannot remove {requested} of {before} vertices "
            f"(at most {removable} can be removed safely)."
        )


class AssetLoadFailure(PlanetGeneratorError):
    """A single asset failed to decode. Sibling assets are unaffected."""

    def __init__(self, name: str, path: str, reason: str = ""):
        self.name = name
        self.path = path
        message = f"Failed to load asset '{name}' from '{path}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
