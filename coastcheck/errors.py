"""
Error taxonomy for coastline proximity queries.

Each error also derives from the builtin the rest of the codebase raises for
the same situation, so callers catching ValueError/RuntimeError keep working.
"""


class CoastProximityError(Exception):
    """Base class for every error raised by coastcheck."""


class ConfigurationError(CoastProximityError, RuntimeError):
    """Dataset missing, unreadable, empty, or without Polygon/MultiPolygon geometry."""


class InvalidInputError(CoastProximityError, ValueError):
    """Query point, threshold or mode outside the accepted domain."""


class NoDataError(CoastProximityError, LookupError):
    """The dataset produced zero boundary vertices for a query."""
