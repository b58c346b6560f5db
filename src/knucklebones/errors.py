"""Error taxonomy for the knucklebones package.

All errors derive from ``ValueError`` so callers that only care about bad
input can catch one type.
"""


class KnucklebonesError(ValueError):
    pass


class IllegalMoveError(KnucklebonesError):
    """A move targets a column outside 0..2 or one that is already full."""


class ColumnFullError(IllegalMoveError):
    """A die was placed into a column already holding 3 dice."""


class InvalidPositionError(KnucklebonesError):
    """An externally supplied position or board cannot be searched."""
