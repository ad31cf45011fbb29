from __future__ import annotations


class QhullGridError(Exception):
    """
    Base class for every error raised by qhullgrid.
    """


class InputShapeError(QhullGridError, ValueError):
    """
    Coordinate arrays have the wrong rank, or disagree on length.
    """


class NonFiniteValueError(QhullGridError, ValueError):
    """
    A coordinate is NaN or infinite.
    """


class InsufficientPointsError(QhullGridError, ValueError):
    """
    Fewer points than needed to build the initial simplex.
    """

    def __init__(self, n_points: int, n_required: int):
        self.n_points = int(n_points)
        self.n_required = int(n_required)
        super().__init__(
            f"not enough points ({self.n_points}) to construct initial simplex "
            f"(need {self.n_required})"
        )


class DegenerateSimplexError(QhullGridError, ValueError):
    """
    Not enough points for a non-degenerate Delaunay simplex.
    """


class UnsupportedOptionError(QhullGridError, ValueError):
    """
    Incompatible or unimplemented option combination.
    """


class GeometryEngineError(QhullGridError, RuntimeError):
    """
    Failure reported by the Qhull engine; the engine error is chained as __cause__.
    """
