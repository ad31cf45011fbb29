from .errors import (
    QhullGridError,
    InputShapeError,
    NonFiniteValueError,
    InsufficientPointsError,
    DegenerateSimplexError,
    UnsupportedOptionError,
    GeometryEngineError,
)
from .inputs import as_point_matrix
from .hull import HullMode, HullOptions, HullResult, compute_hull, split_connectivity
from .grid import GridSpec, TetrahedronMesh, grid_interpolate, locate, qgrid3

__all__ = [
    "QhullGridError",
    "InputShapeError",
    "NonFiniteValueError",
    "InsufficientPointsError",
    "DegenerateSimplexError",
    "UnsupportedOptionError",
    "GeometryEngineError",
    "as_point_matrix",
    "HullMode",
    "HullOptions",
    "HullResult",
    "compute_hull",
    "split_connectivity",
    "GridSpec",
    "TetrahedronMesh",
    "grid_interpolate",
    "locate",
    "qgrid3",
]
