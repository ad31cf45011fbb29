from .tetra import Tetrahedron, TetrahedronMesh, barycentric
from .locator import find_containing, locate
from .interpolate import GridSpec, grid_interpolate, qgrid3

__all__ = [
    "Tetrahedron",
    "TetrahedronMesh",
    "barycentric",
    "find_containing",
    "locate",
    "GridSpec",
    "grid_interpolate",
    "qgrid3",
]
