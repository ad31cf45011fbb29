from .config import HullMode, HullOptions
from .engine import Facet, QhullSession, run_qhull
from .facets import OffsetBuffer, extract_bounds, extract_connectivity, extract_indices, split_connectivity
from .voronoi import (
    VoronoiNormals,
    VoronoiRidge,
    decode_voronoi_diagram,
    decode_voronoi_ridges,
    parse_fv_rows,
    voronoi_normals,
    voronoi_vertices,
)
from .computer import HullResult, compute_hull, run_hull

__all__ = [
    "HullMode",
    "HullOptions",
    "Facet",
    "QhullSession",
    "run_qhull",
    "OffsetBuffer",
    "extract_bounds",
    "extract_connectivity",
    "extract_indices",
    "split_connectivity",
    "VoronoiNormals",
    "VoronoiRidge",
    "decode_voronoi_diagram",
    "decode_voronoi_ridges",
    "parse_fv_rows",
    "voronoi_normals",
    "voronoi_vertices",
    "HullResult",
    "compute_hull",
    "run_hull",
]
