from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

import numpy as np
import trimesh

from ..errors import DegenerateSimplexError, InsufficientPointsError, UnsupportedOptionError
from ..inputs import as_point_matrix
from .config import HullMode, HullOptions
from .engine import QhullSession, run_qhull
from .facets import extract_bounds, extract_connectivity, extract_indices
from . import voronoi as _voronoi

logger = logging.getLogger(__name__)


@dataclass
class HullResult:
    """
    Arrays returned by compute_hull. Optional members are None unless requested.

    - indices: (nd, nF) hull facets, or (nd+1, nF) Delaunay simplices
    - bounds: unique vertex ids of indices, in discovery order
    - connectivity: linear-offset neighbor buffer (see facets.OffsetBuffer)
    - voronoi_vertices: (nd, nV)
    - voronoi_normals: (nd+1, nR)
    - voronoi_diagram: (4, nR) in 2-D, flat row array otherwise
    """
    points: np.ndarray
    mode: HullMode
    indices: np.ndarray
    bounds: Optional[np.ndarray] = None
    connectivity: Optional[np.ndarray] = None
    voronoi_vertices: Optional[np.ndarray] = None
    voronoi_normals: Optional[np.ndarray] = None
    voronoi_diagram: Optional[np.ndarray] = None

    @property
    def nd(self) -> int:
        return int(self.points.shape[0])

    def facet_count(self) -> int:
        return int(self.indices.shape[1])

    def to_trimesh(self) -> trimesh.Trimesh:
        """
        Triangle surface of a 3-D convex hull.
        """
        if self.mode is not HullMode.HULL or self.nd != 3:
            raise UnsupportedOptionError("to_trimesh needs a 3-D result computed in hull mode")

        m = trimesh.Trimesh(
            vertices=self.points.T.copy(),
            faces=np.ascontiguousarray(self.indices.T),
            process=False,
        )
        m.remove_unreferenced_vertices()
        m.fix_normals()
        return m


def run_hull(points: np.ndarray, options: HullOptions) -> Tuple[QhullSession, int]:
    """
    Check the point count against the requested construction, then run Qhull.

    points: (nd, np) validated coordinate matrix
    Returns the engine session and the result dimensionality (nd, or nd+1 for
    Delaunay/Voronoi).
    """
    options = options.validated()
    nd, n = map(int, points.shape)

    if n <= nd:
        raise InsufficientPointsError(n, nd + 1)
    if options.is_delaunay and n <= nd + 1:
        raise DegenerateSimplexError(
            f"not enough points available ({n}) for a {options.mode.value} "
            f"construction in {nd}-D (need {nd + 2})"
        )

    session = run_qhull(points.T, options.mode)
    result_dim = nd + 1 if options.is_delaunay else nd
    return session, result_dim


def compute_hull(
        *coords: Any,
        mode: Union[HullMode, str] = HullMode.HULL,
        bounds: bool = False,
        connectivity: bool = False,
        voronoi_vertices: bool = False,
        voronoi_normals: bool = False,
        voronoi_diagram: bool = False,
        sphere: bool = False,
        options: Optional[HullOptions] = None,
) -> HullResult:
    """
    Convex hull, Delaunay triangulation or Voronoi diagram of a point set.

    coords: one (nd, np) matrix, or nd separate 1-D coordinate arrays.
    Asking for any Voronoi output switches to Voronoi mode.
    An explicit options struct replaces the keyword flags.
    """
    if options is None:
        options = HullOptions(
            mode=mode,
            bounds=bounds,
            connectivity=connectivity,
            voronoi_vertices=voronoi_vertices,
            voronoi_normals=voronoi_normals,
            voronoi_diagram=voronoi_diagram,
            sphere=sphere,
        )
    options = options.validated()

    P = as_point_matrix(*coords)
    session, result_dim = run_hull(P, options)

    res = HullResult(
        points=P,
        mode=options.mode,
        indices=extract_indices(session.facets, result_dim),
    )

    if options.bounds:
        res.bounds = extract_bounds(res.indices)

    if options.connectivity:
        res.connectivity = extract_connectivity(session)

    if options.mode is HullMode.VORONOI:
        if options.voronoi_vertices:
            res.voronoi_vertices = _voronoi.voronoi_vertices(session)

        if options.voronoi_normals or options.voronoi_diagram:
            normals = _voronoi.voronoi_normals(session)
            if options.voronoi_normals:
                res.voronoi_normals = normals.coefficients
            if options.voronoi_diagram:
                res.voronoi_diagram = _voronoi.decode_voronoi_diagram(session.voronoi_text(), normals, session.nd)

    logger.debug("compute_hull %s: %d-D, %d points -> %d facets",
                 options.mode.value, P.shape[0], P.shape[1], res.facet_count())
    return res
