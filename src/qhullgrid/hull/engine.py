from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.spatial import ConvexHull, Delaunay, QhullError, Voronoi

from ..errors import GeometryEngineError
from .config import QHULL_OPTIONS, HullMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Facet:
    """
    One hull facet or Delaunay simplex.
    vertices are input point ids in engine order; good=False marks a degenerate facet.
    """
    index: int
    vertices: Tuple[int, ...]
    good: bool


def _is_degenerate(P: np.ndarray, rel_eps: float = 1e-10) -> bool:
    """
    True when the simplex spanned by the rows of P has (numerically) zero measure.
    """
    E = P[1:] - P[0]
    scale = float(np.max(np.linalg.norm(E, axis=1))) if len(E) else 0.0
    if scale < 1e-300:
        return True
    E = E / scale
    gram = float(np.linalg.det(E @ E.T))
    return gram <= rel_eps ** 2


@dataclass
class QhullSession:
    """
    Result of one Qhull run. Not shared between calls or threads.

    points: (np, nd) float64 in engine orientation (one row per point)
    facets: facets in engine order, including the ones that are not good
    voronoi: dual description, only in VORONOI mode
    """
    points: np.ndarray
    mode: HullMode
    facets: List[Facet]
    voronoi: Optional[Voronoi] = None
    _incident: Optional[Dict[int, List[int]]] = field(default=None, repr=False)

    @property
    def nd(self) -> int:
        return int(self.points.shape[1])

    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])

    def good_facets(self) -> List[Facet]:
        return [f for f in self.facets if f.good]

    def vertex_ids(self) -> List[int]:
        """
        Ids of every point used as a facet vertex, in first-seen order.
        """
        seen: Dict[int, None] = {}
        for f in self.facets:
            for v in f.vertices:
                seen.setdefault(v, None)
        return list(seen)

    def define_vertex_neighbor_facets(self) -> Dict[int, List[int]]:
        if self._incident is None:
            incident: Dict[int, List[int]] = {}
            for pos, f in enumerate(self.facets):
                for v in f.vertices:
                    incident.setdefault(v, []).append(pos)
            self._incident = incident
        return self._incident

    def incident_facets(self, vertex_id: int) -> List[Facet]:
        positions = self.define_vertex_neighbor_facets().get(int(vertex_id), [])
        return [self.facets[p] for p in positions]

    def _require_voronoi(self) -> Voronoi:
        if self.voronoi is None:
            raise GeometryEngineError(f"no Voronoi description in {self.mode.value} mode")
        return self.voronoi

    def facet_centers(self) -> np.ndarray:
        """
        Voronoi vertices: one center per good Delaunay facet, (nV, nd).
        """
        return np.asarray(self._require_voronoi().vertices, dtype=np.float64)

    def ridge_points(self) -> np.ndarray:
        """
        (nR, 2) input point ids straddling each Voronoi ridge.
        """
        return np.asarray(self._require_voronoi().ridge_points, dtype=np.int64)

    def ridge_vertices(self) -> List[List[int]]:
        """
        0-based Voronoi vertex ids of each ridge; -1 is the vertex at infinity.
        """
        return [list(map(int, rv)) for rv in self._require_voronoi().ridge_vertices]

    def voronoi_text(self) -> str:
        """
        Ridges in Qhull "Fv" layout: "n pA pB v1 .. vk" per line, where n = 2 + k,
        vertex references are 1-based and 0 is the vertex at infinity.
        """
        lines = []
        for (a, b), verts in zip(self.ridge_points(), self.ridge_vertices()):
            refs = [v + 1 for v in verts]
            row = [2 + len(refs), int(a), int(b)] + refs
            lines.append(" ".join(str(x) for x in row))
        return "\n".join(lines) + ("\n" if lines else "")


def run_qhull(points: np.ndarray, mode: HullMode, qhull_options: Optional[str] = None) -> QhullSession:
    """
    Run Qhull over points (np, nd) in the given mode.
    Engine failures are re-raised as GeometryEngineError.
    """
    P = np.ascontiguousarray(points, dtype=np.float64)
    opts = QHULL_OPTIONS[mode] if qhull_options is None else qhull_options

    vor = None
    try:
        if mode is HullMode.HULL:
            hull = ConvexHull(P, qhull_options=opts)
            simplices = np.asarray(hull.simplices, dtype=np.int64)
            engine_good = hull.good
        else:
            tri = Delaunay(P, qhull_options=opts)
            simplices = np.asarray(tri.simplices, dtype=np.int64)
            engine_good = None
            if mode is HullMode.VORONOI:
                vor = Voronoi(P, qhull_options=opts)
    except QhullError as exc:
        raise GeometryEngineError(f"qhull failed in {mode.value} mode: {exc}") from exc
    except ValueError as exc:
        raise GeometryEngineError(f"qhull rejected input in {mode.value} mode: {exc}") from exc

    facets: List[Facet] = []
    for i, simplex in enumerate(simplices):
        good = True if engine_good is None else bool(engine_good[i])
        if good and _is_degenerate(P[simplex]):
            good = False
        facets.append(Facet(index=i, vertices=tuple(int(v) for v in simplex), good=good))

    n_bad = sum(1 for f in facets if not f.good)
    logger.debug("qhull %s (%s): %d points, %d facets, %d not good",
                 mode.value, opts, len(P), len(facets), n_bad)

    return QhullSession(points=P, mode=mode, facets=facets, voronoi=vor)
