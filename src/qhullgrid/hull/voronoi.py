from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..errors import InputShapeError
from .engine import QhullSession

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class VoronoiNormals:
    """
    Hyperplane of every Voronoi ridge.
    coefficients: (nd+1, nR) rows [n_1..n_nd, offset] with n·x + offset = 0,
                  n pointing from point_ids[0] towards point_ids[1]
    point_ids: (2, nR) generating points straddling each ridge
    """
    coefficients: np.ndarray
    point_ids: np.ndarray

    def __len__(self) -> int:
        return int(self.point_ids.shape[1])

    def row_lookup(self) -> Dict[Tuple[int, int], int]:
        """
        (pointA, pointB) -> first row with that straddling pair.
        """
        lookup: Dict[Tuple[int, int], int] = {}
        for k, (a, b) in enumerate(self.point_ids.T):
            lookup.setdefault((int(a), int(b)), k)
        return lookup


@dataclass(frozen=True)
class VoronoiRidge:
    """
    A decoded diagram row. vertices are 0-based Voronoi vertex ids; a negative
    value -(k+1) means the ridge is unbounded along the hyperplane in normals row k.
    """
    points: Tuple[int, int]
    vertices: Tuple[int, ...]

    @property
    def is_unbounded(self) -> bool:
        return any(v < 0 for v in self.vertices)


def voronoi_vertices(session: QhullSession) -> np.ndarray:
    """
    (nd, nV) Voronoi vertices: the center of every good facet of the dual Delaunay triangulation.
    """
    return np.ascontiguousarray(session.facet_centers().T)


def _plane_through(vertices: np.ndarray, nd: int) -> Optional[np.ndarray]:
    """
    Unit normal of the hyperplane through the finite ridge vertices (m, nd),
    or None when they do not span one. The largest component is made positive.
    """
    if len(vertices) < nd:
        return None
    centered = vertices - vertices.mean(axis=0)
    _, s, vt = np.linalg.svd(centered)
    if nd > 1 and s[nd - 2] <= 1e-12 * float(s[0]):
        return None
    n = vt[-1]
    return n if n[np.argmax(np.abs(n))] > 0 else -n


def voronoi_normals(session: QhullSession) -> VoronoiNormals:
    """
    One hyperplane per ridge, in engine ridge order.

    Generators that coincide have no bisector; their ridge gets the plane
    through its finite Voronoi vertices, or an all-zero row when those do not
    span a hyperplane.
    """
    P = session.points
    nd = session.nd
    rp = session.ridge_points()
    if len(rp) == 0:
        return VoronoiNormals(
            coefficients=np.zeros((nd + 1, 0), dtype=np.float64),
            point_ids=np.zeros((2, 0), dtype=np.int64),
        )

    a = P[rp[:, 0]]
    b = P[rp[:, 1]]
    d = b - a
    nn = np.linalg.norm(d, axis=1)
    coincident = nn <= 1e-12 * max(float(np.max(np.abs(P))), 1.0)

    n = np.zeros_like(d)
    n[~coincident] = d[~coincident] / nn[~coincident, None]
    offset = -np.sum(n * (0.5 * (a + b)), axis=1)

    if np.any(coincident):
        centers = session.facet_centers()
        ridge_vertices = session.ridge_vertices()
        n_flat = 0
        for k in np.flatnonzero(coincident):
            V = centers[[v for v in ridge_vertices[k] if v >= 0]]
            plane = _plane_through(V, nd)
            if plane is None:
                n_flat += 1
                continue
            n[k] = plane
            offset[k] = -float(plane @ V.mean(axis=0))
        logger.warning("%d Voronoi ridge(s) between coincident points, %d left without a hyperplane",
                       int(coincident.sum()), n_flat)

    return VoronoiNormals(
        coefficients=np.vstack([n.T, offset[None, :]]),
        point_ids=np.ascontiguousarray(rp.T),
    )


def parse_fv_rows(text: str) -> List[List[int]]:
    """
    Split whitespace-delimited integers into rows, each row being a count n
    followed by n integers. Rows are returned without their count.
    """
    tokens = text.split()
    for tok in tokens:
        if not _INT_RE.fullmatch(tok):
            raise InputShapeError(f"Voronoi diagram text has a non-integer token {tok!r}")
    values = [int(tok) for tok in tokens]

    rows: List[List[int]] = []
    pos = 0
    while pos < len(values):
        n = values[pos]
        if n < 0 or pos + 1 + n > len(values):
            raise InputShapeError(f"Voronoi diagram row at token {pos} is truncated (count {n})")
        rows.append(values[pos + 1:pos + 1 + n])
        pos += 1 + n
    return rows


def _resolve_row(row: List[int], lookup: Dict[Tuple[int, int], int]) -> VoronoiRidge:
    if len(row) < 3:
        raise InputShapeError(f"Voronoi diagram row {row} needs 2 points and at least 1 vertex")
    a, b = row[0], row[1]
    refs = list(row[2:])

    # only the first vertex at infinity is resolved to a normal
    for j, r in enumerate(refs):
        if r == 0:
            k = lookup.get((a, b))
            if k is not None:
                refs[j] = -(k + 1)
            break

    vertices = tuple(r if r < 0 else r - 1 for r in refs)
    return VoronoiRidge(points=(a, b), vertices=vertices)


def decode_voronoi_ridges(text: str, normals: VoronoiNormals) -> List[VoronoiRidge]:
    lookup = normals.row_lookup()
    ridges = [_resolve_row(row, lookup) for row in parse_fv_rows(text)]
    logger.debug("decoded %d Voronoi ridges (%d unbounded)",
                 len(ridges), sum(1 for r in ridges if r.is_unbounded))
    return ridges


def pack_voronoi_diagram(ridges: List[VoronoiRidge], nd: int) -> np.ndarray:
    """
    2-D: (4, nR) matrix of columns [pA, pB, vX, vY].
    N-D: flat array of rows [n, pA, pB, v1..vk] with n = 2 + k.
    """
    if nd == 2:
        out = np.zeros((4, len(ridges)), dtype=np.int64)
        for i, r in enumerate(ridges):
            if len(r.vertices) != 2:
                raise InputShapeError(f"2-D Voronoi ridge {i} has {len(r.vertices)} vertices, expected 2")
            out[:, i] = [r.points[0], r.points[1], r.vertices[0], r.vertices[1]]
        return out

    flat: List[int] = []
    for r in ridges:
        flat.append(2 + len(r.vertices))
        flat.extend(r.points)
        flat.extend(r.vertices)
    return np.asarray(flat, dtype=np.int64)


def decode_voronoi_diagram(text: str, normals: VoronoiNormals, nd: int) -> np.ndarray:
    """
    Decode Fv-style diagram text into the caller-facing diagram array.

    Vertex references are turned from 1-based to 0-based, except the
    unbounded ones resolved against the normals table, which are kept as
    their negative value.
    """
    return pack_voronoi_diagram(decode_voronoi_ridges(text, normals), nd)
