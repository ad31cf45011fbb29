from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from ..errors import InputShapeError


def _triple(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
    return float(np.dot(a, np.cross(b, c)))


def barycentric(coords: np.ndarray, point: np.ndarray) -> np.ndarray:
    """
    Barycentric coordinates (va, vb, vc, vd) of point in the tetrahedron with
    vertex rows coords (4, 3).

    Each weight is the signed volume of the sub-tetrahedron with that vertex
    replaced by point, over the volume of the whole tetrahedron. The weights
    sum to 1; all are >= 0 iff point is inside or on the boundary.
    A flat tetrahedron gives non-finite weights.
    """
    a, b, c, d = np.asarray(coords, dtype=np.float64)
    p = np.asarray(point, dtype=np.float64)

    vap = p - a
    vbp = p - b
    vab = b - a
    vac = c - a
    vad = d - a
    vbc = c - b
    vbd = d - b

    w = np.array([
        _triple(vbp, vbd, vbc),
        _triple(vap, vac, vad),
        _triple(vap, vad, vab),
        _triple(vap, vab, vac),
    ])
    with np.errstate(divide="ignore", invalid="ignore"):
        return w / np.float64(_triple(vab, vac, vad))


def is_inside(weights: np.ndarray) -> bool:
    # NaN weights compare False, so flat tetrahedra never contain anything
    return bool(np.all(weights >= 0.0))


@dataclass(frozen=True)
class Tetrahedron:
    index: int
    vertex_ids: np.ndarray  # (4,)
    coords: np.ndarray      # (4,3)
    bbox_min: np.ndarray    # (3,)
    bbox_max: np.ndarray    # (3,)

    def box_contains(self, point: np.ndarray) -> bool:
        p = np.asarray(point, dtype=np.float64)
        return bool(np.all(p >= self.bbox_min) and np.all(p <= self.bbox_max))

    def volume(self) -> float:
        a, b, c, d = self.coords
        return _triple(b - a, c - a, d - a) / 6.0


@dataclass(frozen=True)
class TetrahedronMesh:
    """
    All tetrahedra of one gridding run, stored as flat arrays and addressed by index.

    vertex_ids: (nT, 4) input point ids
    coords: (nT, 4, 3) resolved vertex coordinates
    bbox_min, bbox_max: (nT, 3) axis-aligned bounds of each tetrahedron
    """
    vertex_ids: np.ndarray
    coords: np.ndarray
    bbox_min: np.ndarray
    bbox_max: np.ndarray

    @classmethod
    def from_indices(cls, points: np.ndarray, tetrahedra: Any) -> "TetrahedronMesh":
        """
        points: (3, np) coordinates; tetrahedra: (4, nT) point ids, as produced
        by a 3-D Delaunay compute_hull.
        """
        P = np.asarray(points, dtype=np.float64)
        if P.ndim != 2 or P.shape[0] != 3:
            raise InputShapeError(f"points must be (3, np), got shape {P.shape}")

        T = np.asarray(tetrahedra)
        if T.ndim != 2 or T.shape[0] != 4:
            raise InputShapeError(f"tetrahedra must be a (4, nT) index array, got shape {T.shape}")
        if T.size and T.dtype.kind not in "iu":
            raise InputShapeError("tetrahedra must hold integer point ids")
        T = T.astype(np.int64).T
        if T.size and (T.min() < 0 or T.max() >= P.shape[1]):
            raise InputShapeError(
                f"tetrahedron vertex ids must lie in [0, {P.shape[1]}), got "
                f"[{int(T.min())}, {int(T.max())}]"
            )

        C = P.T[T] if T.size else np.zeros((0, 4, 3), dtype=np.float64)
        return cls(
            vertex_ids=np.ascontiguousarray(T),
            coords=C,
            bbox_min=C.min(axis=1) if len(C) else np.zeros((0, 3)),
            bbox_max=C.max(axis=1) if len(C) else np.zeros((0, 3)),
        )

    def __len__(self) -> int:
        return int(self.vertex_ids.shape[0])

    def __getitem__(self, i: int) -> Tetrahedron:
        return Tetrahedron(
            index=int(i),
            vertex_ids=self.vertex_ids[i],
            coords=self.coords[i],
            bbox_min=self.bbox_min[i],
            bbox_max=self.bbox_max[i],
        )

    def box_candidates(self, point: np.ndarray) -> np.ndarray:
        """
        Indices, in input order, of the tetrahedra whose bounding box holds point.
        """
        p = np.asarray(point, dtype=np.float64)
        mask = np.all(self.bbox_min <= p, axis=1) & np.all(p <= self.bbox_max, axis=1)
        return np.flatnonzero(mask)
