from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .tetra import TetrahedronMesh, barycentric, is_inside


def find_containing(
        point: np.ndarray,
        mesh: TetrahedronMesh,
        hint: Optional[int] = None,
) -> Optional[Tuple[int, np.ndarray]]:
    """
    Locate point and return (tetrahedron index, barycentric weights), or None.

    The hint tetrahedron is tried first. Otherwise tetrahedra are scanned in
    input order, pruned by bounding box, and the first one with all weights
    >= 0 wins; a point on a shared face therefore goes to the lowest index.
    """
    p = np.asarray(point, dtype=np.float64)

    if hint is not None:
        w = barycentric(mesh.coords[hint], p)
        if is_inside(w):
            return int(hint), w

    for t in mesh.box_candidates(p):
        w = barycentric(mesh.coords[t], p)
        if is_inside(w):
            return int(t), w
    return None


def locate(point: np.ndarray, mesh: TetrahedronMesh, hint: Optional[int] = None) -> Optional[int]:
    hit = find_containing(point, mesh, hint)
    return None if hit is None else hit[0]
