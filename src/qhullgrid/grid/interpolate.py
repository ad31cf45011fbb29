from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

import numpy as np

from ..errors import InputShapeError
from ..inputs import as_point_matrix, as_value_vector, broadcast3
from .locator import find_containing
from .tetra import TetrahedronMesh

logger = logging.getLogger(__name__)

DEFAULT_DIMENSION = 25


@dataclass(frozen=True)
class GridSpec:
    """
    Regular 3-D grid: cell (i, j, k) sits at origin + (i, j, k) * spacing.
    Cells that fall outside the triangulation get the missing value.
    """
    origin: Tuple[float, float, float]
    spacing: Tuple[float, float, float]
    dimension: Tuple[int, int, int] = (DEFAULT_DIMENSION,) * 3
    missing: float = 0.0

    def __post_init__(self):
        origin = tuple(float(x) for x in self.origin)
        spacing = tuple(float(x) for x in self.spacing)
        dimension = tuple(int(x) for x in self.dimension)
        if len(origin) != 3 or len(spacing) != 3 or len(dimension) != 3:
            raise InputShapeError("origin, spacing and dimension need 3 entries each")
        if any(s == 0.0 for s in spacing):
            raise InputShapeError(f"grid spacing must be non-zero, got {spacing}")
        if any(n < 1 for n in dimension):
            raise InputShapeError(f"grid dimension must be >= 1 per axis, got {dimension}")
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "spacing", spacing)
        object.__setattr__(self, "dimension", dimension)
        object.__setattr__(self, "missing", float(self.missing))

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.dimension

    def axis_coordinates(self, axis: int) -> np.ndarray:
        return self.origin[axis] + np.arange(self.dimension[axis]) * self.spacing[axis]

    @classmethod
    def for_points(
            cls,
            points: np.ndarray,
            *,
            dimension: Any = None,
            start: Any = None,
            delta: Any = None,
            missing: float = 0.0,
    ) -> "GridSpec":
        """
        Fill in unset grid parameters from the point cloud (3, np):
        dimension 25 per axis, start at the per-axis minimum, and a spacing
        of (max - start) / dimension.
        """
        P = np.asarray(points, dtype=np.float64)
        lo = P.min(axis=1)
        hi = P.max(axis=1)

        if dimension is None:
            dims = np.full(3, DEFAULT_DIMENSION, dtype=np.int64)
        else:
            d = broadcast3(dimension, "dimension")
            if np.any(d != np.round(d)):
                raise InputShapeError(f"grid dimension must be integral, got {d.tolist()}")
            dims = d.astype(np.int64)

        origin = lo if start is None else broadcast3(start, "start")
        spacing = (hi - origin) / dims if delta is None else broadcast3(delta, "delta")

        return cls(
            origin=tuple(origin),
            spacing=tuple(spacing),
            dimension=tuple(dims),
            missing=missing,
        )


def grid_interpolate(
        points: np.ndarray,
        values: Any,
        tetrahedra: Union[TetrahedronMesh, np.ndarray],
        grid: GridSpec,
) -> np.ndarray:
    """
    Linearly interpolate values given at scattered 3-D points onto a regular grid.

    points: (3, np); values: (np,); tetrahedra: (4, nT) Delaunay simplices
    or a prebuilt TetrahedronMesh.
    Returns a (nx, ny, nz) float64 array indexed [i, j, k].

    Cells are visited with axis 0 outermost and axis 2 innermost. The last
    tetrahedron hit is tried first for the next cell and carries over the
    whole traversal.
    """
    P = as_point_matrix(points)
    if P.shape[0] != 3:
        raise InputShapeError(f"gridding needs 3-D points, got {P.shape[0]}-D")
    f = as_value_vector(values, P.shape[1])
    mesh = tetrahedra if isinstance(tetrahedra, TetrahedronMesh) else TetrahedronMesh.from_indices(P, tetrahedra)

    lo = P.min(axis=1)
    hi = P.max(axis=1)
    xs, ys, zs = (grid.axis_coordinates(a) for a in range(3))

    out = np.full(grid.shape, grid.missing, dtype=np.float64)
    hint: Optional[int] = None
    n_outside_box = 0
    n_missing = 0
    n_fast = 0

    coord = np.empty(3, dtype=np.float64)
    for i, x in enumerate(xs):
        coord[0] = x
        for j, y in enumerate(ys):
            coord[1] = y
            for k, z in enumerate(zs):
                coord[2] = z

                if np.any(coord < lo) or np.any(coord > hi):
                    n_outside_box += 1
                    continue

                hit = find_containing(coord, mesh, hint)
                if hit is None:
                    n_missing += 1
                    continue

                t, w = hit
                if t == hint:
                    n_fast += 1
                out[i, j, k] = float(w @ f[mesh.vertex_ids[t]])
                hint = t

    logger.debug(
        "gridded %d cells over %d tetrahedra: %d outside point box, %d outside hull, %d hint hits",
        out.size, len(mesh), n_outside_box, n_missing, n_fast,
    )
    return out


def qgrid3(
        *args: Any,
        dimension: Any = None,
        start: Any = None,
        delta: Any = None,
        missing: float = 0.0,
) -> np.ndarray:
    """
    Grid scattered 3-D samples from their Delaunay tetrahedra.

    Accepts (points, values, tetrahedra) with points (3, np), or
    (x, y, z, values, tetrahedra) with separate coordinate arrays.
    Grid parameters left unset are derived from the points (see GridSpec.for_points).
    """
    if len(args) == 3:
        P = as_point_matrix(args[0])
    elif len(args) == 5:
        P = as_point_matrix(*args[:3])
    else:
        raise InputShapeError(f"Incorrect number of arguments: expected 3 or 5, got {len(args)}")
    values, tetrahedra = args[-2], args[-1]

    if P.shape[0] != 3:
        raise InputShapeError(f"gridding needs 3-D points, got {P.shape[0]}-D")

    grid = GridSpec.for_points(P, dimension=dimension, start=start, delta=delta, missing=missing)
    return grid_interpolate(P, values, tetrahedra, grid)
