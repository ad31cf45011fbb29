from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence

import numpy as np

from ..errors import InputShapeError
from .engine import Facet, QhullSession

logger = logging.getLogger(__name__)


def extract_indices(facets: Iterable[Facet], result_dim: int) -> np.ndarray:
    """
    Stack the vertex ids of every good facet column-wise into a (result_dim, n_good) matrix.
    Facets that are not good are skipped and counted.
    """
    facets = list(facets)
    res = np.zeros((int(result_dim), len(facets)), dtype=np.int64)

    col = 0
    bad = 0
    for f in facets:
        if not f.good:
            bad += 1
            continue
        if len(f.vertices) != result_dim:
            raise InputShapeError(
                f"facet {f.index} has {len(f.vertices)} vertices, expected {result_dim}"
            )
        res[:, col] = f.vertices
        col += 1

    if bad > 0:
        logger.warning("skipped %d degenerate facet(s) out of %d", bad, len(facets))
        res = res[:, : len(facets) - bad]
    return res


def extract_bounds(indices: np.ndarray) -> np.ndarray:
    """
    Unique vertex ids of an index matrix, in the order they are first met
    walking facet by facet.
    """
    ids = np.asarray(indices, dtype=np.int64).T.ravel()
    seen = dict.fromkeys(int(i) for i in ids)
    return np.fromiter(seen, dtype=np.int64, count=len(seen))


class OffsetBuffer:
    """
    Builds the linear-offset integer buffer used for connectivity:

        [off_0, .., off_{n-1}, total, items of slot 0, items of slot 1, ...]

    off_i is where slot i's items start; slot i's items are
    buf[buf[i]:buf[i + 1]]. A slot with no items gets the offset where its
    items would have started, so its range is empty.
    """

    def __init__(self, n_slots: int):
        if n_slots < 0:
            raise InputShapeError("n_slots must be >= 0")
        self._slots: List[List[int]] = [[] for _ in range(int(n_slots))]

    def __len__(self) -> int:
        return len(self._slots) + 1 + sum(len(s) for s in self._slots)

    @property
    def n_slots(self) -> int:
        return len(self._slots)

    def append(self, slot: int, value: int) -> None:
        self._slots[slot].append(int(value))

    def extend(self, slot: int, values: Iterable[int]) -> None:
        for v in values:
            self.append(slot, v)

    def to_array(self) -> np.ndarray:
        n = len(self._slots)
        total = len(self)
        buf = np.zeros(total, dtype=np.int64)
        buf[n] = total

        write = n + 1
        for i, items in enumerate(self._slots):
            buf[i] = write
            buf[write:write + len(items)] = items
            write += len(items)
        return buf

    @staticmethod
    def split(buf: Sequence[int]) -> List[np.ndarray]:
        """
        Inverse of to_array(). Raises InputShapeError when offsets are not self-consistent.
        """
        b = np.asarray(buf, dtype=np.int64).ravel()
        if b.size == 0:
            raise InputShapeError("empty offset buffer")
        n = int(b[0]) - 1
        if n < 0 or n >= b.size:
            raise InputShapeError(f"bad first offset {int(b[0])} for buffer of length {b.size}")
        if int(b[n]) != b.size:
            raise InputShapeError(f"trailer {int(b[n])} does not match buffer length {b.size}")

        bounds = b[: n + 1]
        if np.any(np.diff(bounds) < 0):
            raise InputShapeError("offsets are not monotone")
        return [b[bounds[i]:bounds[i + 1]].copy() for i in range(n)]


def _neighbors_of(session: QhullSession, vertex_id: int) -> List[int]:
    neighbors: Dict[int, None] = {}
    for facet in session.incident_facets(vertex_id):
        if not facet.good:
            continue
        for v in facet.vertices:
            if v != vertex_id:
                neighbors.setdefault(v, None)
    return list(neighbors)


def extract_connectivity(session: QhullSession) -> np.ndarray:
    """
    Vertex adjacency of a simplicial decomposition, as a linear-offset buffer
    with one slot per input point (see OffsetBuffer).

    Neighbors of a vertex are the other vertices of its good incident facets,
    deduplicated in the order they are reached.
    """
    session.define_vertex_neighbor_facets()
    buf = OffsetBuffer(session.n_points)
    for vertex_id in session.vertex_ids():
        buf.extend(vertex_id, _neighbors_of(session, vertex_id))
    out = buf.to_array()
    logger.debug("connectivity: %d vertices, %d neighbor entries",
                 session.n_points, len(out) - session.n_points - 1)
    return out


def split_connectivity(buf: Sequence[int]) -> List[np.ndarray]:
    """
    Per-vertex neighbor arrays from a connectivity buffer.
    """
    return OffsetBuffer.split(buf)
