import logging

import numpy as np
import pytest

from src.qhullgrid.errors import InputShapeError
from src.qhullgrid.hull.computer import compute_hull
from src.qhullgrid.hull.engine import Facet
from src.qhullgrid.hull.facets import (
    OffsetBuffer,
    extract_bounds,
    extract_indices,
    split_connectivity,
)


def _square_with_center():
    # corners 0..3, center 4
    return np.array([
        [0.0, 1.0, 1.0, 0.0, 0.5],
        [0.0, 0.0, 1.0, 1.0, 0.5],
    ])


def test_extract_indices_skips_and_counts_bad_facets(caplog):
    facets = [
        Facet(index=0, vertices=(0, 1, 2), good=True),
        Facet(index=1, vertices=(1, 2, 3), good=False),
        Facet(index=2, vertices=(2, 3, 4), good=True),
    ]
    with caplog.at_level(logging.WARNING):
        res = extract_indices(facets, 3)

    assert res.shape == (3, 2)
    assert res[:, 0].tolist() == [0, 1, 2]
    assert res[:, 1].tolist() == [2, 3, 4]
    assert "skipped 1 degenerate facet" in caplog.text


def test_extract_indices_all_good_keeps_every_column():
    facets = [Facet(index=i, vertices=(i, i + 1), good=True) for i in range(4)]
    res = extract_indices(facets, 2)
    assert res.shape == (2, 4)


def test_extract_indices_checks_facet_size():
    with pytest.raises(InputShapeError):
        extract_indices([Facet(index=0, vertices=(0, 1), good=True)], 3)


def test_extract_bounds_discovery_order():
    indices = np.array([
        [5, 2, 7],
        [2, 9, 5],
        [1, 1, 0],
    ])
    # facet columns: (5,2,1), (2,9,1), (7,5,0)
    assert extract_bounds(indices).tolist() == [5, 2, 1, 9, 7, 0]


def test_offset_buffer_layout():
    buf = OffsetBuffer(3)
    buf.extend(0, [4, 5])
    buf.extend(2, [7])
    arr = buf.to_array()

    # 3 offsets, 1 trailer, 3 items
    assert arr.tolist() == [4, 6, 6, 7, 4, 5, 7]
    assert len(buf) == 7
    parts = OffsetBuffer.split(arr)
    assert [p.tolist() for p in parts] == [[4, 5], [], [7]]


def test_offset_buffer_without_items():
    arr = OffsetBuffer(2).to_array()
    assert arr.tolist() == [3, 3, 3]
    assert [p.tolist() for p in split_connectivity(arr)] == [[], []]


def test_split_rejects_inconsistent_buffers():
    with pytest.raises(InputShapeError):
        split_connectivity([3, 3, 9])   # trailer != length
    with pytest.raises(InputShapeError):
        split_connectivity([4, 6, 5, 7, 1, 2, 3])   # offsets go backwards
    with pytest.raises(InputShapeError):
        split_connectivity([])


def test_connectivity_square_with_center():
    r = compute_hull(_square_with_center(), mode="delaunay", connectivity=True)
    conn = r.connectivity

    assert r.indices.shape == (3, 4)
    n_points = 5
    # every corner has 3 neighbors, the center 4
    assert len(conn) == n_points + 1 + 4 * 3 + 4
    assert conn[n_points] == len(conn)
    assert conn[0] == n_points + 1

    nbs = [set(p.tolist()) for p in split_connectivity(conn)]
    assert nbs[4] == {0, 1, 2, 3}
    assert nbs[0] == {1, 3, 4}
    assert nbs[1] == {0, 2, 4}
    assert nbs[2] == {1, 3, 4}
    assert nbs[3] == {0, 2, 4}


def test_connectivity_lists_have_no_duplicates_or_self():
    rng = np.random.default_rng(3)
    P = rng.random((3, 30))
    r = compute_hull(P, mode="delaunay", connectivity=True)
    parts = split_connectivity(r.connectivity)
    assert len(parts) == 30
    for vid, nb in enumerate(parts):
        lst = nb.tolist()
        assert vid not in lst
        assert len(lst) == len(set(lst))
        # adjacency is symmetric
        for other in lst:
            assert vid in parts[other].tolist()
