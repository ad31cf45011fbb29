from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

import numpy as np

from .errors import InputShapeError, NonFiniteValueError


class InputKind(Enum):
    SCALAR = "scalar"
    VECTOR = "vector"
    MATRIX = "matrix"
    RAGGED = "ragged"
    TEXT = "text"
    MAPPING = "mapping"


def classify_input(obj: Any) -> InputKind:
    """
    Decide what kind of argument obj is from its type tag alone.
    Nothing is converted here, so a bad argument never raises.
    """
    if isinstance(obj, (str, bytes)):
        return InputKind.TEXT
    if isinstance(obj, Mapping):
        return InputKind.MAPPING
    if isinstance(obj, np.ndarray):
        if obj.dtype.kind not in "biuf":
            return InputKind.TEXT
        if obj.ndim == 0:
            return InputKind.SCALAR
        return InputKind.VECTOR if obj.ndim == 1 else InputKind.MATRIX
    if isinstance(obj, (list, tuple)):
        kinds = {classify_input(x) for x in obj}
        if kinds & {InputKind.TEXT, InputKind.MAPPING}:
            return InputKind.TEXT
        if kinds <= {InputKind.SCALAR}:
            return InputKind.VECTOR
        if len(kinds) == 1 and InputKind.RAGGED not in kinds and len({len(x) for x in obj}) == 1:
            return InputKind.MATRIX
        return InputKind.RAGGED
    if isinstance(obj, (bool, int, float, np.number)):
        return InputKind.SCALAR
    return InputKind.TEXT


def _as_float_array(obj: Any, name: str) -> np.ndarray:
    kind = classify_input(obj)
    if kind in (InputKind.TEXT, InputKind.MAPPING, InputKind.RAGGED):
        raise InputShapeError(f"{name} must be a numeric array, got {kind.value} input")
    return np.asarray(obj, dtype=np.float64)


def ensure_finite(arr: np.ndarray) -> np.ndarray:
    if not np.all(np.isfinite(arr)):
        raise NonFiniteValueError("Infinite or invalid (NaN) operands not allowed.")
    return arr


def as_point_matrix(*coords: Any) -> np.ndarray:
    """
    Normalize a point set to one dense (nd, np) float64 matrix.

    coords is either a single (nd, np) matrix, or nd separate 1-D arrays
    of length np (one per axis), which are interleaved column-wise.
    """
    if len(coords) == 0:
        raise InputShapeError("no coordinates given")

    if len(coords) == 1:
        P = _as_float_array(coords[0], "points")
        if P.ndim != 2 or P.shape[0] == 0 or P.shape[1] == 0:
            raise InputShapeError(f"array must have 2 dimensions, got shape {P.shape}")
    else:
        axes = [_as_float_array(c, f"coordinate array {i}") for i, c in enumerate(coords)]
        n = axes[0].shape[0] if axes[0].ndim == 1 else -1
        for a in axes:
            if a.ndim != 1 or a.shape[0] != n:
                raise InputShapeError(
                    "separated input arrays must have same length and be 1 dimensional"
                )
        if n == 0:
            raise InputShapeError("array must have 2 dimensions, got no points")
        P = np.vstack(axes)

    return np.ascontiguousarray(ensure_finite(P))


def broadcast3(value: Any, name: str) -> np.ndarray:
    """
    Expand a 1..3 element option to exactly three per-axis values.
    One element applies to every axis; with two, the last one is repeated.
    """
    arr = np.atleast_1d(_as_float_array(value, name)).ravel()
    if not 1 <= arr.size <= 3:
        raise InputShapeError(f"Keyword array parameter {name.upper()} must have from 1 to 3 elements.")
    out = np.empty(3, dtype=np.float64)
    out[: arr.size] = arr
    out[arr.size:] = arr[-1]
    return ensure_finite(out)


def as_value_vector(values: Any, n_points: int) -> np.ndarray:
    f = _as_float_array(values, "values")
    if f.ndim != 1 or f.shape[0] != n_points:
        raise InputShapeError(f"values must be 1-D with {n_points} entries, got shape {f.shape}")
    return f
