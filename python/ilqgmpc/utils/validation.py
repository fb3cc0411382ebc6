"""Input validation utilities."""

from typing import Any, Tuple

import numpy as np

from ..exceptions import DimensionError, InvalidInputError


def validate_positive(value: float, name: str) -> None:
    """Raise InvalidInputError unless value > 0."""
    if not value > 0:
        raise InvalidInputError(f"{name} must be positive, got {value}")


def validate_non_negative(value: float, name: str) -> None:
    """Raise InvalidInputError unless value >= 0."""
    if not value >= 0:
        raise InvalidInputError(f"{name} must be non-negative, got {value}")


def validate_positive_integer(value: Any, name: str) -> None:
    """Raise InvalidInputError unless value is an int >= 1."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
        raise InvalidInputError(f"{name} must be a positive integer, got {value!r}")


def as_vector(value: Any, dim: int, name: str) -> np.ndarray:
    """
    Convert to a finite float64 vector of the given dimension.

    Raises:
        DimensionError: wrong shape
        InvalidInputError: NaN or inf entries
    """
    arr = np.asarray(value, dtype=np.float64)
    if arr.ndim > 1 or arr.size != dim:
        raise DimensionError(f"{name} must have shape ({dim},), got {arr.shape}")
    vec = arr.reshape(dim).copy()
    if not np.all(np.isfinite(vec)):
        raise InvalidInputError(f"{name} contains non-finite values")
    return vec


def as_matrix(value: Any, shape: Tuple[int, int], name: str) -> np.ndarray:
    """Convert to a float64 matrix of the given shape."""
    mat = np.asarray(value, dtype=np.float64)
    if mat.shape != shape:
        raise DimensionError(f"{name} must have shape {shape}, got {mat.shape}")
    return mat


def as_weight_matrix(value: Any, dim: int, name: str) -> np.ndarray:
    """
    Accept a full (dim, dim) matrix, a diagonal list or a scalar.

    Weight matrices are symmetrized.
    """
    arr = np.asarray(value, dtype=np.float64)
    if arr.ndim == 0:
        mat = float(arr) * np.eye(dim)
    elif arr.ndim == 1:
        if arr.shape != (dim,):
            raise DimensionError(f"{name} diagonal must have {dim} entries, got {arr.shape[0]}")
        mat = np.diag(arr)
    else:
        mat = as_matrix(arr, (dim, dim), name)
    if not np.all(np.isfinite(mat)):
        raise InvalidInputError(f"{name} contains non-finite values")
    return 0.5 * (mat + mat.T)
