"""Validation and configuration helpers."""

from .validation import (
    validate_positive,
    validate_non_negative,
    validate_positive_integer,
    as_vector,
    as_matrix,
    as_weight_matrix,
)
from .config import load_yaml_section, check_keys

__all__ = [
    "validate_positive",
    "validate_non_negative",
    "validate_positive_integer",
    "as_vector",
    "as_matrix",
    "as_weight_matrix",
    "load_yaml_section",
    "check_keys",
]
