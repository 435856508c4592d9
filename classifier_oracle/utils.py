"""Utility functions for the classifier oracle."""

from __future__ import annotations

import re
import copy
import math
from typing import Any


def deep_copy(obj: Any) -> Any:
    """Create a deep copy of an object."""
    return copy.deepcopy(obj)


def is_numeric(value: Any) -> bool:
    """Check if a value is numeric (int or float)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def build_path(parent_path: str, key: str | int) -> str:
    """Build a JSONPath from parent path and key."""
    if isinstance(key, int):
        return f"{parent_path}[{key}]"
    else:
        # Handle special characters in key names
        if re.match(r'^[a-zA-Z_][a-zA-Z0-9_]*$', str(key)):
            return f"{parent_path}.{key}"
        else:
            return f"{parent_path}['{key}']"


def get_type_name(value: Any) -> str:
    """Get a friendly type name for a value."""
    if value is None:
        return "null"
    elif isinstance(value, bool):
        return "boolean"
    elif isinstance(value, int):
        return "integer"
    elif isinstance(value, float):
        return "number"
    elif isinstance(value, str):
        return "string"
    elif isinstance(value, (list, tuple)):
        return "array"
    elif isinstance(value, dict):
        return "object"
    elif isinstance(value, (set, frozenset)):
        return "set"
    else:
        return type(value).__name__


def values_equal(old: Any, new: Any) -> bool:
    """Check if two scalars are equal (numbers compare across int/float, never with bools)."""
    if isinstance(old, bool) or isinstance(new, bool):
        return type(old) == type(new) and old == new

    if is_numeric(old) and is_numeric(new):
        # NaN is the same document as itself
        if isinstance(old, float) and isinstance(new, float):
            if math.isnan(old) and math.isnan(new):
                return True
        # exact across int and float, no rounding
        return old == new

    if type(old) == type(new):
        return old == new

    return False
