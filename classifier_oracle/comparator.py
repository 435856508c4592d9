"""Type-dispatching equality and diff for documents."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from .models import ABSENT, DocumentSet
from .exceptions import MaxDepthExceededError
from .utils import build_path, values_equal


class Shape(Enum):
    ABSENT = "absent"
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    SET = "set"
    MAP = "map"


def shape_of(value: Any) -> Shape:
    """Classify a document node by its runtime shape."""
    if value is ABSENT:
        return Shape.ABSENT
    if isinstance(value, dict):
        return Shape.MAP
    if isinstance(value, (DocumentSet, set, frozenset)):
        return Shape.SET
    if isinstance(value, (list, tuple)):
        return Shape.SEQUENCE
    return Shape.SCALAR


class ValueComparator:
    """
    Compares two documents and reports where they disagree.

    A diff is None when the documents are equal. Otherwise it mirrors the
    shape of the inputs down to the point of divergence, where it holds an
    ``[expected, actual]`` pair:

    - mismatched shapes and unequal scalars give the literal pair
    - sequences give the list of per-index diffs that are not None
    - sets give ``[only_in_expected, only_in_actual]``
    - maps give ``{key: diff}`` for the keys whose values differ

    A key or index that exists on one side only is compared against ABSENT.
    """

    def __init__(self, max_depth: int = 100):
        self.max_depth = max_depth

    def equal(self, a: Any, b: Any) -> bool:
        return self.diff(a, b) is None

    def diff(self, a: Any, b: Any) -> Any:
        return self._diff(a, b, "$", 0, None)

    def diff_with_paths(self, a: Any, b: Any) -> tuple[Any, list[str]]:
        """Diff two documents and also return the JSONPath of every divergence."""
        paths: list[str] = []
        result = self._diff(a, b, "$", 0, paths)
        return result, paths

    def _diff(
        self,
        a: Any,
        b: Any,
        path: str,
        depth: int,
        paths: Optional[list[str]]
    ) -> Any:
        if depth > self.max_depth:
            raise MaxDepthExceededError(self.max_depth, path)

        shape = shape_of(a)
        if shape != shape_of(b):
            return self._leaf(a, b, path, paths)

        if shape == Shape.MAP:
            return self._diff_maps(a, b, path, depth, paths)
        elif shape == Shape.SEQUENCE:
            return self._diff_sequences(a, b, path, depth, paths)
        elif shape == Shape.SET:
            return self._diff_sets(a, b, path, paths)
        elif shape == Shape.ABSENT:
            return None
        else:
            if values_equal(a, b):
                return None
            return self._leaf(a, b, path, paths)

    def _diff_maps(
        self,
        a: dict,
        b: dict,
        path: str,
        depth: int,
        paths: Optional[list[str]]
    ) -> Optional[dict]:
        result = {}
        keys = list(a) + [k for k in b if k not in a]

        for key in keys:
            sub = self._diff(
                a.get(key, ABSENT),
                b.get(key, ABSENT),
                build_path(path, key),
                depth + 1,
                paths
            )
            if sub is not None:
                result[key] = sub

        return result or None

    def _diff_sequences(
        self,
        a: list,
        b: list,
        path: str,
        depth: int,
        paths: Optional[list[str]]
    ) -> Optional[list]:
        result = []

        for i in range(max(len(a), len(b))):
            old = a[i] if i < len(a) else ABSENT
            new = b[i] if i < len(b) else ABSENT
            sub = self._diff(old, new, build_path(path, i), depth + 1, paths)
            if sub is not None:
                result.append(sub)

        return result or None

    def _diff_sets(
        self,
        a: Any,
        b: Any,
        path: str,
        paths: Optional[list[str]]
    ) -> Optional[list]:
        a = DocumentSet.coerce(a)
        b = DocumentSet.coerce(b)
        only_a = a - b
        only_b = b - a

        if not only_a and not only_b:
            return None

        if paths is not None:
            paths.append(path)
        return [only_a, only_b]

    def _leaf(self, a: Any, b: Any, path: str, paths: Optional[list[str]]) -> list:
        if paths is not None:
            paths.append(path)
        return [a, b]
