"""Structural diffing of arbitrarily nested documents."""

from __future__ import annotations

import json
from typing import Any, Optional

from .models import ABSENT, DocumentDiff, DocumentSet, OracleConfig
from .comparator import ValueComparator


def to_jsonable(value: Any) -> Any:
    """Convert a document or diff into plain JSON types for rendering."""
    if value is ABSENT:
        return repr(ABSENT)
    if isinstance(value, (DocumentSet, set, frozenset)):
        return [to_jsonable(m) for m in DocumentSet.coerce(value).to_list()]
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def render_diff(diff: Any) -> Optional[str]:
    """Pretty-print a diff for human inspection; None stays None."""
    if diff is None:
        return None
    return json.dumps(to_jsonable(diff), indent=2)


class StructuralDiffEngine:
    """
    Recursively diffs two documents and yields a minimal diff tree.

    Thin orchestration over ValueComparator: the comparator owns the type
    rules, the engine adds the configured depth guard and the divergence
    paths used to localize failures in reports.
    """

    def __init__(self, config: Optional[OracleConfig] = None):
        self.config = config or OracleConfig()
        self.comparator = ValueComparator(max_depth=self.config.max_depth)

    def diff(self, a: Any, b: Any) -> Any:
        return self.comparator.diff(a, b)

    def compare(self, a: Any, b: Any) -> DocumentDiff:
        diff, paths = self.comparator.diff_with_paths(a, b)
        return DocumentDiff(diff=diff, divergent_paths=paths)

    def equal(self, a: Any, b: Any) -> bool:
        return self.comparator.equal(a, b)
