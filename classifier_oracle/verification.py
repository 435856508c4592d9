"""Assertions comparing predicted group records with the service's records."""

from __future__ import annotations

from typing import Any, Optional

from .models import OracleConfig
from .groups import Group
from .comparator import ValueComparator
from .differ import render_diff


def _as_record(value: Any) -> Any:
    return value.to_dict() if isinstance(value, Group) else value


def compare_records(
    expected: Any,
    actual: Any,
    config: Optional[OracleConfig] = None
) -> dict:
    """
    Keys of ``expected`` whose value differs in ``actual``.

    Returns:
        ``{key: {"expected": ..., "got": ...}}``; empty when every expected
        key matches
    """
    config = config or OracleConfig()
    comparator = ValueComparator(max_depth=config.max_depth)
    expected = _as_record(expected)
    actual = _as_record(actual)

    mismatches = {}
    for key, value in expected.items():
        got = actual.get(key)
        if not comparator.equal(value, got):
            mismatches[key] = {"expected": value, "got": got}
    return mismatches


def assert_group_matches(
    expected: Any,
    actual: Any,
    config: Optional[OracleConfig] = None
):
    """
    Assert that the service holds exactly the predicted group record.

    Raises:
        AssertionError: naming the group id and carrying the rendered diff
    """
    config = config or OracleConfig()
    expected = _as_record(expected)
    actual = _as_record(actual)

    diff = ValueComparator(max_depth=config.max_depth).diff(expected, actual)
    if diff is not None:
        keys = ", ".join(sorted(map(str, diff))) if isinstance(diff, dict) else "<record>"
        raise AssertionError(
            f"Group '{expected.get('id')}' does not match the service record. "
            f"Mismatched keys: {keys}\n"
            f"Diff:\n{render_diff(diff)}"
        )
