"""Data models for the classifier oracle."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Optional

from .utils import is_numeric


ROOT_GROUP_ID = "00000000-0000-4000-8000-000000000000"
DEFAULT_ENVIRONMENT = "production"
DELETED_FLAG = "puppetlabs.classifier/deleted"


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class EntryType(Enum):
    METADATA = "metadata"
    CATALOG = "catalog"
    REPORT = "report"
    UNKNOWN = "unknown"


class FailureType(Enum):
    MISSING_ENTRY = "MISSING_ENTRY"
    EXTRA_ENTRIES = "EXTRA_ENTRIES"
    ENTRY_MISMATCH = "ENTRY_MISMATCH"


class _Absent:
    """Marker for a key or index that one side of a comparison does not have."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<absent>"

    def __bool__(self):
        return False

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()


def _tagged(value: Any) -> Any:
    """Tag each node with its shape so that e.g. a list and a set never collide."""
    if value is ABSENT:
        return {"absent": True}
    if isinstance(value, (DocumentSet, set, frozenset)):
        return {"set": sorted(canonical_key(m) for m in value)}
    if isinstance(value, dict):
        return {"map": {str(k): _tagged(v) for k, v in value.items()}}
    if isinstance(value, (list, tuple)):
        return {"seq": [_tagged(v) for v in value]}
    if value is None:
        return {"null": True}
    if isinstance(value, bool):
        return {"bool": value}
    if is_numeric(value):
        # 1 and 1.0 are the same number
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return {"num": value}
    if isinstance(value, str):
        return {"str": value}
    return {"other": repr(value)}


def canonical_key(value: Any) -> str:
    """Stable string identity of a document, independent of map and set ordering."""
    return json.dumps(_tagged(value), sort_keys=True, separators=(",", ":"))


class DocumentSet:
    """
    Immutable unordered collection of documents.

    Members may be maps, sequences or other sets; identity is the member's
    canonical key, so two members that compare equal collapse into one.
    """

    __slots__ = ("_members",)

    def __init__(self, members: Iterable[Any] = ()):
        entries: dict[str, Any] = {}
        for member in members:
            entries.setdefault(canonical_key(member), member)
        self._members = entries

    @classmethod
    def coerce(cls, value: Any) -> "DocumentSet":
        if isinstance(value, DocumentSet):
            return value
        return cls(value)

    def keys(self) -> frozenset:
        return frozenset(self._members)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._members.values())

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, item: Any) -> bool:
        return canonical_key(item) in self._members

    def __sub__(self, other: Any) -> "DocumentSet":
        other_keys = DocumentSet.coerce(other).keys()
        return DocumentSet(v for k, v in self._members.items() if k not in other_keys)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, (DocumentSet, set, frozenset)):
            return self.keys() == DocumentSet.coerce(other).keys()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.keys())

    def to_list(self) -> list:
        """Members in canonical-key order, for stable rendering."""
        return [self._members[k] for k in sorted(self._members)]

    def __repr__(self):
        return f"DocumentSet({self.to_list()!r})"


@dataclass
class ComparisonOptions:
    """Which export entry kinds get diffed."""
    catalogs: bool = True
    metadata: bool = True
    reports: bool = True

    def includes(self, entry_type: EntryType) -> bool:
        if entry_type == EntryType.CATALOG:
            return self.catalogs
        if entry_type == EntryType.METADATA:
            return self.metadata
        if entry_type == EntryType.REPORT:
            return self.reports
        return False


@dataclass
class OracleConfig:
    """Configuration passed explicitly into every oracle entry point."""
    max_depth: int = 100
    max_ancestry_depth: int = 100
    export_root: str = "classifier-bak"
    volatile_metadata_paths: list[str] = field(default_factory=lambda: ["$.timestamp"])
    scratch_dir: Optional[str] = None
    log_level: LogLevel = LogLevel.INFO
    comparison: ComparisonOptions = field(default_factory=ComparisonOptions)


@dataclass
class DocumentDiff:
    """Result of diffing two documents."""
    diff: Any = None
    divergent_paths: list[str] = field(default_factory=list)

    @property
    def is_match(self) -> bool:
        return self.diff is None


@dataclass
class ExportFailure:
    """A single problem found while comparing two export archives."""
    type: FailureType
    path: str
    message: str
    diff: Any = None
    divergent_paths: list[str] = field(default_factory=list)
    rendered_diff: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "type": self.type.value,
            "path": self.path,
            "message": self.message,
        }
        if self.divergent_paths:
            result["divergent_paths"] = self.divergent_paths
        if self.rendered_diff is not None:
            result["diff"] = self.rendered_diff
        return result


@dataclass
class ExportReport:
    """Outcome of comparing two export archives."""
    export_a: str
    export_b: str
    failures: list[ExportFailure] = field(default_factory=list)
    entries_compared: int = 0

    @property
    def is_match(self) -> bool:
        return len(self.failures) == 0

    def failure_message(self) -> str:
        lines = [f"Export '{self.export_b}' does not match '{self.export_a}':"]
        for failure in self.failures:
            lines.append(f"  [{failure.type.value}] {failure.message}")
            if failure.rendered_diff:
                lines.append(f"Diff:\n{failure.rendered_diff}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "is_match": self.is_match,
            "export_a": self.export_a,
            "export_b": self.export_b,
            "entries_compared": self.entries_compared,
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass
class ResolvedTraits:
    """Classes and variables a group exposes once inheritance is applied."""
    classes: dict[str, dict[str, Any]] = field(default_factory=dict)
    variables: dict[str, Any] = field(default_factory=dict)
    ancestry: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "classes": self.classes,
            "variables": self.variables,
        }
