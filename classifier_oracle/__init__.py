"""
Classifier Oracle - verification oracle for a node-classification service

Independently predicts and checks what a running classifier should hold:
a structural diff engine for comparing classifier export archives, and a
reference model of group inheritance and class-deletion tombstones.
"""

from .models import (
    ABSENT,
    DELETED_FLAG,
    ROOT_GROUP_ID,
    ComparisonOptions,
    DocumentDiff,
    DocumentSet,
    EntryType,
    ExportFailure,
    ExportReport,
    FailureType,
    LogLevel,
    OracleConfig,
    ResolvedTraits,
)
from .comparator import ValueComparator
from .differ import StructuralDiffEngine, render_diff
from .engine import ExportComparator, compare_exports, assert_exports_match
from .groups import Group, ClassDefinition, ClassCatalog, GroupStore
from .inheritance import InheritanceOracle, resolve_inherited
from .tombstones import apply_deletion, apply_update, sync_deletions
from .verification import compare_records, assert_group_matches
from .config import load_config, config_from_dict, configure_logging
from .exceptions import (
    OracleError,
    ConfigError,
    ArchiveError,
    UnrecognizedEntryError,
    EntryParseError,
    MaxDepthExceededError,
    AncestryCycleError,
    GroupNotFoundError,
    GroupValidationError,
    TombstoneError,
)

__version__ = "1.0.0"
__all__ = [
    # Documents and diffing
    "ABSENT",
    "DocumentSet",
    "DocumentDiff",
    "ValueComparator",
    "StructuralDiffEngine",
    "render_diff",
    # Export comparison
    "ExportComparator",
    "ExportReport",
    "ExportFailure",
    "FailureType",
    "EntryType",
    "ComparisonOptions",
    "compare_exports",
    "assert_exports_match",
    # Groups and inheritance
    "ROOT_GROUP_ID",
    "DELETED_FLAG",
    "Group",
    "ClassDefinition",
    "ClassCatalog",
    "GroupStore",
    "InheritanceOracle",
    "ResolvedTraits",
    "resolve_inherited",
    "apply_deletion",
    "apply_update",
    "sync_deletions",
    "compare_records",
    "assert_group_matches",
    # Configuration
    "OracleConfig",
    "LogLevel",
    "load_config",
    "config_from_dict",
    "configure_logging",
    # Errors
    "OracleError",
    "ConfigError",
    "ArchiveError",
    "UnrecognizedEntryError",
    "EntryParseError",
    "MaxDepthExceededError",
    "AncestryCycleError",
    "GroupNotFoundError",
    "GroupValidationError",
    "TombstoneError",
]
