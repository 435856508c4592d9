"""Export archive comparison engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .models import (
    ComparisonOptions,
    EntryType,
    ExportFailure,
    ExportReport,
    FailureType,
    OracleConfig,
)
from .extractor import EntryClassifier, ExportExtractor
from .normalizer import ExportNormalizer
from .differ import StructuralDiffEngine, render_diff
from .exceptions import UnrecognizedEntryError

logger = logging.getLogger(__name__)


class ExportComparator:
    """
    Compares two classifier export archives entry by entry.

    Pipeline:

    1. Extraction: unpack both archives into one scratch directory
    2. Forward walk: every entry of A must exist in B and have a known layout
    3. Normalization + diffing: metadata, catalogs and reports are scrubbed of
       run-to-run noise and structurally diffed
    4. Extra entries: whatever B holds beyond A is reported in one set check

    Missing, extra and mismatching entries are collected as failures; an entry
    outside the known layout aborts the comparison.
    """

    def __init__(self, config: Optional[OracleConfig] = None):
        """
        Initialize the comparator.

        Args:
            config: Oracle configuration (uses defaults if not provided)
        """
        self.config = config or OracleConfig()
        self.extractor = ExportExtractor(self.config)
        self.classifier = EntryClassifier(self.config.export_root)
        self.normalizer = ExportNormalizer(self.config)
        self.differ = StructuralDiffEngine(self.config)

    def compare(
        self,
        export_a: str | Path,
        export_b: str | Path,
        options: Optional[ComparisonOptions] = None
    ) -> ExportReport:
        """
        Compare two export archives.

        Args:
            export_a: The baseline export tarball
            export_b: The export tarball to validate
            options: Entry kinds to diff (defaults to the configured options)

        Returns:
            ExportReport listing every failure; ``is_match`` when there are none

        Raises:
            UnrecognizedEntryError: A file in A is outside the export layout
            ArchiveError: Either archive cannot be extracted
        """
        options = options or self.config.comparison
        report = ExportReport(export_a=str(export_a), export_b=str(export_b))

        with self.extractor.scratch() as scratch:
            root_a = self.extractor.extract(export_a, scratch / "a")
            root_b = self.extractor.extract(export_b, scratch / "b")

            seen = set()
            for relative_path in self.extractor.list_entries(root_a):
                seen.add(relative_path)
                self._compare_entry(
                    relative_path, root_a, root_b, options, report
                )

            extra = set(self.extractor.list_entries(root_b)) - seen
            if extra:
                listed = "', '".join(sorted(extra))
                self._add_failure(
                    report,
                    FailureType.EXTRA_ENTRIES,
                    path=str(export_b),
                    message=f"Export file '{export_b}' contains extra file entries: '{listed}'"
                )

        logger.info(
            "Compared %d entries of '%s' and '%s': %s",
            report.entries_compared,
            export_a,
            export_b,
            "match" if report.is_match else f"{len(report.failures)} failure(s)"
        )
        return report

    def _compare_entry(
        self,
        relative_path: str,
        root_a: Path,
        root_b: Path,
        options: ComparisonOptions,
        report: ExportReport
    ):
        path_a = root_a / relative_path
        path_b = root_b / relative_path

        if path_a.is_dir():
            if not path_b.exists():
                self._add_missing(report, relative_path)
            return

        entry_type = self.classifier.classify(relative_path)
        if entry_type == EntryType.UNKNOWN:
            raise UnrecognizedEntryError(relative_path)

        if not path_b.is_file():
            self._add_missing(report, relative_path)
            return

        if not options.includes(entry_type):
            logger.debug("Skipping %s entry '%s'", entry_type.value, relative_path)
            return

        logger.info("Comparing file '%s'", relative_path)
        report.entries_compared += 1

        expected = self.normalizer.load(path_a, entry_type)
        actual = self.normalizer.load(path_b, entry_type)
        result = self.differ.compare(expected, actual)

        if not result.is_match:
            locations = ", ".join(result.divergent_paths)
            self._add_failure(
                report,
                FailureType.ENTRY_MISMATCH,
                path=relative_path,
                message=f"{entry_type.value.capitalize()} entry '{relative_path}' "
                        f"does not match at {locations}",
                diff=result.diff,
                divergent_paths=result.divergent_paths,
            )

    def _add_missing(self, report: ExportReport, relative_path: str):
        self._add_failure(
            report,
            FailureType.MISSING_ENTRY,
            path=relative_path,
            message=f"Export file '{report.export_b}' is missing entry '{relative_path}'"
        )

    def _add_failure(
        self,
        report: ExportReport,
        failure_type: FailureType,
        path: str,
        message: str,
        diff=None,
        divergent_paths: Optional[list[str]] = None
    ):
        logger.warning(message)
        report.failures.append(ExportFailure(
            type=failure_type,
            path=path,
            message=message,
            diff=diff,
            divergent_paths=divergent_paths or [],
            rendered_diff=render_diff(diff)
        ))


def compare_exports(
    export_a: str | Path,
    export_b: str | Path,
    options: Optional[ComparisonOptions] = None,
    config: Optional[OracleConfig] = None
) -> ExportReport:
    """
    Convenience function to compare two export archives.

    Args:
        export_a: The baseline export tarball
        export_b: The export tarball to validate
        options: Entry kinds to diff
        config: Optional oracle configuration

    Returns:
        ExportReport
    """
    return ExportComparator(config).compare(export_a, export_b, options)


def assert_exports_match(
    export_a: str | Path,
    export_b: str | Path,
    options: Optional[ComparisonOptions] = None,
    config: Optional[OracleConfig] = None
) -> ExportReport:
    """Compare two export archives, raising AssertionError on any failure."""
    report = compare_exports(export_a, export_b, options, config)
    if not report.is_match:
        raise AssertionError(report.failure_message())
    return report
