"""Export archive extraction and entry classification."""

from __future__ import annotations

import logging
import re
import tarfile
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .models import EntryType, OracleConfig
from .exceptions import ArchiveError

logger = logging.getLogger(__name__)


class EntryClassifier:
    """
    Maps a path inside an export archive to the kind of entry it holds.

    Layout, relative to the extraction root:
    - "<root>/export-metadata.json"  -> metadata
    - "<root>/catalogs/**/<name>.json"  -> catalog
    - "<root>/reports/**/<name>.json"   -> report

    Hidden files are never classified; the walk skips them.
    """

    def __init__(self, export_root: str = "classifier-bak"):
        self.export_root = export_root
        root = re.escape(export_root)
        self._patterns = [
            (re.compile(rf"^{root}/export-metadata\.json$"), EntryType.METADATA),
            (re.compile(rf"^{root}/catalogs/.*\.json$"), EntryType.CATALOG),
            (re.compile(rf"^{root}/reports/.*\.json$"), EntryType.REPORT),
        ]

    def classify(self, relative_path: str) -> EntryType:
        for pattern, entry_type in self._patterns:
            if pattern.match(relative_path):
                return entry_type
        return EntryType.UNKNOWN


class ExportExtractor:
    """Unpacks gzip-compressed export tarballs into a scratch directory."""

    def __init__(self, config: Optional[OracleConfig] = None):
        self.config = config or OracleConfig()

    @contextmanager
    def scratch(self) -> Iterator[Path]:
        """Scratch directory scoped to one comparison; removed on every exit path."""
        with tempfile.TemporaryDirectory(
            prefix="classifier-export-",
            dir=self.config.scratch_dir
        ) as tmpdir:
            logger.debug("Using scratch directory %s", tmpdir)
            yield Path(tmpdir)

    def extract(self, archive_path: str | Path, destination: Path) -> Path:
        """
        Extract an export archive into ``destination``.

        Members that would land outside the destination (absolute paths,
        ``..`` components, device files) are rejected.

        Returns:
            The extraction root
        """
        archive_path = Path(archive_path)
        if not archive_path.is_file():
            raise ArchiveError(str(archive_path), "no such file")

        destination.mkdir(parents=True, exist_ok=True)
        try:
            with tarfile.open(archive_path, "r:gz") as archive:
                archive.extractall(destination, filter="data")
        except tarfile.FilterError as e:
            raise ArchiveError(str(archive_path), f"unsafe member: {e}")
        except (tarfile.TarError, OSError, EOFError) as e:
            raise ArchiveError(str(archive_path), str(e))

        logger.debug("Extracted %s into %s", archive_path, destination)
        return destination

    @staticmethod
    def list_entries(root: Path) -> list[str]:
        """
        All files and directories under ``root`` as sorted POSIX relative paths.

        Hidden entries (any path component starting with ".") and everything
        beneath them are left out.
        """
        entries = []
        for p in root.rglob("*"):
            relative = p.relative_to(root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            entries.append(relative.as_posix())
        return sorted(entries)
