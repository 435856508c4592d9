"""Normalization of export entries before diffing."""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

from .models import DocumentSet, EntryType, OracleConfig
from .jsonpath_utils import JSONPathMatcher
from .exceptions import EntryParseError


class ExportNormalizer:
    """
    Strips run-to-run noise out of export entries.

    - metadata: volatile fields (the export timestamp) are deleted
    - catalog: resources, edges and each resource's tags become unordered sets
    - report: left verbatim
    """

    def __init__(self, config: Optional[OracleConfig] = None):
        self.config = config or OracleConfig()

    def load(self, path: Path, entry_type: EntryType) -> Any:
        """Parse an entry file and normalize it for its entry type."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise EntryParseError(str(path), str(e))
        return self.normalize(data, entry_type)

    def normalize(self, data: Any, entry_type: EntryType) -> Any:
        if entry_type == EntryType.METADATA:
            return self.normalize_metadata(data)
        elif entry_type == EntryType.CATALOG:
            return self.normalize_catalog(data)
        return data

    def normalize_metadata(self, meta: Any) -> Any:
        if not isinstance(meta, (dict, list)):
            return meta
        return JSONPathMatcher.delete_paths(
            deepcopy(meta), self.config.volatile_metadata_paths
        )

    def normalize_catalog(self, catalog: Any) -> Any:
        catalog = deepcopy(catalog)
        data = catalog.get("data") if isinstance(catalog, dict) else None
        if not isinstance(data, dict):
            return catalog

        if isinstance(data.get("resources"), list):
            data["resources"] = DocumentSet(
                self._normalize_resource(r) for r in data["resources"]
            )
        if isinstance(data.get("edges"), list):
            data["edges"] = DocumentSet(data["edges"])

        return catalog

    def _normalize_resource(self, resource: Any) -> Any:
        if isinstance(resource, dict) and isinstance(resource.get("tags"), list):
            resource["tags"] = DocumentSet(resource["tags"])
        return resource
