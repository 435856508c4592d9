"""JSONPath helpers used to scrub volatile export fields."""

from __future__ import annotations

from typing import Any

from jsonpath_ng import parse as jsonpath_parse
from jsonpath_ng.exceptions import JSONPathError


class JSONPathMatcher:
    """Compiles JSONPath expressions once and removes the nodes they match."""

    # Compiled expressions, shared by every normalizer and config loader
    _cache: dict = {}

    @classmethod
    def compile(cls, path: str):
        """Compile and cache a JSONPath expression; ValueError if it is invalid."""
        if path not in cls._cache:
            try:
                cls._cache[path] = jsonpath_parse(path)
            except JSONPathError as e:
                raise ValueError(f"Invalid JSONPath expression '{path}': {e}")
        return cls._cache[path]

    @classmethod
    def delete_paths(cls, document: Any, paths: list[str]) -> Any:
        """
        Remove every node matched by ``paths`` from ``document``.

        The document is modified in place and returned; callers pass a copy.
        Expressions matching nothing are ignored.
        """
        for path in paths:
            document = cls.compile(path).filter(lambda _: True, document)
        return document
