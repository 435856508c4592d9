"""Tombstoning of class references that left the class catalog, and their removal."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from .models import DELETED_FLAG
from .groups import ClassCatalog, Group
from .exceptions import TombstoneError
from .utils import deep_copy

logger = logging.getLogger(__name__)


def _tombstone(value: Any) -> dict:
    return {DELETED_FLAG: True, "value": deep_copy(value)}


def apply_deletion(group: Group, class_path: list[str]) -> Group:
    """
    Record that a class or one of its parameters no longer exists.

    ``class_path`` is ``[class]`` or ``[class, parameter]``. The group's
    ``classes`` keep the reference; ``deleted`` gains the tombstone:

    - a parameter is tombstoned with its last value and its class is flagged
      ``False`` (the class itself still exists)
    - a whole class is flagged ``True`` with every parameter tombstoned

    Applying the same deletion twice returns the group unchanged.
    """
    if len(class_path) not in (1, 2):
        raise TombstoneError(class_path, "expected [class] or [class, parameter]")

    class_name = class_path[0]
    if class_name not in group.classes:
        raise TombstoneError(class_path, "class is not referenced by the group")
    parameters = group.classes[class_name]
    existing = group.deleted.get(class_name, {})

    if len(class_path) == 2:
        parameter = class_path[1]
        if parameter not in parameters:
            raise TombstoneError(class_path, "parameter is not set by the group")
        if parameter in existing:
            return group

        deleted = deep_copy(group.deleted)
        entry = deleted.setdefault(class_name, {DELETED_FLAG: False})
        entry[parameter] = _tombstone(parameters[parameter])
    else:
        if existing.get(DELETED_FLAG) is True:
            return group

        deleted = deep_copy(group.deleted)
        entry = {DELETED_FLAG: True}
        for parameter, value in parameters.items():
            entry[parameter] = _tombstone(value)
        deleted[class_name] = entry

    logger.debug("Tombstoned %s in group '%s'", "/".join(class_path), group.id)
    return replace(group, deleted=deleted)


def sync_deletions(group: Group, catalog: ClassCatalog) -> Group:
    """Predict a group after the service synchronizes ``catalog``."""
    for class_path in catalog.missing_references(group):
        group = apply_deletion(group, class_path)
    return group


def _deep_merge(target: dict, update: dict):
    for key, value in update.items():
        if isinstance(value, dict):
            if not isinstance(target.get(key), dict):
                target[key] = {}
            _deep_merge(target[key], value)
        else:
            target[key] = value


def _remove_nil_values(record: dict):
    for key in list(record):
        value = record[key]
        if isinstance(value, dict):
            _remove_nil_values(value)
        elif value is None:
            del record[key]


def apply_update(group: Group, update: dict) -> Group:
    """
    Predict a group after the service applies a partial update.

    The update is deep-merged into the record and ``None`` removes a key. Any
    class parameter the update touches, to any value including ``None``, loses
    its tombstone; a class whose tombstone map is left with nothing but its
    flag, or that the group no longer references, leaves ``deleted``.
    """
    record = group.to_dict()
    deleted = record.pop("deleted", {})

    _deep_merge(record, deep_copy(update))
    _remove_nil_values(record)
    classes = record.get("classes", {})

    for class_name, parameters in (update.get("classes") or {}).items():
        if class_name in deleted and isinstance(parameters, dict):
            for parameter in parameters:
                if deleted[class_name].pop(parameter, None) is not None:
                    logger.debug(
                        "Pruned tombstone %s/%s in group '%s'",
                        class_name, parameter, group.id
                    )

    for class_name in list(deleted):
        remaining = set(deleted[class_name]) - {DELETED_FLAG}
        if class_name not in classes or not remaining:
            del deleted[class_name]

    record["deleted"] = deleted
    return Group.from_dict(record)
