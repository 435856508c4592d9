"""Classification groups, class catalogs and the in-memory group store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .models import DEFAULT_ENVIRONMENT, ROOT_GROUP_ID
from .exceptions import GroupNotFoundError, GroupValidationError
from .utils import deep_copy, get_type_name


_GROUP_FIELDS = ("id", "name", "environment", "parent", "rule", "classes", "variables", "deleted")


@dataclass(frozen=True)
class Group:
    """
    Snapshot of a classification group record.

    ``deleted`` mirrors ``classes`` for references the class catalog no longer
    declares:

        {"cls": {"puppetlabs.classifier/deleted": False,
                 "param": {"puppetlabs.classifier/deleted": True, "value": v}}}

    Operations that change a group return a new Group; a snapshot is never
    mutated in place.
    """
    id: str
    name: str = ""
    environment: str = DEFAULT_ENVIRONMENT
    parent: str = ROOT_GROUP_ID
    rule: Any = None
    classes: dict[str, dict[str, Any]] = field(default_factory=dict)
    variables: dict[str, Any] = field(default_factory=dict)
    deleted: dict[str, dict[str, Any]] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.id:
            raise GroupValidationError("group id is required")
        if self.parent == self.id and self.id != ROOT_GROUP_ID:
            raise GroupValidationError("a group may not be its own parent", self.id)
        for name in ("classes", "variables", "deleted"):
            value = getattr(self, name)
            if not isinstance(value, dict):
                raise GroupValidationError(
                    f"'{name}' must be an object, got {get_type_name(value)}", self.id
                )
        for class_name, parameters in self.classes.items():
            if not isinstance(parameters, dict):
                raise GroupValidationError(
                    f"parameters of class '{class_name}' must be an object, "
                    f"got {get_type_name(parameters)}",
                    self.id
                )

    def is_root(self, root_id: str = ROOT_GROUP_ID) -> bool:
        return self.id == root_id and self.parent == root_id

    @classmethod
    def from_dict(cls, record: dict) -> "Group":
        """Build a group from the service's JSON representation."""
        if not isinstance(record, dict):
            raise GroupValidationError(
                f"group record must be an object, got {get_type_name(record)}"
            )
        record = deep_copy(record)
        return cls(
            id=record.get("id"),
            name=record.get("name", ""),
            environment=record.get("environment") or DEFAULT_ENVIRONMENT,
            parent=record.get("parent") or ROOT_GROUP_ID,
            rule=record.get("rule"),
            classes=record.get("classes") or {},
            variables=record.get("variables") or {},
            deleted=record.get("deleted") or {},
            extra={k: v for k, v in record.items() if k not in _GROUP_FIELDS},
        )

    def to_dict(self) -> dict:
        """The service's JSON representation; ``deleted`` is omitted when empty."""
        result = {
            "id": self.id,
            "name": self.name,
            "environment": self.environment,
            "parent": self.parent,
            "rule": self.rule,
            "classes": self.classes,
            "variables": self.variables,
        }
        if self.deleted:
            result["deleted"] = self.deleted
        result.update(self.extra)
        return deep_copy(result)


@dataclass(frozen=True)
class ClassDefinition:
    """A class declared in one environment; a parameter default of None means required."""
    environment: str
    name: str
    parameters: dict[str, Any] = field(default_factory=dict)

    @property
    def required_parameters(self) -> list[str]:
        return sorted(p for p, default in self.parameters.items() if default is None)

    @classmethod
    def from_dict(cls, record: dict) -> "ClassDefinition":
        return cls(
            environment=record.get("environment") or DEFAULT_ENVIRONMENT,
            name=record["name"],
            parameters=dict(record.get("parameters") or {}),
        )


class ClassCatalog:
    """One synchronization snapshot of the classes known per environment."""

    def __init__(self, definitions: Iterable[ClassDefinition] = ()):
        self._definitions: dict[tuple[str, str], ClassDefinition] = {
            (d.environment, d.name): d for d in definitions
        }

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "ClassCatalog":
        """Build a catalog from the service's class listing."""
        return cls(ClassDefinition.from_dict(r) for r in records)

    def get(self, environment: str, class_name: str) -> Optional[ClassDefinition]:
        return self._definitions.get((environment, class_name))

    def has_class(self, environment: str, class_name: str) -> bool:
        return (environment, class_name) in self._definitions

    def has_parameter(self, environment: str, class_name: str, parameter: str) -> bool:
        definition = self.get(environment, class_name)
        return definition is not None and parameter in definition.parameters

    def missing_references(self, group: Group) -> list[list[str]]:
        """
        Class paths the group refers to that this catalog no longer declares.

        A class missing from the group's environment yields ``[class]``; a
        declared class with a parameter that disappeared yields
        ``[class, parameter]``.
        """
        missing = []
        for class_name, parameters in group.classes.items():
            if not self.has_class(group.environment, class_name):
                missing.append([class_name])
                continue
            for parameter in parameters:
                if not self.has_parameter(group.environment, class_name, parameter):
                    missing.append([class_name, parameter])
        return missing

    def validate_parameters(
        self,
        environment: str,
        class_name: str,
        parameters: dict[str, Any]
    ) -> list[str]:
        """Required parameters of a class that ``parameters`` leaves unset."""
        definition = self.get(environment, class_name)
        if definition is None:
            return []
        return [p for p in definition.required_parameters if parameters.get(p) is None]

    def __len__(self) -> int:
        return len(self._definitions)


class GroupStore:
    """
    Arena of group snapshots addressed by id.

    ``store.lookup`` is a ready-made parent lookup for inheritance resolution.
    """

    def __init__(self, groups: Iterable[Group] = ()):
        self._groups: dict[str, Group] = {}
        for group in groups:
            self.add(group)

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "GroupStore":
        return cls(Group.from_dict(r) for r in records)

    def add(self, group: Group):
        self._groups[group.id] = group

    def lookup(self, group_id: str) -> Group:
        try:
            return self._groups[group_id]
        except KeyError:
            raise GroupNotFoundError(group_id) from None

    def __contains__(self, group_id: str) -> bool:
        return group_id in self._groups

    def __len__(self) -> int:
        return len(self._groups)
