"""Group inheritance resolution."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .models import OracleConfig, ResolvedTraits
from .groups import Group
from .comparator import ValueComparator
from .differ import render_diff
from .exceptions import AncestryCycleError
from .utils import deep_copy

logger = logging.getLogger(__name__)

ParentLookup = Callable[[str], Group]

TRAITS = ("classes", "variables")


class InheritanceOracle:
    """
    Predicts the classes and variables a group exposes with inheritance applied.

    The walk starts at the group itself and follows parent ids up to the root
    group. A class, a class parameter or a variable is only taken from a group
    when no group visited earlier already supplied it, so the nearest group
    wins and the root has the lowest priority.
    """

    def __init__(self, config: Optional[OracleConfig] = None):
        self.config = config or OracleConfig()
        self.comparator = ValueComparator(max_depth=self.config.max_depth)

    def resolve_inherited(self, group: Group, parent_lookup: ParentLookup) -> ResolvedTraits:
        """
        Merge a group's classes and variables with those of its ancestors.

        Args:
            group: The group whose effective traits are wanted
            parent_lookup: Fetches a group by id; its errors propagate unchanged

        Returns:
            ResolvedTraits with the merged classes and variables and the ids walked

        Raises:
            AncestryCycleError: The parent chain revisits a group or exceeds
                ``max_ancestry_depth``
        """
        traits = ResolvedTraits()
        visited: set[str] = set()
        current = group

        while True:
            if current.id in visited:
                raise AncestryCycleError(current.id, traits.ancestry + [current.id])
            if len(traits.ancestry) >= self.config.max_ancestry_depth:
                raise AncestryCycleError(
                    current.id,
                    traits.ancestry + [current.id],
                    max_depth=self.config.max_ancestry_depth
                )
            visited.add(current.id)
            traits.ancestry.append(current.id)

            logger.debug("Merging traits of group '%s' (%s)", current.name, current.id)
            self._merge(current, traits)

            if current.is_root():
                return traits

            current = parent_lookup(current.parent)

    def _merge(self, group: Group, traits: ResolvedTraits):
        for class_name, parameters in group.classes.items():
            merged = traits.classes.setdefault(class_name, {})
            for parameter, value in parameters.items():
                if parameter not in merged:
                    merged[parameter] = deep_copy(value)

        for variable, value in group.variables.items():
            if variable not in traits.variables:
                traits.variables[variable] = deep_copy(value)

    def verify_inheritance(
        self,
        group: Group,
        inherited_response: Any,
        parent_lookup: ParentLookup
    ) -> dict:
        """
        Compare resolved traits with the service's ``?inherited=true`` response.

        Returns:
            ``{trait: {"expected": ..., "got": ...}}`` for every trait that
            differs; empty when the service agrees
        """
        if isinstance(inherited_response, Group):
            inherited_response = inherited_response.to_dict()

        expected = self.resolve_inherited(group, parent_lookup).to_dict()
        mismatches = {}
        for trait in TRAITS:
            got = inherited_response.get(trait, {})
            if not self.comparator.equal(expected[trait], got):
                mismatches[trait] = {"expected": expected[trait], "got": got}
        return mismatches

    def assert_inheritance(
        self,
        group: Group,
        inherited_response: Any,
        parent_lookup: ParentLookup
    ):
        """Raise AssertionError naming the group when inherited traits disagree."""
        mismatches = self.verify_inheritance(group, inherited_response, parent_lookup)
        if mismatches:
            raise AssertionError(
                f"Inherited traits of group '{group.id}' do not match:\n"
                f"{render_diff(mismatches)}"
            )


def resolve_inherited(
    group: Group,
    parent_lookup: ParentLookup,
    config: Optional[OracleConfig] = None
) -> ResolvedTraits:
    """Convenience function to resolve a group's inherited traits."""
    return InheritanceOracle(config).resolve_inherited(group, parent_lookup)
