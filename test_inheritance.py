"""Tests for group records and inheritance resolution."""

import copy

import pytest
from classifier_oracle import (
    ROOT_GROUP_ID,
    AncestryCycleError,
    Group,
    GroupNotFoundError,
    GroupStore,
    GroupValidationError,
    InheritanceOracle,
    OracleConfig,
    resolve_inherited,
)


ROOT = Group(id=ROOT_GROUP_ID, name="default", parent=ROOT_GROUP_ID)


def make_store(*groups):
    return GroupStore((ROOT,) + groups)


class TestResolveInherited:
    """Test nearest-wins merging up the parent chain."""

    def setup_method(self):
        self.oracle = InheritanceOracle()

    def test_root_alone(self):
        """Test that the root resolves to its own traits."""
        root = Group(
            id=ROOT_GROUP_ID,
            parent=ROOT_GROUP_ID,
            classes={"ntp": {"servers": ["pool.ntp.org"]}},
            variables={"site": "pdx"},
        )
        traits = self.oracle.resolve_inherited(root, make_store().lookup)
        assert traits.classes == {"ntp": {"servers": ["pool.ntp.org"]}}
        assert traits.variables == {"site": "pdx"}
        assert traits.ancestry == [ROOT_GROUP_ID]

    def test_nearest_group_wins(self):
        """Test that a parameter set nearer to the group overrides the root."""
        root = Group(id=ROOT_GROUP_ID, parent=ROOT_GROUP_ID, classes={"c": {"p": "1"}})
        a = Group(id="a", name="A", parent=ROOT_GROUP_ID, classes={"c": {}})
        b = Group(id="b", name="B", parent="a", classes={"c": {"p": "2"}})
        store = GroupStore([root, a, b])

        assert self.oracle.resolve_inherited(b, store.lookup).classes == {"c": {"p": "2"}}
        assert self.oracle.resolve_inherited(a, store.lookup).classes == {"c": {"p": "1"}}

    def test_parameters_merge_across_groups(self):
        """Test that parameters of the same class merge per parameter."""
        a = Group(id="a", classes={"vehicle": {"make": "bronco", "year": 1973}})
        b = Group(id="b", parent="a", classes={"vehicle": {"make": "peugeot"}})
        traits = self.oracle.resolve_inherited(b, make_store(a, b).lookup)
        assert traits.classes == {"vehicle": {"make": "peugeot", "year": 1973}}

    def test_classes_union(self):
        """Test that classes declared only by ancestors are inherited."""
        a = Group(id="a", classes={"apache": {}})
        b = Group(id="b", parent="a", classes={"mysql": {"port": 3306}})
        traits = self.oracle.resolve_inherited(b, make_store(a, b).lookup)
        assert traits.classes == {"apache": {}, "mysql": {"port": 3306}}

    def test_variables(self):
        """Test that variables follow the same precedence as parameters."""
        root = Group(id=ROOT_GROUP_ID, parent=ROOT_GROUP_ID, variables={"dc": "east", "tier": "x"})
        a = Group(id="a", variables={"dc": "west"})
        traits = self.oracle.resolve_inherited(a, GroupStore([root, a]).lookup)
        assert traits.variables == {"dc": "west", "tier": "x"}

    def test_null_value_still_shadows(self):
        """Test that a null value set by a nearer group wins over an ancestor's value."""
        a = Group(id="a", variables={"dc": "east"})
        b = Group(id="b", parent="a", variables={"dc": None})
        traits = self.oracle.resolve_inherited(b, make_store(a, b).lookup)
        assert traits.variables == {"dc": None}

    def test_ancestry_order(self):
        """Test that the walked ids run from the group to the root."""
        a = Group(id="a")
        b = Group(id="b", parent="a")
        traits = self.oracle.resolve_inherited(b, make_store(a, b).lookup)
        assert traits.ancestry == ["b", "a", ROOT_GROUP_ID]

    def test_inputs_not_mutated(self):
        """Test that resolution never modifies the groups it reads."""
        a = Group(id="a", classes={"c": {"list": [1, 2]}})
        b = Group(id="b", parent="a", classes={"c": {"p": "x"}})
        before = (copy.deepcopy(a.to_dict()), copy.deepcopy(b.to_dict()))

        traits = self.oracle.resolve_inherited(b, make_store(a, b).lookup)
        traits.classes["c"]["list"].append(3)

        assert (a.to_dict(), b.to_dict()) == before

    def test_module_function(self):
        """Test the convenience function."""
        a = Group(id="a", variables={"x": 1})
        assert resolve_inherited(a, make_store(a).lookup).variables == {"x": 1}

    def test_to_dict(self):
        """Test that resolved traits serialize to classes and variables."""
        a = Group(id="a", classes={"c": {}}, variables={"v": True})
        traits = self.oracle.resolve_inherited(a, make_store(a).lookup)
        assert traits.to_dict() == {"classes": {"c": {}}, "variables": {"v": True}}


class TestAncestryErrors:
    """Test failure modes of the parent walk."""

    def test_cycle_detected(self):
        """Test that two groups parenting each other raise instead of looping."""
        x = Group(id="x", parent="y")
        y = Group(id="y", parent="x")
        store = GroupStore([x, y])

        with pytest.raises(AncestryCycleError) as exc_info:
            resolve_inherited(x, store.lookup)
        assert exc_info.value.chain == ["x", "y", "x"]
        assert exc_info.value.max_depth is None
        assert "cycle detected" in str(exc_info.value)

    def test_self_parent_rejected(self):
        """Test that a non-root group cannot be its own parent."""
        with pytest.raises(GroupValidationError):
            Group(id="x", parent="x")

    def test_max_ancestry_depth(self):
        """Test that an overly long chain raises with a depth-limit message."""
        groups = [Group(id="g1")]
        for i in range(2, 6):
            groups.append(Group(id=f"g{i}", parent=f"g{i - 1}"))
        store = make_store(*groups)

        config = OracleConfig(max_ancestry_depth=3)
        with pytest.raises(AncestryCycleError) as exc_info:
            resolve_inherited(groups[-1], store.lookup, config)
        assert exc_info.value.max_depth == 3
        assert "depth limit (3) exceeded" in str(exc_info.value)
        assert "cycle" not in str(exc_info.value)

        assert len(resolve_inherited(groups[-1], store.lookup).ancestry) == 6

    def test_lookup_errors_propagate(self):
        """Test that a missing parent surfaces the lookup's own error."""
        orphan = Group(id="orphan", parent="gone")
        with pytest.raises(GroupNotFoundError) as exc_info:
            resolve_inherited(orphan, make_store(orphan).lookup)
        assert exc_info.value.group_id == "gone"

    def test_custom_lookup_error(self):
        """Test that errors from a caller-supplied lookup are not wrapped."""
        def lookup(group_id):
            raise KeyError(group_id)

        with pytest.raises(KeyError):
            resolve_inherited(Group(id="a", parent="b"), lookup)


class TestVerifyInheritance:
    """Test checking the service's inherited view against the prediction."""

    def setup_method(self):
        self.oracle = InheritanceOracle()
        self.parent = Group(id="a", classes={"c": {"p": "1", "q": "2"}})
        self.child = Group(id="b", parent="a", classes={"c": {"p": "3"}})
        self.store = make_store(self.parent, self.child)

    def test_matching_response(self):
        """Test that a correct inherited response produces no mismatches."""
        response = dict(self.child.to_dict(), classes={"c": {"q": "2", "p": "3"}}, variables={})
        assert self.oracle.verify_inheritance(self.child, response, self.store.lookup) == {}
        self.oracle.assert_inheritance(self.child, response, self.store.lookup)

    def test_mismatched_response(self):
        """Test that a wrong parameter is reported with expected and got."""
        response = {"classes": {"c": {"p": "1", "q": "2"}}, "variables": {}}
        mismatches = self.oracle.verify_inheritance(self.child, response, self.store.lookup)
        assert list(mismatches) == ["classes"]
        assert mismatches["classes"]["expected"] == {"c": {"p": "3", "q": "2"}}
        assert mismatches["classes"]["got"] == {"c": {"p": "1", "q": "2"}}

    def test_group_response(self):
        """Test that a Group can stand in for the raw response."""
        response = Group(id="b", parent="a", classes={"c": {"p": "3", "q": "2"}})
        assert self.oracle.verify_inheritance(self.child, response, self.store.lookup) == {}

    def test_assert_names_group(self):
        """Test that the assertion message names the group and shows the diff."""
        response = {"classes": {}, "variables": {}}
        with pytest.raises(AssertionError) as exc_info:
            self.oracle.assert_inheritance(self.child, response, self.store.lookup)
        message = str(exc_info.value)
        assert "'b'" in message
        assert '"expected"' in message


class TestGroupRecords:
    """Test group snapshots and the group store."""

    def test_round_trip_keeps_unknown_keys(self):
        """Test that fields the oracle does not model survive serialization."""
        record = {
            "id": "a",
            "name": "web",
            "environment": "staging",
            "parent": ROOT_GROUP_ID,
            "rule": ["=", "name", "web1"],
            "classes": {"apache": {"port": 80}},
            "variables": {},
            "environment_trumps": False,
            "description": "web servers",
        }
        group = Group.from_dict(record)
        assert group.extra == {"environment_trumps": False, "description": "web servers"}
        assert group.to_dict() == record

    def test_defaults(self):
        """Test defaults for a minimal record."""
        group = Group.from_dict({"id": "a"})
        assert group.parent == ROOT_GROUP_ID
        assert group.environment == "production"
        assert group.classes == {}
        assert "deleted" not in group.to_dict()

    def test_from_dict_copies(self):
        """Test that the snapshot does not share state with the source record."""
        record = {"id": "a", "classes": {"c": {"p": [1]}}}
        group = Group.from_dict(record)
        record["classes"]["c"]["p"].append(2)
        assert group.classes == {"c": {"p": [1]}}

    @pytest.mark.parametrize("record", [
        {},
        {"id": "a", "classes": ["apache"]},
        {"id": "a", "classes": {"c": "not-a-map"}},
        {"id": "a", "variables": "x"},
    ])
    def test_invalid_records(self, record):
        """Test that malformed records are rejected."""
        with pytest.raises(GroupValidationError):
            Group.from_dict(record)

    def test_root_detection(self):
        """Test that only the root group is its own parent."""
        assert ROOT.is_root() is True
        assert Group(id="a").is_root() is False

    def test_store_lookup(self):
        """Test adding to and looking up in the store."""
        store = GroupStore.from_records([{"id": "a"}, {"id": "b", "parent": "a"}])
        assert len(store) == 2
        assert "b" in store
        assert store.lookup("b").parent == "a"
        with pytest.raises(GroupNotFoundError):
            store.lookup("c")
