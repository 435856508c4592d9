"""Example usage of the classifier oracle."""

import json
import logging
import sys

from classifier_oracle import (
    DocumentSet,
    Group,
    GroupStore,
    InheritanceOracle,
    ROOT_GROUP_ID,
    StructuralDiffEngine,
    apply_deletion,
    apply_update,
    assert_exports_match,
    render_diff,
)

# Catalog as found in the baseline export
old_catalog = {
    "data": {
        "name": "agent1.example.com",
        "resources": DocumentSet([
            {"type": "Class", "title": "Main", "tags": DocumentSet(["class", "main"])},
            {"type": "File", "title": "/etc/motd", "tags": DocumentSet(["file", "web"])},
        ]),
    }
}

# Same catalog after an upgrade, with a retagged resource
new_catalog = {
    "data": {
        "name": "agent1.example.com",
        "resources": DocumentSet([
            {"type": "File", "title": "/etc/motd", "tags": DocumentSet(["webserver", "file"])},
            {"type": "Class", "title": "Main", "tags": DocumentSet(["main", "class"])},
        ]),
    }
}

root = Group(
    id=ROOT_GROUP_ID,
    name="default",
    parent=ROOT_GROUP_ID,
    classes={"vehicle": {"make": "bronco", "year": 1973}},
    variables={"site": "pdx"},
)
garage = Group(id="garage", name="garage", classes={"vehicle": {"make": "peugeot"}})


def main():
    print("=" * 60)
    print("Classifier Oracle - Example")
    print("=" * 60)

    engine = StructuralDiffEngine()
    result = engine.compare(old_catalog, new_catalog)

    print(f"\nMatch: {result.is_match}")
    print(f"Divergent paths: {', '.join(result.divergent_paths)}")
    print("\nDiff:")
    print(render_diff(result.diff))


def example_inheritance():
    """Predict inherited traits, then tombstone and restore a parameter."""
    print("\n" + "=" * 60)
    print("Example with Inheritance")
    print("=" * 60)

    store = GroupStore([root, garage])
    oracle = InheritanceOracle()

    traits = oracle.resolve_inherited(garage, store.lookup)
    print(f"\nAncestry: {' -> '.join(traits.ancestry)}")
    print(json.dumps(traits.to_dict(), indent=2))

    deleted = apply_deletion(garage, ["vehicle", "make"])
    print("\nAfter the class catalog drops 'make':")
    print(json.dumps(deleted.to_dict()["deleted"], indent=2))

    restored = apply_update(deleted, {"classes": {"vehicle": {"make": "citroen"}}})
    print("\nAfter setting a new value:")
    print(json.dumps(restored.to_dict(), indent=2))


def example_exports(export_a, export_b):
    """Compare two export archives given on the command line."""
    print("\n" + "=" * 60)
    print("Example with Export Archives")
    print("=" * 60)

    report = assert_exports_match(export_a, export_b)
    print(json.dumps(report.to_dict(), indent=2))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
    example_inheritance()
    if len(sys.argv) == 3:
        example_exports(sys.argv[1], sys.argv[2])
