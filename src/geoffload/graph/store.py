"""Entity store protocol and dict-based implementation.

The EntityStore protocol is everything the loader needs from a persistent
graph: an index lookup by label and property, entity and relationship
creation, and property/label writes. Transactions, deletion and traversal
are not part of the protocol; scoping a load is the caller's concern.

DictEntityStore keeps everything in memory and is what the tests and the
``parse`` command use. SqliteEntityStore provides persistent storage.
"""

from __future__ import annotations

import copy
from typing import Any, Protocol, runtime_checkable

from geoffload.graph.values import PropertyValue, values_equal

EntityId = int
RelationshipId = int


@runtime_checkable
class EntityStore(Protocol):
    """Storage backend protocol for GraphLoader.

    Implementations never receive null property values; the loader filters
    them out before writing. Store failures propagate to the caller as-is.
    """

    def find_entities(self, label: str, key: str, value: PropertyValue) -> set[EntityId]:
        """Return ids of entities with *label* whose *key* equals *value*.

        A *value* of None matches entities where *key* is not set.
        """
        ...

    def create_entity(self) -> EntityId:
        """Create a bare entity and return its id."""
        ...

    def add_label(self, entity_id: EntityId, label: str) -> None:
        """Add *label* to an entity (no-op if already present)."""
        ...

    def set_entity_property(self, entity_id: EntityId, key: str, value: PropertyValue) -> None:
        """Set a property on an entity, overwriting any existing value."""
        ...

    def create_relationship(self, start: EntityId, end: EntityId, type: str) -> RelationshipId:
        """Create a relationship of *type* from *start* to *end*."""
        ...

    def set_relationship_property(
        self, relationship_id: RelationshipId, key: str, value: PropertyValue
    ) -> None:
        """Set a property on a relationship."""
        ...


class DictEntityStore:
    """In-memory entity store.

    Entities and relationships are plain dicts keyed by sequential integer
    ids. Lookups scan all entities; this is meant for tests and small
    documents, not as an index.
    """

    def __init__(self) -> None:
        self._entities: dict[EntityId, dict[str, Any]] = {}
        self._relationships: dict[RelationshipId, dict[str, Any]] = {}
        self._next_entity_id: EntityId = 0
        self._next_relationship_id: RelationshipId = 0

    # -- Entities --------------------------------------------------------------

    def find_entities(self, label: str, key: str, value: PropertyValue) -> set[EntityId]:
        found: set[EntityId] = set()
        for entity_id, entity in self._entities.items():
            if label not in entity["labels"]:
                continue
            properties = entity["properties"]
            if value is None:
                if key not in properties:
                    found.add(entity_id)
            elif key in properties and values_equal(properties[key], value):
                found.add(entity_id)
        return found

    def create_entity(self) -> EntityId:
        entity_id = self._next_entity_id
        self._next_entity_id += 1
        self._entities[entity_id] = {"labels": set(), "properties": {}}
        return entity_id

    def add_label(self, entity_id: EntityId, label: str) -> None:
        self._entities[entity_id]["labels"].add(label)

    def set_entity_property(self, entity_id: EntityId, key: str, value: PropertyValue) -> None:
        if value is None:
            raise ValueError(f"Refusing to store null for property {key!r}")
        self._entities[entity_id]["properties"][key] = copy.copy(value)

    def get_entity(self, entity_id: EntityId) -> dict[str, Any] | None:
        """Return a copy of an entity's labels and properties, or None."""
        entity = self._entities.get(entity_id)
        return copy.deepcopy(entity) if entity is not None else None

    def entity_count(self) -> int:
        return len(self._entities)

    # -- Relationships ---------------------------------------------------------

    def create_relationship(self, start: EntityId, end: EntityId, type: str) -> RelationshipId:
        for endpoint in (start, end):
            if endpoint not in self._entities:
                raise KeyError(f"No entity with id {endpoint}")
        relationship_id = self._next_relationship_id
        self._next_relationship_id += 1
        self._relationships[relationship_id] = {
            "start": start,
            "end": end,
            "type": type,
            "properties": {},
        }
        return relationship_id

    def set_relationship_property(
        self, relationship_id: RelationshipId, key: str, value: PropertyValue
    ) -> None:
        if value is None:
            raise ValueError(f"Refusing to store null for property {key!r}")
        self._relationships[relationship_id]["properties"][key] = copy.copy(value)

    def get_relationship(self, relationship_id: RelationshipId) -> dict[str, Any] | None:
        rel = self._relationships.get(relationship_id)
        return copy.deepcopy(rel) if rel is not None else None

    def relationships_from(self, entity_id: EntityId) -> list[dict[str, Any]]:
        """Return copies of all relationships starting at *entity_id*."""
        return [
            copy.deepcopy(rel) for rel in self._relationships.values() if rel["start"] == entity_id
        ]

    def relationship_count(self) -> int:
        return len(self._relationships)
