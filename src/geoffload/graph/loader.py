"""Resolve a Subgraph against an entity store.

Loading runs in two passes. Every node is resolved first, one at a time in
node table order:

- a node without a hook always becomes a new entity;
- a hooked node looks up candidates for each hook key (label + key + value)
  and intersects the results. A non-empty intersection yields the existing
  entity. Otherwise a required hook creates a new entity and an optional
  hook leaves the node unresolved.

Labels and non-null properties are then merged onto the resolved entity.
Null values are never written, so hook key placeholders cannot clobber
stored data.

Relationships are created afterwards in declaration order. One whose
endpoint is unresolved (an unmatched optional hook) is dropped.
"""

from __future__ import annotations

import time
from functools import reduce
from typing import TYPE_CHECKING

from geoffload.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from geoffload.graph.store import EntityId, EntityStore, RelationshipId
    from geoffload.graph.subgraph import AbstractNode, AbstractRelationship, Subgraph
    from geoffload.graph.values import PropertyValue

log = get_logger(__name__)


class GraphLoader:
    """Loads Subgraphs into an EntityStore.

    Transaction scoping belongs to the caller; the loader issues plain store
    calls and lets any store error propagate.
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    def load(self, subgraph: Subgraph) -> dict[str, EntityId]:
        """Load *subgraph* and return entity ids of its explicitly named nodes.

        Unnamed nodes and nodes whose optional hook did not match are left
        out of the result.
        """
        log.info(
            "subgraph_load_started",
            nodes=subgraph.order,
            relationships=subgraph.size,
        )
        t0 = time.perf_counter()
        resolved: dict[str, EntityId | None] = {}
        named: dict[str, EntityId] = {}
        for name, node in subgraph.nodes.items():
            entity_id = self.load_node(node)
            resolved[name] = entity_id
            if entity_id is not None and node.named:
                named[name] = entity_id

        created = 0
        for rel in subgraph.relationships:
            if self.load_relationship(rel, resolved) is not None:
                created += 1

        log.info(
            "subgraph_loaded",
            nodes=subgraph.order,
            resolved_nodes=sum(1 for e in resolved.values() if e is not None),
            relationships=created,
            dropped_relationships=subgraph.size - created,
            elapsed_ms=round((time.perf_counter() - t0) * 1000, 3),
        )
        return named

    def resolve_hook(self, node: AbstractNode) -> set[EntityId]:
        """Return entities matching all of *node*'s hook keys.

        Each key is looked up independently and the candidate sets are
        intersected. An absent key value matches entities where the key is
        unset.
        """
        hook = node.hook
        if hook is None:
            return set()
        candidates = (
            self.store.find_entities(hook.label, key, node.properties.get(key))
            for key in hook.keys
        )
        return reduce(set.intersection, candidates)

    def load_node(self, node: AbstractNode) -> EntityId | None:
        """Resolve or create the entity for *node* and merge its data onto it.

        Returns:
            The entity id, or None if an optional hook found no match.
        """
        entity_id: EntityId | None = None
        if node.hook is not None:
            matches = self.resolve_hook(node)
            if matches:
                entity_id = min(matches)
                if len(matches) > 1:
                    log.warning(
                        "hook_ambiguous",
                        node=node.name,
                        label=node.hook.label,
                        keys=list(node.hook.keys),
                        matches=len(matches),
                        chosen=entity_id,
                    )
                log.debug("node_matched", node=node.name, entity=entity_id)
            elif node.hook.optional:
                log.debug("node_unmatched", node=node.name, label=node.hook.label)
                return None
        if entity_id is None:
            entity_id = self.store.create_entity()
            log.debug("node_created", node=node.name, entity=entity_id)
        for label in sorted(node.labels):
            self.store.add_label(entity_id, label)
        for key, value in _non_null(node.properties).items():
            self.store.set_entity_property(entity_id, key, value)
        return entity_id

    def load_relationship(
        self,
        rel: AbstractRelationship,
        resolved: Mapping[str, EntityId | None],
    ) -> RelationshipId | None:
        """Create *rel* between its resolved endpoints.

        Returns:
            The relationship id, or None if an endpoint did not resolve.
        """
        start = resolved.get(rel.start)
        end = resolved.get(rel.end)
        if start is None or end is None:
            log.debug("relationship_dropped", type=rel.type, start=rel.start, end=rel.end)
            return None
        relationship_id = self.store.create_relationship(start, end, rel.type)
        for key, value in _non_null(rel.properties).items():
            self.store.set_relationship_property(relationship_id, key, value)
        return relationship_id


def _non_null(properties: Mapping[str, PropertyValue]) -> dict[str, PropertyValue]:
    return {key: value for key, value in properties.items() if value is not None}
