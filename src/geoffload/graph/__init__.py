"""Graph package - document model, entity stores and the loader.

A Subgraph is what the Geoff reader produces. GraphLoader resolves it against
an EntityStore (DictEntityStore in memory, SqliteEntityStore on disk).
"""

from geoffload.graph.export import (
    HookRecord,
    NodeRecord,
    RelationshipRecord,
    SubgraphRecord,
    export_subgraph,
)
from geoffload.graph.loader import GraphLoader
from geoffload.graph.sqlite_store import SqliteEntityStore
from geoffload.graph.store import DictEntityStore, EntityId, EntityStore, RelationshipId
from geoffload.graph.subgraph import AbstractNode, AbstractRelationship, Hook, Subgraph
from geoffload.graph.values import PropertyValue, ValueKind, format_value, kind_of, values_equal

__all__ = [
    "AbstractNode",
    "AbstractRelationship",
    "DictEntityStore",
    "EntityId",
    "EntityStore",
    "GraphLoader",
    "Hook",
    "HookRecord",
    "NodeRecord",
    "PropertyValue",
    "RelationshipId",
    "RelationshipRecord",
    "SqliteEntityStore",
    "Subgraph",
    "SubgraphRecord",
    "ValueKind",
    "export_subgraph",
    "format_value",
    "kind_of",
    "values_equal",
]
