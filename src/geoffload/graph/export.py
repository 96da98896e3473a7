"""Pydantic records for exporting a parsed Subgraph as JSON.

These models describe the document model as data, independent of any store.
Nodes are sorted by name and labels alphabetically so that exporting the
same document twice gives identical output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from geoffload.graph.subgraph import AbstractNode, Subgraph


class HookRecord(BaseModel):
    """Uniqueness hook attached to a node."""

    label: str = Field(min_length=1)
    keys: list[str] = Field(min_length=1)
    optional: bool = False


class NodeRecord(BaseModel):
    """A merged node definition."""

    name: str
    named: bool = Field(description="False when the name was generated")
    labels: list[str] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)
    hook: HookRecord | None = None


class RelationshipRecord(BaseModel):
    """A relationship definition, endpoints given by node name."""

    start: str
    type: str = Field(min_length=1)
    end: str
    properties: dict[str, Any] = Field(default_factory=dict)


class SubgraphRecord(BaseModel):
    """A whole parsed document."""

    nodes: list[NodeRecord] = Field(default_factory=list)
    relationships: list[RelationshipRecord] = Field(default_factory=list)
    comments: list[str] = Field(default_factory=list)


def _node_record(node: AbstractNode) -> NodeRecord:
    hook = None
    if node.hook is not None:
        hook = HookRecord(
            label=node.hook.label, keys=list(node.hook.keys), optional=node.hook.optional
        )
    return NodeRecord(
        name=node.name,
        named=node.named,
        labels=sorted(node.labels),
        properties=dict(node.properties),
        hook=hook,
    )


def export_subgraph(subgraph: Subgraph) -> SubgraphRecord:
    """Convert *subgraph* into a serialisable record."""
    return SubgraphRecord(
        nodes=[_node_record(subgraph.nodes[name]) for name in sorted(subgraph.nodes)],
        relationships=[
            RelationshipRecord(
                start=rel.start, type=rel.type, end=rel.end, properties=dict(rel.properties)
            )
            for rel in subgraph.relationships
        ],
        comments=list(subgraph.comments),
    )
