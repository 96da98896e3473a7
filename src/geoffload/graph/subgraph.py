"""In-memory document model built by the Geoff reader.

A Subgraph holds merged node definitions keyed by name, an ordered list of
relationship definitions and any comments found in the source. Nodes are
owned by the Subgraph's node table; relationships refer to their endpoints
by name rather than holding node objects.

Nothing here talks to a store. See geoffload.graph.loader for resolution.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from geoffload.graph.values import PropertyValue, format_value

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

_BARE_NAME = re.compile(r"\w+")


def format_name(name: str) -> str:
    """Render a name bare if it is an identifier, quoted otherwise."""
    if _BARE_NAME.fullmatch(name):
        return name
    return format_value(name)


@dataclass(frozen=True)
class Hook:
    """Uniqueness declaration binding a node to a label and key properties.

    Attributes:
        label: Label the matching store entity must carry.
        keys: Property keys that must all match, in declaration order.
        optional: If True, a failed match leaves the node unresolved instead
            of creating a new entity.
    """

    label: str
    keys: tuple[str, ...]
    optional: bool = False

    def render(self) -> str:
        parts = [self.label, *self.keys]
        arrow = "=>?" if self.optional else "=>"
        return ":" + ":".join(format_name(p) for p in parts) + ":" + arrow


class AbstractNode:
    """A node definition that has not yet been resolved against a store.

    Nodes declared without a name get a random synthetic one and are marked
    unnamed; they take part in loading but never appear in load results.
    """

    def __init__(
        self,
        name: str | None = None,
        labels: Iterable[str] | None = None,
        properties: Mapping[str, PropertyValue] | None = None,
    ) -> None:
        if name is None:
            self.name = str(uuid.uuid4())
            self.named = False
        else:
            self.name = name
            self.named = True
        self.labels: set[str] = set()
        self.properties: dict[str, PropertyValue] = {}
        self.hook: Hook | None = None
        self.merge_labels(labels)
        self.merge_properties(properties)

    def __repr__(self) -> str:
        return f"AbstractNode({self.render()})"

    def __str__(self) -> str:
        return self.render()

    def merge_labels(self, labels: Iterable[str] | None) -> None:
        if labels:
            self.labels.update(labels)

    def merge_properties(self, properties: Mapping[str, PropertyValue] | None) -> None:
        """Merge *properties* in, incoming values overwriting existing ones."""
        if properties:
            self.properties.update(properties)

    def merge_node(self, other: AbstractNode) -> None:
        """Fold another declaration of the same node into this one.

        An existing hook is kept unless *other* carries one of its own.
        """
        self.merge_labels(other.labels)
        self.merge_properties(other.properties)
        if other.hook is not None:
            self.hook = other.hook

    def set_hook(self, label: str, keys: Iterable[str], optional: bool = False) -> None:
        """Attach a hook, adding its label and placeholder keys.

        Hook keys the node does not yet define are added with a null value,
        which the loader never writes to the store.
        """
        keys = tuple(keys)
        if not keys:
            raise ValueError("A hook requires at least one key")
        self.hook = Hook(label, keys, optional)
        self.labels.add(label)
        for key in keys:
            self.properties.setdefault(key, None)

    def render(self) -> str:
        """Render this node as Geoff notation, hook prefix included."""
        text = format_name(self.name) if self.named else ""
        text += "".join(":" + format_name(label) for label in sorted(self.labels))
        if self.properties:
            pairs = ",".join(
                f"{format_name(key)}:{format_value(value)}"
                for key, value in self.properties.items()
            )
            text += (" " if text else "") + "{" + pairs + "}"
        node = f"({text})"
        if self.hook is not None:
            return self.hook.render() + node
        return node


@dataclass
class AbstractRelationship:
    """A relationship definition between two named node table entries."""

    start: str
    type: str
    end: str
    properties: dict[str, PropertyValue] = field(default_factory=dict)

    def merge_properties(self, properties: Mapping[str, PropertyValue] | None) -> None:
        if properties:
            self.properties.update(properties)


class Subgraph:
    """Graph-in-progress produced by a single parse.

    Attributes:
        nodes: Merged node definitions keyed by name.
        relationships: Relationship definitions in declaration order.
        comments: Comment text in source order.
    """

    def __init__(self) -> None:
        self.nodes: dict[str, AbstractNode] = {}
        self.relationships: list[AbstractRelationship] = []
        self.comments: list[str] = []

    def __repr__(self) -> str:
        return f"Subgraph(order={self.order}, size={self.size})"

    @property
    def order(self) -> int:
        """Number of distinct nodes."""
        return len(self.nodes)

    @property
    def size(self) -> int:
        """Number of relationships."""
        return len(self.relationships)

    def merge_node(self, node: AbstractNode) -> AbstractNode:
        """Add *node* or fold it into the existing entry with the same name.

        Returns:
            The node table entry now holding the merged definition.
        """
        existing = self.nodes.get(node.name)
        if existing is None:
            self.nodes[node.name] = node
            return node
        existing.merge_node(node)
        return existing

    def add_relationship(
        self,
        start: AbstractNode,
        type: str,
        end: AbstractNode,
        properties: Mapping[str, PropertyValue] | None = None,
    ) -> AbstractRelationship:
        """Merge both endpoints and append a relationship between them."""
        self.merge_node(start)
        self.merge_node(end)
        rel = AbstractRelationship(start.name, type, end.name, dict(properties or {}))
        self.relationships.append(rel)
        return rel

    def add_comment(self, comment: str) -> None:
        self.comments.append(comment)

    def named_nodes(self) -> dict[str, AbstractNode]:
        return {name: node for name, node in self.nodes.items() if node.named}
