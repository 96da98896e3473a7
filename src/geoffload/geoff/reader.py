"""Recursive-descent reader for Geoff documents.

A document is a sequence of statements separated by whitespace:

- paths of nodes joined by relationship boxes, ``(a)-[:KNOWS]->(b)``
- hook declarations, ``:Person:name:=>(a {name:"Alice"})``
- comments, ``/* ... */``
- boundary markers of four or more tildes, ``~~~~``

Parsing builds a Subgraph incrementally. Any error aborts the read; there is
no recovery and the partial Subgraph is dropped.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, TextIO

from geoffload.geoff.errors import UndirectedRelationshipError
from geoffload.geoff.literals import read_required_name, read_value
from geoffload.geoff.scanner import Scanner
from geoffload.graph.subgraph import AbstractNode, AbstractRelationship, Subgraph
from geoffload.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from geoffload.graph.values import PropertyValue

log = get_logger(__name__)

LEFT_ARROW = "<-"
RIGHT_ARROW = "->"
UNDIRECTED = "-"
BOUNDARY_MIN_LENGTH = 4


class GeoffReader:
    """Reads Geoff text from a string or text stream into Subgraphs."""

    def __init__(self, source: str | TextIO) -> None:
        self._scanner = Scanner(source)

    def has_more(self) -> bool:
        return self._scanner.has_more()

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def read_subgraph(self) -> Subgraph:
        """Read one document, stopping at a boundary marker or end of input."""
        scanner = self._scanner
        t0 = time.perf_counter()
        subgraph = Subgraph()
        scanner.read_whitespace()
        while scanner.has_more():
            if scanner.next_is("("):
                self._read_path_into(subgraph)
            elif scanner.next_is(":"):
                self._read_hook_into(subgraph)
            elif scanner.next_is("/"):
                subgraph.add_comment(self.read_comment())
            elif scanner.next_is("~"):
                self.read_boundary()
                break
            else:
                raise scanner.unexpected()
            scanner.read_whitespace()
        log.info(
            "subgraph_read",
            nodes=subgraph.order,
            relationships=subgraph.size,
            comments=len(subgraph.comments),
            elapsed_ms=round((time.perf_counter() - t0) * 1000, 3),
        )
        return subgraph

    def read_subgraphs(self) -> Iterator[Subgraph]:
        """Yield each boundary-separated document until input runs out."""
        while True:
            self._scanner.read_whitespace()
            if not self._scanner.has_more():
                return
            yield self.read_subgraph()

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def read_comment(self) -> str:
        scanner = self._scanner
        scanner.read_exact("/")
        scanner.read_exact("*")
        text = scanner.read_until_text("*/")
        if not text.endswith("*/"):
            raise scanner.end_of_input("Unterminated comment")
        return text[:-2].strip()

    def read_boundary(self) -> None:
        scanner = self._scanner
        for _ in range(BOUNDARY_MIN_LENGTH):
            scanner.read_exact("~")
        while scanner.next_is("~"):
            scanner.read()

    def _read_hook_into(self, subgraph: Subgraph) -> None:
        """Read ``:Label:key1:key2:=>(node)`` (``=>?`` for optional)."""
        scanner = self._scanner
        scanner.read_exact(":")
        scanner.read_whitespace()
        label = read_required_name(scanner, "hook label")
        scanner.read_whitespace()
        scanner.read_exact(":")
        scanner.read_whitespace()
        keys: list[str] = []
        while not scanner.next_is("="):
            keys.append(read_required_name(scanner, "hook key"))
            scanner.read_whitespace()
            scanner.read_exact(":")
            scanner.read_whitespace()
        if not keys:
            raise scanner.unexpected("Hook declaration requires at least one key")
        scanner.read_exact("=")
        scanner.read_exact(">")
        optional = False
        if scanner.next_is("?"):
            scanner.read()
            optional = True
        scanner.read_whitespace()
        node = subgraph.merge_node(self.read_node())
        node.set_hook(label, keys, optional)

    def _read_path_into(self, subgraph: Subgraph) -> None:
        """Read a node, any relationship hops, and optional shared properties."""
        scanner = self._scanner
        node = subgraph.merge_node(self.read_node())
        relationships: list[AbstractRelationship] = []
        scanner.read_whitespace()
        while scanner.next_is("<", "-"):
            arrow_in = self._read_arrow(LEFT_ARROW, UNDIRECTED)
            scanner.read_whitespace()
            rel_type, properties = self.read_relationship_box()
            scanner.read_whitespace()
            arrow_out = self._read_arrow(UNDIRECTED, RIGHT_ARROW)
            scanner.read_whitespace()
            line, column = scanner.line, scanner.column
            other = subgraph.merge_node(self.read_node())
            if arrow_in == UNDIRECTED and arrow_out == UNDIRECTED:
                raise UndirectedRelationshipError(
                    f"Relationship of type {rel_type!r} has no direction", line, column
                )
            if arrow_in == LEFT_ARROW:
                relationships.append(subgraph.add_relationship(other, rel_type, node, properties))
            if arrow_out == RIGHT_ARROW:
                relationships.append(subgraph.add_relationship(node, rel_type, other, properties))
            node = other
            scanner.read_whitespace()
        if scanner.next_is("{"):
            shared = self.read_property_map()
            if relationships:
                for rel in relationships:
                    rel.merge_properties(shared)
            else:
                node.merge_properties(shared)

    # -------------------------------------------------------------------------
    # Grammar units
    # -------------------------------------------------------------------------

    def _read_arrow(self, *allowed: str) -> str:
        scanner = self._scanner
        if scanner.next_is("<"):
            scanner.read()
            scanner.read_exact("-")
            arrow = LEFT_ARROW
        elif scanner.next_is("-"):
            scanner.read()
            if scanner.next_is(">"):
                scanner.read()
                arrow = RIGHT_ARROW
            else:
                arrow = UNDIRECTED
        else:
            raise scanner.unexpected("Expected an arrow")
        if arrow not in allowed:
            raise scanner.unexpected(f"Arrow {arrow!r} not allowed here")
        return arrow

    def read_labels(self) -> set[str]:
        labels: set[str] = set()
        while self._scanner.next_is(":"):
            self._scanner.read()
            labels.add(read_required_name(self._scanner, "label"))
        return labels

    def read_property_map(self) -> dict[str, PropertyValue]:
        scanner = self._scanner
        properties: dict[str, PropertyValue] = {}
        scanner.read_exact("{")
        scanner.read_whitespace()
        if not scanner.next_is("}"):
            while True:
                key = read_required_name(scanner, "property key")
                scanner.read_whitespace()
                scanner.read_exact(":")
                scanner.read_whitespace()
                properties[key] = read_value(scanner)
                scanner.read_whitespace()
                if not scanner.next_is(","):
                    break
                scanner.read()
                scanner.read_whitespace()
        scanner.read_exact("}")
        return properties

    def read_node(self) -> AbstractNode:
        """Read ``(name:Label {props})`` where every part is optional."""
        scanner = self._scanner
        name: str | None = None
        labels: set[str] = set()
        properties: dict[str, PropertyValue] = {}
        scanner.read_exact("(")
        scanner.read_whitespace()
        if not scanner.next_is(")", ":", "{"):
            name = read_required_name(scanner, "node name")
            scanner.read_whitespace()
        if scanner.next_is(":"):
            labels = self.read_labels()
            scanner.read_whitespace()
        if scanner.next_is("{"):
            properties = self.read_property_map()
            scanner.read_whitespace()
        scanner.read_exact(")")
        return AbstractNode(name, labels, properties)

    def read_relationship_box(self) -> tuple[str, dict[str, PropertyValue]]:
        """Read ``[:TYPE {props}]`` and return the type and properties.

        A relationship name, written ``[r:TYPE]`` or ``[:r:TYPE]``, is
        accepted and discarded.
        """
        scanner = self._scanner
        scanner.read_exact("[")
        scanner.read_whitespace()
        if not scanner.next_is(":"):
            read_required_name(scanner, "relationship name")
            scanner.read_whitespace()
        scanner.read_exact(":")
        rel_type = read_required_name(scanner, "relationship type")
        scanner.read_whitespace()
        if scanner.next_is(":"):
            scanner.read()
            rel_type = read_required_name(scanner, "relationship type")
            scanner.read_whitespace()
        properties: dict[str, PropertyValue] = {}
        if scanner.next_is("{"):
            properties = self.read_property_map()
            scanner.read_whitespace()
        scanner.read_exact("]")
        return rel_type, properties


def parse_geoff(source: str | TextIO) -> Subgraph:
    """Parse the first document in *source*."""
    return GeoffReader(source).read_subgraph()
