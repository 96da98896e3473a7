"""Tests for the in-memory document model."""

from __future__ import annotations

import pytest

from geoffload.geoff import parse_geoff
from geoffload.graph import AbstractNode, Hook, Subgraph


def _reparse(node: AbstractNode) -> AbstractNode:
    subgraph = parse_geoff(node.render())
    assert subgraph.order == 1
    return next(iter(subgraph.nodes.values()))


class TestAbstractNode:
    """Construction and merging."""

    def test_unnamed_nodes_get_unique_names(self) -> None:
        a, b = AbstractNode(), AbstractNode()
        assert not a.named
        assert a.name != b.name

    def test_merge_node(self) -> None:
        node = AbstractNode("a", {"X"}, {"p": 1, "q": 2})
        node.merge_node(AbstractNode("a", {"Y"}, {"q": 3}))
        assert node.labels == {"X", "Y"}
        assert node.properties == {"p": 1, "q": 3}

    def test_merge_keeps_hook(self) -> None:
        node = AbstractNode("a")
        node.set_hook("Person", ["name"])
        node.merge_node(AbstractNode("a", {"Z"}))
        assert node.hook == Hook("Person", ("name",))

    def test_set_hook_adds_label_and_placeholders(self) -> None:
        node = AbstractNode("a", properties={"name": "Ann"})
        node.set_hook("Person", ["name", "email"], optional=True)
        assert "Person" in node.labels
        assert node.properties == {"name": "Ann", "email": None}
        assert node.hook is not None and node.hook.optional

    def test_set_hook_requires_keys(self) -> None:
        with pytest.raises(ValueError, match="at least one key"):
            AbstractNode("a").set_hook("Person", [])


class TestRender:
    """Rendering nodes back to notation."""

    def test_render_named_node(self) -> None:
        node = AbstractNode("a", {"B", "A"}, {"k": "v", "n": [1, 2]})
        assert node.render() == '(a:A:B {k:"v",n:[1,2]})'

    def test_render_quotes_non_identifiers(self) -> None:
        node = AbstractNode("Mr Smith", {"Job Title"})
        assert str(node) == '("Mr Smith":"Job Title")'

    def test_render_unnamed_node(self) -> None:
        assert AbstractNode(None, {"X"}).render() == "(:X)"
        assert AbstractNode().render() == "()"

    def test_render_hook(self) -> None:
        node = AbstractNode("p")
        node.set_hook("Person", ["name"], optional=True)
        assert node.render() == ":Person:name:=>?(p:Person {name:null})"

    @pytest.mark.parametrize(
        "node",
        [
            AbstractNode("alice", {"Person", "Admin"}, {"age": 33, "score": 1.5}),
            AbstractNode(None, {"Thing"}, {"tags": ["a", "b"], "ok": True, "big": 1e20}),
            AbstractNode("Mr Smith", set(), {"quote": 'He said "hi"\n'}),
            AbstractNode("abc\n", {"L\n"}, {"k\n": 1}),
            AbstractNode("", {""}, {"": 1}),
        ],
    )
    def test_round_trip(self, node: AbstractNode) -> None:
        """Rendering and re-parsing keeps anonymity, labels and properties."""
        parsed = _reparse(node)
        assert parsed.named == node.named
        if node.named:
            assert parsed.name == node.name
        assert parsed.labels == node.labels
        assert parsed.properties == node.properties

    def test_render_quotes_trailing_newline(self) -> None:
        node = AbstractNode("abc\n", {"L\n"}, {"k\n": 1})
        assert node.render() == '("abc\\n":"L\\n" {"k\\n":1})'

    def test_round_trip_hook(self) -> None:
        node = AbstractNode("p", {"User"}, {"name": "Ann"})
        node.set_hook("Person", ["name", "email"])
        parsed = _reparse(node)
        assert parsed.hook == node.hook
        assert parsed.properties == node.properties


class TestSubgraph:
    """Node table and relationship list."""

    def test_merge_node_returns_table_entry(self) -> None:
        subgraph = Subgraph()
        first = subgraph.merge_node(AbstractNode("a", {"X"}))
        second = subgraph.merge_node(AbstractNode("a", {"Y"}))
        assert first is second
        assert subgraph.nodes["a"].labels == {"X", "Y"}

    def test_add_relationship_merges_endpoints(self) -> None:
        subgraph = Subgraph()
        rel = subgraph.add_relationship(AbstractNode("a"), "R", AbstractNode("b"), {"w": 1})
        assert set(subgraph.nodes) == {"a", "b"}
        assert (rel.start, rel.type, rel.end) == ("a", "R", "b")
        assert rel.properties == {"w": 1}
        assert subgraph.size == 1

    def test_named_nodes_excludes_unnamed(self) -> None:
        subgraph = Subgraph()
        subgraph.merge_node(AbstractNode("a"))
        subgraph.merge_node(AbstractNode())
        assert subgraph.order == 2
        assert set(subgraph.named_nodes()) == {"a"}
