"""Tests for the outline store and location resolution."""

from callgraph_cli.languages import Go
from callgraph_cli.models import NodeId, Position, SymbolKind, SymbolLocation
from callgraph_cli.outline_store import OutlineStore


class TestAddFile:
    """Tests for OutlineStore.add_file."""

    def test_add_same_path_twice(self, make_symbol):
        """The second add is rejected and the first outline is kept."""
        store = OutlineStore()
        first = [make_symbol("first", start=(1, 1), end=(1, 10))]
        second = [make_symbol("second", start=(2, 1), end=(2, 10))]

        assert store.add_file("a.rs", first) is True
        assert store.add_file("a.rs", second) is False

        outline = store.get("a.rs")
        assert [s.name for s in outline.symbols] == ["first"]
        assert len(store) == 1

    def test_ids_are_dense_and_one_based(self, make_symbol):
        store = OutlineStore()
        for name in ("a.py", "b.py", "c.py"):
            store.add_file(name, [make_symbol("f")])

        assert [o.id for o in store] == [1, 2, 3]
        assert store.by_id(2).path == "b.py"
        assert store.by_id(0) is None
        assert store.by_id(4) is None
        assert store.paths() == {1: "a.py", 2: "b.py", 3: "c.py"}

    def test_excluded_file_consumes_no_id(self, make_symbol):
        store = OutlineStore(exclude=Go().should_exclude)

        assert store.add_file("pkg/cart_test.go", [make_symbol("TestCart")]) is False
        assert store.add_file("pkg/cart.go", [make_symbol("Cart")]) is True

        assert "pkg/cart_test.go" not in store
        assert store.get("pkg/cart.go").id == 1


class TestResolve:
    """Tests for node_id / resolve."""

    def test_resolve_nested_symbol(self, make_symbol):
        store = OutlineStore()
        method = make_symbol("save", SymbolKind.METHOD, start=(3, 4), end=(5, 0))
        store.add_file("repo.py", [make_symbol("Repo", SymbolKind.CLASS, start=(1, 0), end=(9, 0), children=[method])])

        assert store.resolve(SymbolLocation("repo.py", Position(3, 4))) == NodeId(1, 3, 4)
        assert store.resolve(SymbolLocation("repo.py", Position(1, 0))) == NodeId(1, 1, 0)

    def test_resolve_requires_symbol_anchor(self, make_symbol):
        store = OutlineStore()
        store.add_file("repo.py", [make_symbol("Repo", start=(1, 0), end=(9, 0))])

        location = SymbolLocation("repo.py", Position(4, 2))
        assert store.resolve(location) is None
        # node_id only needs the file
        assert store.node_id(location) == NodeId(1, 4, 2)

    def test_unknown_file(self):
        store = OutlineStore()
        location = SymbolLocation("missing.py", Position(0, 0))
        assert store.resolve(location) is None
        assert store.node_id(location) is None
