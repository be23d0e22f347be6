"""
Unit tests for the weighted Graph container.
"""

from market_graph import Graph, Vertex


def test_empty_graph():
    g = Graph()

    assert len(g) == 0
    assert g.is_directed is False
    assert g.get_vertices() == []
    assert g.get_edges() == []


def test_vertex_repr():
    assert repr(Vertex(1)) == "Vertex(1)"
    assert repr(Vertex("A")) == "Vertex('A')"


def test_add_vertices():
    g = Graph()
    for vid in (1, 2, 3):
        g.add_vertex(vid)

    assert len(g) == 3
    assert {v.id for v in g.get_vertices()} == {1, 2, 3}
    assert all(v.edges == {} for v in g.get_vertices())


def test_add_vertex_is_idempotent_and_keeps_edges():
    g = Graph()
    g.add_edge(1, "A", 5.0)

    g.add_vertex(1)
    g.add_vertex(1)

    assert len(g) == 2
    assert g.outgoing(1) == {"A": 5.0}
    assert g.outgoing("A") == {1: 5.0}


def test_add_edge_creates_endpoints():
    g = Graph()
    g.add_edge(1, 2, 10)
    g.add_edge(2, 3, 20)

    assert 1 in g and 2 in g and 3 in g
    assert len(g) == 3
    assert g.weight(1, 2) == 10
    assert g.weight(2, 3) == 20


def test_undirected_edges_are_mirrored():
    g = Graph()
    g.add_edge(1, 2, 10)

    assert g.outgoing(1) == {2: 10.0}
    assert g.outgoing(2) == {1: 10.0}


def test_directed_edges_are_one_way():
    g = Graph(directed=True)
    g.add_edge(1, 2, 10)

    assert g.is_directed is True
    assert g.outgoing(1) == {2: 10.0}
    assert g.outgoing(2) == {}
    assert g.weight(2, 1) is None


def test_readding_edge_overwrites_weight():
    g = Graph()
    g.add_edge(1, "A", 3)
    g.add_edge(1, "A", 7)

    assert g.outgoing(1) == {"A": 7.0}
    assert g.outgoing("A") == {1: 7.0}
    assert len(g.get_edges()) == 2


def test_get_edges_lists_both_orientations_for_undirected():
    g = Graph()
    g.add_edge(1, 2, 10)
    g.add_edge(2, 3, 20)

    edges = g.get_edges()

    assert len(edges) == 4
    assert set(edges) == {(1, 2, 10), (2, 1, 10), (2, 3, 20), (3, 2, 20)}


def test_get_edges_directed():
    g = Graph(directed=True)
    g.add_edge(1, 2, 10)
    g.add_edge(2, 3, 20)

    assert sorted(g.get_edges()) == [(1, 2, 10.0), (2, 3, 20.0)]


def test_get_vertices_is_a_snapshot():
    g = Graph()
    g.add_edge(1, "A", 1.0)

    snapshot = g.get_vertices()
    snapshot[0].edges.clear()
    g.add_edge(1, "B", 2.0)

    assert g.outgoing(1) == {"A": 1.0, "B": 2.0}
    assert len(snapshot) == 2


def test_outgoing_returns_copy():
    g = Graph()
    g.add_edge("a", "b", 1.0)

    out = g.outgoing("a")
    out.clear()

    assert g.outgoing("a") == {"b": 1.0}


def test_outgoing_unknown_vertex_is_empty():
    g = Graph()

    assert g.outgoing("missing") == {}
    assert g.weight("missing", "other") is None
    assert [] not in g


def test_mixed_identifier_types():
    g = Graph()
    g.add_edge(1, "A", 1.0)
    g.add_edge((2, "x"), "A", 2.0)

    assert set(g) == {1, "A", (2, "x")}


# ------------------------------
# Bipartite detection
# ------------------------------

def test_even_cycle_is_bipartite():
    g = Graph()
    g.add_edge(1, 2, 1)
    g.add_edge(1, 4, 1)
    g.add_edge(3, 2, 1)
    g.add_edge(3, 4, 1)

    assert g.is_bipartite() is True


def test_triangle_is_not_bipartite():
    g = Graph()
    g.add_edge(1, 2, 1)
    g.add_edge(2, 3, 1)
    g.add_edge(3, 1, 1)

    assert g.is_bipartite() is False


def test_odd_cycles_are_not_bipartite():
    for n in (3, 5, 7, 9):
        g = Graph()
        for i in range(n):
            g.add_edge(i, (i + 1) % n, 1.0)
        assert g.is_bipartite() is False, n


def test_edgeless_graph_is_bipartite():
    g = Graph()
    for vid in range(10):
        g.add_vertex(vid)

    assert g.is_bipartite() is True


def test_empty_graph_is_bipartite():
    assert Graph().is_bipartite() is True
    assert Graph(directed=True).is_bipartite() is True


def test_self_loop_is_not_bipartite():
    g = Graph()
    g.add_edge(1, 1, 4.0)

    assert g.is_bipartite() is False
    assert g.get_edges() == [(1, 1, 4.0)]

    d = Graph(directed=True)
    d.add_edge(1, 1, 4.0)
    assert d.is_bipartite() is False


def test_odd_cycle_in_second_component_is_found():
    g = Graph()
    g.add_edge(1, "A", 1)
    g.add_edge(2, "B", 1)
    # separate triangle
    g.add_edge("x", "y", 1)
    g.add_edge("y", "z", 1)
    g.add_edge("z", "x", 1)

    assert g.is_bipartite() is False


def test_directed_path_is_bipartite_regardless_of_edge_direction():
    g = Graph(directed=True)
    g.add_edge(1, 2, 1)
    g.add_edge(3, 2, 1)
    g.add_edge(4, 3, 1)

    assert g.is_bipartite() is True


def test_directed_triangle_is_not_bipartite():
    g = Graph(directed=True)
    g.add_edge(1, 2, 1)
    g.add_edge(2, 3, 1)
    g.add_edge(3, 1, 1)

    assert g.is_bipartite() is False


def test_long_path_does_not_hit_recursion_limit():
    g = Graph()
    for i in range(5000):
        g.add_edge(i, i + 1, 1.0)

    assert g.is_bipartite() is True
