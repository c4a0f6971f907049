"""
Unit tests for the undirected friendship graph.
"""

from friendgraph.graph import FriendshipGraph, canonical_edge


def test_neighbors_are_symmetric():
    graph = FriendshipGraph.build([(1, 2), (2, 3)])
    assert graph.neighbors_of(1) == {2}
    assert graph.neighbors_of(2) == {1, 3}
    assert graph.neighbors_of(3) == {2}


def test_unknown_user_has_no_neighbors():
    graph = FriendshipGraph.build([(1, 2)])
    assert graph.neighbors_of(99) == frozenset()
    assert graph.degree(99) == 0
    assert 99 not in graph


def test_duplicate_and_reverse_edges_collapse():
    graph = FriendshipGraph.build([(1, 2), (2, 1), (1, 2)])
    assert graph.neighbors_of(1) == {2}
    assert graph.edges() == [(1, 2)]


def test_two_row_layout_reads_as_one_edge():
    rows = [("a", "b"), ("b", "a")]
    graph = FriendshipGraph.build(rows)
    assert graph.are_friends("a", "b")
    assert graph.are_friends("b", "a")
    assert graph.edges() == [("a", "b")]


def test_self_edges_are_ignored():
    graph = FriendshipGraph.build([(1, 1), (1, 2)])
    assert graph.neighbors_of(1) == {2}
    assert not graph.are_friends(1, 1)


def test_users_and_len():
    graph = FriendshipGraph.build([(1, 2), (3, 4)])
    assert graph.users() == {1, 2, 3, 4}
    assert len(graph) == 4
    assert sorted(graph) == [1, 2, 3, 4]


def test_neighbors_view_cannot_mutate_graph():
    graph = FriendshipGraph.build([(1, 2)])
    neighbors = graph.neighbors_of(1)
    assert isinstance(neighbors, frozenset)
    assert graph.neighbors_of(1) == {2}


def test_empty_edge_list():
    graph = FriendshipGraph.build([])
    assert len(graph) == 0
    assert graph.edges() == []


def test_canonical_edge_orders_ends():
    assert canonical_edge(5, 2) == (2, 5)
    assert canonical_edge(2, 5) == (2, 5)
    assert canonical_edge("bob", "alice") == ("alice", "bob")
