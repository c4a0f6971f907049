"""
Unit tests for mutual-friend suggestion ranking.
"""

import random

import pytest

from friendgraph.graph import FriendshipGraph
from friendgraph.ranking import Suggestion, count_mutuals, friend_counts, rank


def test_single_path_candidate():
    graph = FriendshipGraph.build([(1, 2), (2, 3), (1, 4)])
    assert rank(graph, 1) == [Suggestion(user_id=3, mutual_count=1)]


def test_candidate_reached_through_two_friends():
    graph = FriendshipGraph.build([(1, 2), (1, 3), (2, 4), (3, 4)])
    assert rank(graph, 1) == [Suggestion(user_id=4, mutual_count=2)]


def test_user_without_friends_gets_nothing():
    graph = FriendshipGraph.build([(2, 3)])
    assert rank(graph, 1) == []


def test_unknown_requester_is_not_an_error():
    graph = FriendshipGraph.build([])
    assert rank(graph, "nobody") == []


def test_ties_break_by_ascending_id():
    graph = FriendshipGraph.build([(1, 2), (2, 9), (2, 5), (2, 7)])
    assert [s.user_id for s in rank(graph, 1)] == [5, 7, 9]


def test_sorted_by_mutual_count_then_id():
    edges = [
        (1, 2), (1, 3), (1, 4),
        (2, 10), (3, 10), (4, 10),
        (2, 11), (3, 11),
        (2, 12), (4, 12),
        (3, 13),
    ]
    result = rank(FriendshipGraph.build(edges), 1)
    assert [(s.user_id, s.mutual_count) for s in result] == [
        (10, 3),
        (11, 2),
        (12, 2),
        (13, 1),
    ]


def test_limit_truncates():
    graph = FriendshipGraph.build([(1, 2), (2, 3), (2, 4), (2, 5)])
    assert [s.user_id for s in rank(graph, 1, limit=2)] == [3, 4]


def test_negative_limit_raises():
    graph = FriendshipGraph.build([(1, 2), (2, 3)])
    with pytest.raises(ValueError):
        rank(graph, 1, limit=-1)
    assert rank(graph, 1, limit=0) == []


def test_friends_among_themselves_are_not_suggested():
    graph = FriendshipGraph.build([(1, 2), (1, 3), (2, 3), (3, 4)])
    result = rank(graph, 1)
    assert [s.user_id for s in result] == [4]


def test_rank_properties_on_random_graphs():
    rng = random.Random(7)
    for _ in range(25):
        edges = [(rng.randrange(15), rng.randrange(15)) for _ in range(40)]
        graph = FriendshipGraph.build(edges)
        for user in range(15):
            result = rank(graph, user)
            direct = graph.neighbors_of(user)
            ids = [s.user_id for s in result]
            assert user not in ids
            assert not direct & set(ids)
            for s in result:
                assert s.mutual_count == len(direct & graph.neighbors_of(s.user_id))
            keys = [(-s.mutual_count, s.user_id) for s in result]
            assert keys == sorted(keys)


def test_rank_does_not_depend_on_edge_order():
    edges = [(1, 2), (1, 3), (2, 4), (3, 5), (2, 5), (3, 4), (2, 6)]
    expected = rank(FriendshipGraph.build(edges), 1)
    shuffled = list(edges)
    random.Random(3).shuffle(shuffled)
    assert rank(FriendshipGraph.build(reversed(shuffled)), 1) == expected


def test_count_mutuals():
    graph = FriendshipGraph.build([(1, 2), (1, 3), (2, 4), (3, 4), (3, 5)])
    assert count_mutuals(graph, 1) == {4: 2, 5: 1}


def test_friend_counts():
    graph = FriendshipGraph.build([(1, 2), (1, 3), (2, 4), (3, 4), (3, 5)])
    assert friend_counts(graph, 1) == (2, 2)
    assert friend_counts(graph, 42) == (0, 0)
