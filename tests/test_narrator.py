"""
Tests for the narrated traversal and its timed playback.
"""

import asyncio

import pytest

from friendgraph.graph import FriendshipGraph
from friendgraph.narrator import Check, Complete, Found, Playback, VisitStart, narrate
from friendgraph.ranking import Suggestion, rank


@pytest.fixture
def graph() -> FriendshipGraph:
    return FriendshipGraph.build([(1, 2), (1, 3), (2, 4), (3, 4)])


def recording_sleep(delays):
    async def sleep(seconds):
        delays.append(seconds)
        await asyncio.sleep(0)

    return sleep


async def blocking_sleep(seconds):
    await asyncio.Event().wait()


def test_narrate_trace(graph):
    assert narrate(graph, 1) == [
        VisitStart(1),
        Check(2, 2),
        Found(4, 1),
        Check(3, 2),
        Found(4, 2),
        Complete([Suggestion(4, 2)]),
    ]


def test_narrate_matches_rank():
    edges = [(1, 2), (1, 3), (2, 5), (3, 5), (2, 6), (3, 7), (4, 7)]
    graph = FriendshipGraph.build(edges)
    events = narrate(graph, 1, top_n=10)
    assert events[-1] == Complete(rank(graph, 1))

    # The last running count seen for each candidate is its mutual count.
    final = {}
    for event in events:
        if isinstance(event, Found):
            final[event.candidate_id] = event.mutual_count
    assert final == {s.user_id: s.mutual_count for s in rank(graph, 1)}


def test_narrate_top_n(graph):
    many = FriendshipGraph.build([(1, 2)] + [(2, n) for n in range(10, 20)])
    assert len(narrate(many, 1, top_n=3)[-1].top) == 3


def test_narrate_without_friends():
    assert narrate(FriendshipGraph.build([]), 1) == [VisitStart(1), Complete([])]


@pytest.mark.asyncio
async def test_playback_highlights_and_pacing(graph, settings):
    delays = []
    playback = Playback(settings, sleep=recording_sleep(delays))

    await playback.play(narrate(graph, 1))

    assert delays == [0.8, 0.6, 0.4, 0.2, 0.6, 0.4, 0.2]
    assert playback.state.nodes == {1, 2, 3, 4}
    assert playback.state.link_highlighted(1, 2)
    assert playback.state.link_highlighted(4, 2)
    assert playback.state.link_highlighted(3, 4)
    assert not playback.state.link_highlighted(1, 4)
    assert playback.completed == Complete([Suggestion(4, 2)])
    assert not playback.running


@pytest.mark.asyncio
async def test_playback_reports_each_step(graph, settings):
    seen = []
    playback = Playback(
        settings,
        on_step=lambda event, state: seen.append(type(event).__name__),
        sleep=recording_sleep([]),
    )
    playback.play(narrate(graph, 1))
    await playback.wait()
    assert seen == ["VisitStart", "Check", "Found", "Check", "Found", "Complete"]


@pytest.mark.asyncio
async def test_stop_clears_highlights(graph, settings):
    playback = Playback(settings, sleep=blocking_sleep)
    task = playback.play(narrate(graph, 1))
    await asyncio.sleep(0)
    assert playback.state.nodes == {1}

    await playback.stop()

    assert task.cancelled()
    assert not playback.running
    assert playback.state.nodes == set()
    assert playback.state.links == set()


@pytest.mark.asyncio
async def test_new_play_cancels_previous(graph, settings):
    playback = Playback(settings, sleep=blocking_sleep)
    first = playback.play(narrate(graph, 1))
    await asyncio.sleep(0)

    second = playback.play(narrate(graph, 2))
    with pytest.raises(asyncio.CancelledError):
        await first
    await asyncio.sleep(0)

    assert playback.running
    assert playback.state.nodes == {2}
    await playback.stop()
    assert second.cancelled()


@pytest.mark.asyncio
async def test_stop_when_idle(settings):
    playback = Playback(settings)
    await playback.stop()
    assert not playback.running


@pytest.mark.asyncio
async def test_stop_forgets_finished_result(graph, settings):
    playback = Playback(settings, sleep=recording_sleep([]))
    await playback.play(narrate(graph, 1))
    assert playback.completed is not None

    await playback.stop()

    assert playback.completed is None
    assert playback.state.nodes == set()
