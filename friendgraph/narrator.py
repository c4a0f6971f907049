"""
Narrated replay of the suggestion computation for the graph animation.

``narrate`` records the one-hop expansion as an ordered trace of events;
``Playback`` steps through a recorded trace with timed pauses, updating the
set of highlighted nodes and links. Neither one changes ranking results:
the closing ``Complete`` event carries the output of :func:`ranking.rank`.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional, Sequence, Set, Union

from loguru import logger

from .config import Settings, get_settings
from .graph import FriendshipGraph, UserId
from .ranking import Suggestion, rank


@dataclass(frozen=True)
class VisitStart:
    user_id: UserId


@dataclass(frozen=True)
class Check:
    """A direct friend is being expanded; ``count`` is its number of friends."""

    from_id: UserId
    count: int


@dataclass(frozen=True)
class Found:
    """A candidate reached through the friend of the preceding ``Check``."""

    candidate_id: UserId
    mutual_count: int


@dataclass(frozen=True)
class Complete:
    top: List[Suggestion]


Event = Union[VisitStart, Check, Found, Complete]


def narrate(graph: FriendshipGraph, requester_id: UserId, top_n: int = 5) -> List[Event]:
    """
    Record the traversal behind ``rank(graph, requester_id)``.

    Friends and their neighbours are visited in ascending id order so the
    trace is reproducible. ``Found.mutual_count`` is the running count at
    the moment the candidate is reached.
    """
    direct_friends = graph.neighbors_of(requester_id)
    events: List[Event] = [VisitStart(requester_id)]
    running: Dict[UserId, int] = {}

    for friend_id in sorted(direct_friends):
        neighbors = graph.neighbors_of(friend_id)
        events.append(Check(friend_id, len(neighbors)))
        for candidate_id in sorted(neighbors):
            if candidate_id == requester_id or candidate_id in direct_friends:
                continue
            running[candidate_id] = running.get(candidate_id, 0) + 1
            events.append(Found(candidate_id, running[candidate_id]))

    events.append(Complete(rank(graph, requester_id, limit=top_n)))
    return events


@dataclass
class HighlightState:
    """What the visualisation currently shows as highlighted."""

    nodes: Set[UserId] = field(default_factory=set)
    links: Set[FrozenSet[UserId]] = field(default_factory=set)

    def clear(self) -> None:
        self.nodes.clear()
        self.links.clear()

    def link_highlighted(self, a: UserId, b: UserId) -> bool:
        return frozenset((a, b)) in self.links


Sleep = Callable[[float], Awaitable[None]]
StepCallback = Callable[[Event, HighlightState], None]


class Playback:
    """
    Timed, cancellable replay of a narrated trace.

    Only one replay runs at a time: ``play`` cancels whatever is in
    progress and starts from a cleared highlight state.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        on_step: Optional[StepCallback] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._on_step = on_step
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self.state = HighlightState()
        self.completed: Optional[Complete] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def play(self, events: Sequence[Event]) -> asyncio.Task:
        """Start replaying ``events``; must be called from a running event loop."""
        if self.running:
            logger.debug("Cancelling traversal playback in progress")
            self._task.cancel()
        self.state.clear()
        self.completed = None
        self._task = asyncio.create_task(self._run(list(events)))
        return self._task

    async def stop(self) -> None:
        """Cancel the replay, clear every highlight and forget the last result."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.state.clear()
        self.completed = None

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def _pause(self, ms: int) -> None:
        await self._sleep(ms / 1000)

    async def _run(self, events: List[Event]) -> None:
        settings = self._settings
        origin: Optional[UserId] = None
        current_friend: Optional[UserId] = None

        for event in events:
            if isinstance(event, (Check, Complete)) and current_friend is not None:
                await self._pause(settings.delay_after_friend_ms)
                current_friend = None

            if isinstance(event, VisitStart):
                origin = event.user_id
                self.state.nodes.add(origin)
                self._notify(event)
                await self._pause(settings.delay_start_ms)
            elif isinstance(event, Check):
                current_friend = event.from_id
                self.state.nodes.add(current_friend)
                if origin is not None:
                    self.state.links.add(frozenset((origin, current_friend)))
                self._notify(event)
                await self._pause(settings.delay_friend_ms)
            elif isinstance(event, Found):
                self.state.nodes.add(event.candidate_id)
                if current_friend is not None:
                    self.state.links.add(frozenset((current_friend, event.candidate_id)))
                self._notify(event)
                await self._pause(settings.delay_found_ms)
            elif isinstance(event, Complete):
                self.completed = event
                self._notify(event)

    def _notify(self, event: Event) -> None:
        if self._on_step is not None:
            self._on_step(event, self.state)
