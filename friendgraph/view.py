"""
Node and link data for the network visualisation of one user.

Layout is left to the client; this only decides which users appear, how
they are typed and coloured, and which friendships connect them.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from .graph import FriendshipGraph
from .models import GraphLink, GraphNode, GraphView, User

CURRENT_COLOR = "#9b87f5"
FRIEND_COLOR = "#7E69AB"
MUTUAL_COLOR = "#F97316"
SUGGESTION_COLOR = "#D6BCFA"


def interconnected_friends(graph: FriendshipGraph, user_id: str) -> Set[str]:
    """Friends of ``user_id`` who are also friends with another of its friends."""
    friends = graph.neighbors_of(user_id)
    return {f for f in friends if graph.neighbors_of(f) & friends}


def build_view(graph: FriendshipGraph, user_id: str, users: Iterable[User]) -> GraphView:
    """
    Build the graph view around ``user_id``.

    Friends and second-degree contacts without a known profile are left out,
    and so is every link that does not join two displayed nodes.
    """
    profiles: Dict[str, User] = {u.user_id: u for u in users}
    friends = graph.neighbors_of(user_id)
    mutual = interconnected_friends(graph, user_id)
    nodes: List[GraphNode] = []

    me = profiles.get(user_id)
    if me is not None:
        nodes.append(
            GraphNode(id=user_id, name=f"{me.name} (You)", color=CURRENT_COLOR, size=18, type="current")
        )

    for friend_id in sorted(friends):
        friend = profiles.get(friend_id)
        if friend is None:
            continue
        if friend_id in mutual:
            nodes.append(GraphNode(id=friend_id, name=friend.name, color=MUTUAL_COLOR, size=14, type="mutual"))
        else:
            nodes.append(GraphNode(id=friend_id, name=friend.name, color=FRIEND_COLOR, size=12, type="friend"))

    second_degree = {
        candidate
        for friend_id in friends
        for candidate in graph.neighbors_of(friend_id)
        if candidate != user_id and candidate not in friends
    }
    for candidate_id in sorted(second_degree):
        candidate = profiles.get(candidate_id)
        if candidate is not None:
            nodes.append(
                GraphNode(id=candidate_id, name=candidate.name, color=SUGGESTION_COLOR, size=10, type="suggestion")
            )

    shown = {node.id for node in nodes}
    links = [
        GraphLink(source=a, target=b)
        for a, b in graph.edges()
        if a in shown and b in shown
    ]
    return GraphView(nodes=nodes, links=links)
