"""
Pydantic models for API payloads and responses.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel


class User(BaseModel):
    """Public profile of a user."""

    user_id: str
    name: str
    email: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class SuggestedUser(User):
    """A suggested profile with its mutual-friend count."""

    mutual_friends: int


class SuggestionsResponse(BaseModel):
    """'People you may know' wrapper."""

    user: User
    suggestions: List[SuggestedUser]
    direct_friends_count: int
    friends_of_friends_count: int


class FriendshipResult(BaseModel):
    """Outcome of an add or remove request."""

    user_id: str
    friend_id: str
    change: Literal["created", "removed", "unchanged"]


class GraphNode(BaseModel):
    id: str
    name: str
    color: str
    size: int
    type: Literal["current", "friend", "mutual", "suggestion"]


class GraphLink(BaseModel):
    source: str
    target: str


class GraphView(BaseModel):
    """Nodes and links for the network visualisation."""

    nodes: List[GraphNode]
    links: List[GraphLink]


class RankedUser(BaseModel):
    user_id: str
    mutual_count: int


class TraversalEvent(BaseModel):
    """Serialized narrator event."""

    kind: Literal["visit_start", "check", "found", "complete"]
    user_id: Optional[str] = None
    from_id: Optional[str] = None
    count: Optional[int] = None
    candidate_id: Optional[str] = None
    mutual_count: Optional[int] = None
    top: Optional[List[RankedUser]] = None
