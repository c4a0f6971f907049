"""
FastAPI application exposing friendships and "people you may know".

Authentication happens upstream: the proxy in front of this service puts
the authenticated user id in the ``X-User-Id`` header, and every route
passes it down explicitly.
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger

from .config import configure_logging, get_settings
from .db import close_driver, get_store
from .errors import (
    FriendGraphError,
    InvalidOperation,
    MutationInProgress,
    NotAuthorized,
    TransientStoreFailure,
    UserNotFound,
)
from .models import (
    FriendshipResult,
    GraphView,
    RankedUser,
    SuggestionsResponse,
    TraversalEvent,
    User,
)
from .narrator import Check, Complete, Event, Found, VisitStart
from .session import InFlightGuard, NetworkSession, Store


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    logger.info(f"Starting friend graph API with {get_settings().store_backend} store")
    yield
    await close_driver()


app = FastAPI(
    title="Friend Suggestion API",
    description="Bidirectional friendships and mutual-friend suggestions.",
    version="0.1.0",
    lifespan=lifespan,
)

# Shared by every request so concurrent clicks on one target are serialized.
mutation_guard = InFlightGuard()

ERROR_STATUS = {
    InvalidOperation: 400,
    NotAuthorized: 403,
    UserNotFound: 404,
    MutationInProgress: 409,
    TransientStoreFailure: 503,
}


@app.exception_handler(FriendGraphError)
async def friend_graph_error_handler(_: Request, exc: FriendGraphError) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 500)
    if status >= 500:
        logger.error(f"Request failed: {exc}")
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def get_requester_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """The authenticated user id, as forwarded by the auth proxy."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


async def get_session(
    requester_id: str = Depends(get_requester_id),
    store: Store = Depends(get_store),
) -> NetworkSession:
    """Dependency providing a freshly loaded network session."""
    session = NetworkSession(store, requester_id, guard=mutation_guard)
    await session.load()
    return session


def to_traversal_event(event: Event) -> TraversalEvent:
    if isinstance(event, VisitStart):
        return TraversalEvent(kind="visit_start", user_id=event.user_id)
    if isinstance(event, Check):
        return TraversalEvent(kind="check", from_id=event.from_id, count=event.count)
    if isinstance(event, Found):
        return TraversalEvent(
            kind="found", candidate_id=event.candidate_id, mutual_count=event.mutual_count
        )
    if isinstance(event, Complete):
        return TraversalEvent(
            kind="complete",
            top=[RankedUser(user_id=s.user_id, mutual_count=s.mutual_count) for s in event.top],
        )
    raise TypeError(f"Unknown traversal event {event!r}")


@app.get("/health")
async def health() -> dict:
    """Simple health-check endpoint used by external probes."""
    return {"status": "ok"}


@app.get("/api/users", response_model=List[User])
async def list_users(
    requester_id: str = Depends(get_requester_id),
    store: Store = Depends(get_store),
) -> List[User]:
    """Everyone except the requester."""
    users = await store.list_users()
    return [u for u in users if u.user_id != requester_id]


@app.get("/api/users/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    _: str = Depends(get_requester_id),
    store: Store = Depends(get_store),
) -> User:
    user = await store.get_user(user_id)
    if user is None:
        raise UserNotFound(user_id)
    return user


@app.get("/api/me", response_model=User)
async def me(session: NetworkSession = Depends(get_session)) -> User:
    return session.profile


@app.get("/api/me/friends", response_model=List[User])
async def my_friends(session: NetworkSession = Depends(get_session)) -> List[User]:
    return session.friends


@app.get("/api/me/suggestions", response_model=SuggestionsResponse)
async def my_suggestions(
    limit: Optional[int] = Query(default=None, ge=0),
    session: NetworkSession = Depends(get_session),
) -> SuggestionsResponse:
    """Friend suggestions ranked by number of mutual friends."""
    suggestions = session.suggestions if limit is None else session.suggestions[:limit]
    return SuggestionsResponse(
        user=session.profile,
        suggestions=suggestions,
        direct_friends_count=session.direct_friends_count,
        friends_of_friends_count=session.friends_of_friends_count,
    )


@app.post("/api/me/friends/{friend_id}", response_model=FriendshipResult)
async def add_friend(
    friend_id: str,
    session: NetworkSession = Depends(get_session),
) -> FriendshipResult:
    return await session.add_friend(friend_id)


@app.delete("/api/me/friends/{friend_id}", response_model=FriendshipResult)
async def remove_friend(
    friend_id: str,
    session: NetworkSession = Depends(get_session),
) -> FriendshipResult:
    return await session.remove_friend(friend_id)


@app.get("/api/me/graph", response_model=GraphView)
async def my_graph(session: NetworkSession = Depends(get_session)) -> GraphView:
    """Nodes and links around the requester for the network visualisation."""
    return session.view()


@app.get("/api/me/traversal", response_model=List[TraversalEvent])
async def my_traversal(session: NetworkSession = Depends(get_session)) -> List[TraversalEvent]:
    """The suggestion traversal as an ordered list of events for animated replay."""
    return [to_traversal_event(event) for event in session.traversal()]
