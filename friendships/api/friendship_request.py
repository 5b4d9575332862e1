from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from friendships.core.errors import NotFound
from friendships.db.models import User
from friendships.db.session import get_db
from friendships.relationship.engine import NO_PENDING_REQUEST
from friendships.relationship.repo import edge_exists
from friendships.schemas.friendship import FriendshipRequestIn, FriendshipStatus, MessageOut
from friendships.services.friendship import accept_request, decline_request, send_request
from friendships.utils.deps import get_current_user

router = APIRouter(prefix="/friendship-request", tags=["friendship-request"])


async def can_send_friendship_request(
    payload: FriendshipRequestIn,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> FriendshipRequestIn:
    if await db.get(User, payload.friend_user_id) is None:
        raise NotFound("User not found")
    return payload


async def _ensure_request_from(db: AsyncSession, requester_id: int, actor_id: int, *statuses: FriendshipStatus):
    for status in statuses:
        if await edge_exists(db, requester_id, actor_id, status):
            return
    raise NotFound(NO_PENDING_REQUEST)


async def can_accept_friendship_request(
    payload: FriendshipRequestIn,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> FriendshipRequestIn:
    # an already accepted request passes so a retried accept is a no-op success
    await _ensure_request_from(
        db, payload.friend_user_id, user.id, FriendshipStatus.REQUESTED, FriendshipStatus.ACCEPTED
    )
    return payload


async def can_decline_friendship_request(
    payload: FriendshipRequestIn,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> FriendshipRequestIn:
    await _ensure_request_from(db, payload.friend_user_id, user.id, FriendshipStatus.REQUESTED)
    return payload


@router.post("/send", response_model=MessageOut)
async def send_friendship_request(
    payload: FriendshipRequestIn = Depends(can_send_friendship_request),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    actor_id = user.id
    return await send_request(db, actor_id, payload.friend_user_id)


@router.post("/accept", response_model=MessageOut)
async def accept_friendship_request(
    payload: FriendshipRequestIn = Depends(can_accept_friendship_request),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    actor_id = user.id
    return await accept_request(db, actor_id, payload.friend_user_id)


@router.post("/decline", response_model=MessageOut)
async def decline_friendship_request(
    payload: FriendshipRequestIn = Depends(can_decline_friendship_request),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    actor_id = user.id
    return await decline_request(db, actor_id, payload.friend_user_id)
