from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from friendships.db.models import User
from friendships.db.session import get_db
from friendships.relationship.queries import get_friend_profile
from friendships.schemas.friendship import FriendProfileOut
from friendships.utils.deps import get_current_user

router = APIRouter(prefix="/my-friend", tags=["my-friend"])


@router.get("/{friend_user_id}", response_model=FriendProfileOut)
async def get_my_friend(
    friend_user_id: int = Path(..., gt=0, description="ID of the friend to look up"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Friend's profile with total and mutual friend counts.

    Only visible while the caller's edge to that user is accepted.
    """
    profile = await get_friend_profile(db, user.id, friend_user_id)
    return FriendProfileOut.model_validate(profile)
