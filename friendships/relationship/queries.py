"""Read-side aggregates over committed friendship edges.

Nothing here opens a write transaction. The friend profile is one SELECT, so
the profile row, the total count and the mutual count are read from the same
snapshot.
"""

from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from friendships.core.errors import NotFound
from friendships.db.models import Friendship, User
from friendships.schemas.friendship import FriendshipStatus

ACCEPTED = FriendshipStatus.ACCEPTED.value


@dataclass
class FriendProfile:
    id: int
    full_name: str | None
    phone_number: str | None
    total_friend_count: int
    mutual_friend_count: int


def total_friend_count_subquery():
    """Accepted edges per owner, usable as a join side."""
    return (
        select(
            Friendship.user_id.label("user_id"),
            func.count(Friendship.friend_user_id).label("total_friend_count"),
        )
        .where(Friendship.status == ACCEPTED)
        .group_by(Friendship.user_id)
        .subquery("user_total_friend_count")
    )


def mutual_friend_count_query(user_id, friend_user_id):
    """Count of X with user_id->X and friend_user_id->X both accepted.

    Arguments may be plain ids or column expressions (for correlation).
    """
    f1 = aliased(Friendship, name="f1")
    f2 = aliased(Friendship, name="f2")
    return (
        select(func.count(f1.friend_user_id))
        .select_from(f1)
        .join(f2, f1.friend_user_id == f2.friend_user_id)
        .where(
            f1.user_id == user_id,
            f2.user_id == friend_user_id,
            f1.status == ACCEPTED,
            f2.status == ACCEPTED,
        )
    )


async def mutual_friend_count(db: AsyncSession, user_id: int, friend_user_id: int) -> int:
    return int(await db.scalar(mutual_friend_count_query(user_id, friend_user_id)) or 0)


async def total_friend_counts(db: AsyncSession, user_ids: Iterable[int]) -> dict[int, int]:
    ids = list(user_ids)
    if not ids:
        return {}
    totals = total_friend_count_subquery()
    rows = await db.execute(
        select(totals.c.user_id, totals.c.total_friend_count).where(totals.c.user_id.in_(ids))
    )
    counts = {uid: 0 for uid in ids}
    counts.update({row.user_id: int(row.total_friend_count) for row in rows})
    return counts


async def total_friend_count(db: AsyncSession, user_id: int) -> int:
    return (await total_friend_counts(db, [user_id]))[user_id]


async def get_friend_profile(db: AsyncSession, viewer_id: int, friend_user_id: int) -> FriendProfile:
    """Profile of a friend, visible only through an accepted viewer->friend edge."""
    friends = aliased(User, name="friends")
    totals = total_friend_count_subquery()
    mutual = mutual_friend_count_query(viewer_id, friends.id).scalar_subquery()

    q = (
        select(
            friends.id,
            friends.full_name,
            friends.phone_number,
            func.coalesce(totals.c.total_friend_count, 0).label("total_friend_count"),
            mutual.label("mutual_friend_count"),
        )
        .join(Friendship, Friendship.friend_user_id == friends.id)
        .outerjoin(totals, totals.c.user_id == friends.id)
        .where(
            Friendship.user_id == viewer_id,
            Friendship.friend_user_id == friend_user_id,
            Friendship.status == ACCEPTED,
        )
        .limit(1)
    )
    row = (await db.execute(q)).first()
    if row is None:
        raise NotFound("Friend not found")

    return FriendProfile(
        id=row.id,
        full_name=row.full_name,
        phone_number=row.phone_number,
        total_friend_count=int(row.total_friend_count),
        mutual_friend_count=int(row.mutual_friend_count or 0),
    )
