from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from friendships.core.errors import ConstraintViolation, NotFound
from friendships.db.models import Friendship
from friendships.schemas.friendship import FriendshipStatus


async def get_edge(db: AsyncSession, owner_id: int, target_id: int) -> Friendship | None:
    result = await db.execute(
        select(Friendship).where(
            Friendship.user_id == owner_id,
            Friendship.friend_user_id == target_id,
        )
    )
    return result.scalar_one_or_none()


async def edge_exists(
    db: AsyncSession,
    owner_id: int,
    target_id: int,
    status: FriendshipStatus | None = None,
) -> bool:
    q = select(Friendship.id).where(
        Friendship.user_id == owner_id,
        Friendship.friend_user_id == target_id,
    )
    if status is not None:
        q = q.where(Friendship.status == status.value)
    return await db.scalar(q.limit(1)) is not None


async def insert_edge(
    db: AsyncSession,
    owner_id: int,
    target_id: int,
    status: FriendshipStatus,
) -> Friendship:
    """Insert a new edge.

    Raises ConstraintViolation if the pair already has one and NotFound if
    either user does not exist. Runs inside a savepoint so a failed insert
    does not poison the caller's transaction.
    """
    edge = Friendship(user_id=owner_id, friend_user_id=target_id, status=status.value)
    try:
        async with db.begin_nested():
            db.add(edge)
    except IntegrityError as e:
        kind = _integrity_kind(e)
        if kind == "unique":
            raise ConstraintViolation(
                f"Friendship {owner_id} -> {target_id} already exists"
            ) from e
        if kind == "foreign_key":
            raise NotFound("User not found") from e
        raise
    return edge


def _integrity_kind(e: IntegrityError) -> str | None:
    """Classify a driver integrity error as "unique", "foreign_key" or None."""
    orig = e.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == "23505":
        return "unique"
    if code == "23503":
        return "foreign_key"
    message = str(orig).lower()
    if "unique" in message:
        return "unique"
    if "foreign key" in message:
        return "foreign_key"
    return None


async def update_edge_status(
    db: AsyncSession,
    owner_id: int,
    target_id: int,
    status: FriendshipStatus,
) -> int:
    """Returns rows affected; 0 when no edge matches."""
    result = await db.execute(
        update(Friendship)
        .where(
            Friendship.user_id == owner_id,
            Friendship.friend_user_id == target_id,
        )
        .values(status=status.value)
    )
    return result.rowcount


async def lock_pair(db: AsyncSession, a: int, b: int) -> None:
    """Serialize read-decide-write on the unordered pair (a, b) until commit.

    PostgreSQL takes a transaction-scoped advisory lock. SQLite already holds
    the database write lock from BEGIN IMMEDIATE.
    """
    if db.get_bind().dialect.name == "postgresql":
        await db.execute(pair_lock_statement(a, b))


def pair_lock_statement(a: int, b: int):
    """Advisory lock keyed on the ordered pair, so (a, b) and (b, a) collide."""
    lo, hi = min(a, b), max(a, b)
    return select(func.pg_advisory_xact_lock(lo, hi))
