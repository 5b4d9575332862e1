import logging

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from friendships.core.errors import ConstraintViolation, InvalidTransition, NotFound, StorageUnavailable
from friendships.db.session import atomic
from friendships.relationship import engine, repo
from friendships.relationship.engine import ALREADY_IN_PROGRESS, Transition
from friendships.schemas.friendship import FriendshipStatus

log = logging.getLogger(__name__)


def _status(edge) -> FriendshipStatus | None:
    return FriendshipStatus(edge.status) if edge is not None else None


async def _apply(db: AsyncSession, transition: Transition) -> None:
    for write in transition.writes:
        if write.insert:
            await repo.insert_edge(db, write.owner_id, write.target_id, write.status)
            continue
        rows = await repo.update_edge_status(db, write.owner_id, write.target_id, write.status)
        if rows == 0:
            # the edge was read under the pair lock a moment ago
            raise StorageUnavailable(
                f"Friendship {write.owner_id} -> {write.target_id} disappeared mid-transaction"
            )


async def _run(db: AsyncSession, action: str, actor_id: int, other_id: int, decide) -> None:
    """Lock the pair, read, decide, write, commit; or roll back and raise."""
    try:
        async with atomic(db, isolation_level="READ COMMITTED"):
            await repo.lock_pair(db, actor_id, other_id)
            transition = await decide()
            await _apply(db, transition)
    except (InvalidTransition, NotFound) as e:
        log.info("Rejected %s %s -> %s: %s", action, actor_id, other_id, e.message)
        raise
    except ConstraintViolation as e:
        log.info("Lost %s race %s -> %s: %s", action, actor_id, other_id, e)
        raise InvalidTransition(ALREADY_IN_PROGRESS) from e
    except IntegrityError as e:
        log.info("Integrity error during %s %s -> %s: %s", action, actor_id, other_id, e.orig)
        raise InvalidTransition(ALREADY_IN_PROGRESS) from e
    except (OperationalError, InterfaceError) as e:
        log.error("Storage failure during %s %s -> %s", action, actor_id, other_id, exc_info=True)
        raise StorageUnavailable("Storage temporarily unavailable, please retry") from e
    except DBAPIError as e:
        if not e.connection_invalidated:
            raise
        log.error("Connection lost during %s %s -> %s", action, actor_id, other_id, exc_info=True)
        raise StorageUnavailable("Storage temporarily unavailable, please retry") from e

    log.info("Friendship %s: actor=%s other=%s", action, actor_id, other_id)


async def send_request(db: AsyncSession, actor_id: int, target_id: int) -> dict:
    async def decide() -> Transition:
        existing = await repo.get_edge(db, actor_id, target_id)
        return engine.decide_send(actor_id, target_id, _status(existing))

    await _run(db, "send", actor_id, target_id, decide)
    return {"message": "Friendship request sent successfully"}


async def accept_request(db: AsyncSession, actor_id: int, requester_id: int) -> dict:
    async def decide() -> Transition:
        request = await repo.get_edge(db, requester_id, actor_id)
        reverse = await repo.get_edge(db, actor_id, requester_id)
        return engine.decide_accept(actor_id, requester_id, _status(request), _status(reverse))

    await _run(db, "accept", actor_id, requester_id, decide)
    return {"message": "Friendship accepted successfully"}


async def decline_request(db: AsyncSession, actor_id: int, requester_id: int) -> dict:
    async def decide() -> Transition:
        request = await repo.get_edge(db, requester_id, actor_id)
        return engine.decide_decline(actor_id, requester_id, _status(request))

    await _run(db, "decline", actor_id, requester_id, decide)
    return {"message": "Friendship request declined successfully"}
