from dataclasses import dataclass, field

from friendships.core.errors import InvalidTransition, NotFound
from friendships.schemas.friendship import FriendshipStatus

ALREADY_IN_PROGRESS = "A friendship request is already in progress or has been accepted."
SELF_REQUEST = "You cannot send a friendship request to yourself."
NO_PENDING_REQUEST = "No pending friendship request from this user."


@dataclass(frozen=True)
class EdgeWrite:
    owner_id: int
    target_id: int
    status: FriendshipStatus
    insert: bool = False


@dataclass
class Transition:
    writes: list[EdgeWrite] = field(default_factory=list)


def decide_send(actor_id: int, target_id: int, existing: FriendshipStatus | None) -> Transition:
    if actor_id == target_id:
        raise InvalidTransition(SELF_REQUEST)

    if existing is None:
        return Transition([EdgeWrite(actor_id, target_id, FriendshipStatus.REQUESTED, insert=True)])
    if existing == FriendshipStatus.DECLINED:
        return Transition([EdgeWrite(actor_id, target_id, FriendshipStatus.REQUESTED)])
    raise InvalidTransition(ALREADY_IN_PROGRESS)


def decide_accept(
    actor_id: int,
    requester_id: int,
    request: FriendshipStatus | None,
    reverse: FriendshipStatus | None,
) -> Transition:
    """`request` is requester->actor, `reverse` is actor->requester.

    An already accepted request is accepted again so that duplicate accepts
    converge on the same end state.
    """
    if request not in (FriendshipStatus.REQUESTED, FriendshipStatus.ACCEPTED):
        raise NotFound(NO_PENDING_REQUEST)

    return Transition(
        [
            EdgeWrite(requester_id, actor_id, FriendshipStatus.ACCEPTED),
            EdgeWrite(actor_id, requester_id, FriendshipStatus.ACCEPTED, insert=reverse is None),
        ],
    )


def decide_decline(actor_id: int, requester_id: int, request: FriendshipStatus | None) -> Transition:
    if request != FriendshipStatus.REQUESTED:
        raise NotFound(NO_PENDING_REQUEST)
    return Transition([EdgeWrite(requester_id, actor_id, FriendshipStatus.DECLINED)])
