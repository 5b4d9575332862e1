"""
Friendship edges and the rules that move them.

A friendship between two users is two directed edges, each owned by one side:
- engine: pure transition decisions for send / accept / decline
- repo: edge store (get / insert / update status, pair lock)
- queries: total friend count, mutual friend count, friend profile

The transactional wrapper lives in `friendships.services.friendship`.
"""

from .engine import EdgeWrite, Transition, decide_accept, decide_decline, decide_send
from .repo import edge_exists, get_edge, insert_edge, lock_pair, pair_lock_statement, update_edge_status
from .queries import (
    FriendProfile,
    get_friend_profile,
    mutual_friend_count,
    total_friend_count,
    total_friend_counts,
)

__all__ = [
    # Core engine
    "EdgeWrite",
    "Transition",
    "decide_send",
    "decide_accept",
    "decide_decline",

    # Edge store
    "get_edge",
    "edge_exists",
    "insert_edge",
    "update_edge_status",
    "lock_pair",
    "pair_lock_statement",

    # Aggregates
    "FriendProfile",
    "get_friend_profile",
    "mutual_friend_count",
    "total_friend_count",
    "total_friend_counts",
]
