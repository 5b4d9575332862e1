"""
SQLAlchemy database models.

- base: Base declarative class
- user: User account model (read-only from this service)
- friendship: Directed friendship edges

Import any model from this module:
    from friendships.db.models import User, Friendship
"""

# Base class (must be imported first)
from .base import Base

# User models
from .user import User

# Friendship edges
from .friendship import Friendship

__all__ = [
    "Base",
    "User",
    "Friendship",
]
