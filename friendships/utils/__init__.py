"""
Utility functions and helpers.

- auth: access token minting
- deps: FastAPI dependencies resolving the acting user
"""

from .auth import create_token
from .deps import get_current_user, oauth2_scheme

__all__ = [
    "create_token",
    "get_current_user",
    "oauth2_scheme",
]
