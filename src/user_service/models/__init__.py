"""
Single import point for the ORM models, so `Base.metadata` is fully populated
by importing this package:

    from user_service.models import User
"""

from .user import User

__all__ = [
    "User",
]
