from .user import UserCreate, UserRead

__all__ = ["UserCreate", "UserRead"]
