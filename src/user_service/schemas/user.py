"""
Wire schemas for the users API.

`UserCreate` is the signup payload (the five writable fields). It only checks
that each field is present and is a string; uniqueness and every other rule is
left to the database constraints.
"""

from pydantic import BaseModel, ConfigDict


class UserCreate(BaseModel):
    username: str
    first_name: str
    last_name: str
    email: str
    password: str


class UserRead(BaseModel):
    """A persisted user as returned by the API (built from the ORM object)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    first_name: str
    last_name: str
    email: str
    password: str
