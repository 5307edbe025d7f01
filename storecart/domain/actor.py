# storecart/domain/actor.py
"""
Who is asking for a cart.

A cart is owned either by an authenticated store user or by an anonymous
session. Both variants carry a ``kind`` and a ``key`` which is what gets
stored on the cart row.
"""
import uuid
from dataclasses import dataclass
from typing import Union

from storecart.domain.errors import InvalidArgumentError

USER = "user"
SESSION = "session"


@dataclass(frozen=True)
class AuthenticatedOwner:
    user_id: int

    @property
    def kind(self) -> str:
        return USER

    @property
    def key(self) -> str:
        return str(self.user_id)


@dataclass(frozen=True)
class AnonymousOwner:
    session_token: uuid.UUID

    @property
    def kind(self) -> str:
        return SESSION

    @property
    def key(self) -> str:
        return str(self.session_token)


CartOwner = Union[AuthenticatedOwner, AnonymousOwner]


def parse_session_token(value) -> uuid.UUID | None:
    if value is None or value == "":
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise InvalidArgumentError(f"Invalid session id: {value!r}")


def resolve_actor(user_id: int | None, session_token=None) -> CartOwner | None:
    """
    Authenticated user wins, the session token is then ignored.
    Returns None when there is nothing to address a cart with.
    """
    if user_id is not None:
        return AuthenticatedOwner(int(user_id))

    token = parse_session_token(session_token)
    if token is not None:
        return AnonymousOwner(token)

    return None


def owner_from_columns(kind: str, key: str) -> CartOwner:
    if kind == USER:
        return AuthenticatedOwner(int(key))
    if kind == SESSION:
        return AnonymousOwner(uuid.UUID(key))
    raise ValueError(f"Unknown cart owner kind: {kind}")
