"""
Scoped access to the active SessionManager.

UI code running inside ``session_scope(manager)`` reaches the manager with
``use_session()``; calling it outside any scope is a programming error.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from ..utils.exceptions import SessionScopeError
from .session_manager import SessionManager

_current: ContextVar[Optional[SessionManager]] = ContextVar("newshub_session", default=None)


@contextmanager
def session_scope(manager: SessionManager) -> Iterator[SessionManager]:
    token = _current.set(manager)
    try:
        yield manager
    finally:
        _current.reset(token)


def use_session() -> SessionManager:
    manager = _current.get()
    if manager is None:
        raise SessionScopeError("use_session() must be called within session_scope()")
    return manager
