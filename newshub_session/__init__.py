"""News Hub client-side session wrapper"""

from .app import SessionApp
from .auth import SessionManager, SessionState, session_scope, use_session
from .models import LoginRecord, Notification, User

__version__ = "1.0.0"

__all__ = [
    "LoginRecord",
    "Notification",
    "SessionApp",
    "SessionManager",
    "SessionState",
    "User",
    "session_scope",
    "use_session",
]
