from .context import session_scope, use_session
from .normalize import (
    NormalizedIdentity,
    generate_user_id,
    normalize_login_response,
    normalize_signup_response,
)
from .session_manager import SessionManager, SessionState

__all__ = [
    "NormalizedIdentity",
    "SessionManager",
    "SessionState",
    "generate_user_id",
    "normalize_login_response",
    "normalize_signup_response",
    "session_scope",
    "use_session",
]
