"""Custom exceptions for the News Hub session client"""

from typing import Optional


class SessionClientError(Exception):
    """Base exception for the session client"""
    pass


class InvalidCredentialsError(SessionClientError):
    """Identity service rejected the request (non-2xx response)"""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message or f"Identity service returned HTTP {status_code}")


class ConnectivityError(SessionClientError):
    """Identity service could not be reached"""
    pass


class MalformedResponseError(SessionClientError):
    """Successful response whose body is not a usable identity"""
    pass


class CorruptedLocalStateError(SessionClientError):
    """Persisted session record could not be parsed"""
    pass


class ConfigError(SessionClientError):
    """Configuration error"""
    pass


class SessionScopeError(SessionClientError, RuntimeError):
    """Session accessed outside of a session scope"""
    pass


class StorageError(SessionClientError):
    """Local storage could not be written"""
    pass
