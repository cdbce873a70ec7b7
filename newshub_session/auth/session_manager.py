"""
Client-side session management.

A SessionManager authenticates against the identity service, caches the
resulting user (and token, when issued) in local storage, and answers
identity queries for the UI. It is constructed explicitly and passed to
whatever needs it; see :mod:`newshub_session.auth.context` for scoped access.

Lifecycle: construct -> initialize() -> login/signup/logout/queries -> dispose().
Concurrent login/signup calls are not serialized: the last one to finish
determines the session.
"""

import json
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from pydantic import ValidationError

from ..api.identity_client import IdentityClient
from ..models.user import LoginRecord, Notification, Role, User
from ..services.audit_log import LoginAuditLog
from ..services.local_storage import MemoryStorage
from ..services.notifications import LogNotifier, Notifier
from ..utils.exceptions import (
    ConnectivityError,
    CorruptedLocalStateError,
    InvalidCredentialsError,
    MalformedResponseError,
    SessionClientError,
    StorageError,
)
from ..utils.logger import get_logger
from .normalize import (
    VALID_ROLES,
    NormalizedIdentity,
    generate_user_id,
    normalize_login_response,
    normalize_signup_response,
)

logger = get_logger(__name__)

CONNECTIVITY_MESSAGE = "Unable to connect to the server. Please try again later."
MALFORMED_MESSAGE = "The server returned an unexpected response."
STORAGE_MESSAGE = "Unable to save the session on this device."


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """Single client-side session backed by local storage"""

    def __init__(
        self,
        client: IdentityClient,
        storage: MemoryStorage,
        audit_log: Optional[LoginAuditLog] = None,
        notifier: Optional[Notifier] = None,
        id_factory: Callable[[], str] = generate_user_id,
        clock: Callable[[], datetime] = _utc_now,
        user_key: str = "news_hub_user",
        token_key: str = "auth_token",
    ):
        self.client = client
        self.storage = storage
        self.audit_log = audit_log or LoginAuditLog(storage)
        self.notifier = notifier or LogNotifier()
        self.id_factory = id_factory
        self.clock = clock
        self.user_key = user_key
        self.token_key = token_key

        self._user: Optional[User] = None
        self._ready = False
        self._initializing = False
        self._in_flight = 0
        self._in_flight_lock = threading.Lock()
        self._disposed = False
        self._last_error: Optional[SessionClientError] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Restore the persisted session. Never raises for bad stored data."""
        self._check_usable()
        if self._ready:
            return

        self._initializing = True
        try:
            raw = self.storage.get_item(self.user_key)
            if raw is not None:
                try:
                    self._user = self._parse_stored_user(raw)
                    logger.info("Session restored", user_id=self._user.id)
                except CorruptedLocalStateError as e:
                    logger.warning("Discarding stored session", key=self.user_key, error=str(e))
                    self._user = None
                    self._discard_stored_user()
        finally:
            self._ready = True
            self._initializing = False

    def _discard_stored_user(self) -> None:
        try:
            self.storage.remove_item(self.user_key)
        except StorageError as e:
            logger.error("Failed to remove stored session", key=self.user_key, error=str(e))

    def dispose(self) -> None:
        """Release the identity client. The manager cannot be used afterwards."""
        if self._disposed:
            return
        self._disposed = True
        self.client.close()
        logger.debug("Session manager disposed")

    def _check_usable(self) -> None:
        if self._disposed:
            raise SessionClientError("Session manager has been disposed")

    @staticmethod
    def _parse_stored_user(raw: str) -> User:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptedLocalStateError(f"Stored user is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise CorruptedLocalStateError("Stored user is not an object")
        try:
            return User(**data)
        except ValidationError as e:
            raise CorruptedLocalStateError(f"Stored user is invalid: {e}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current_user(self) -> Optional[User]:
        return self._user

    def is_loading(self) -> bool:
        """True while initializing or while any login/signup is in flight"""
        return self._initializing or self._in_flight > 0

    def is_ready(self) -> bool:
        return self._ready

    def is_admin(self) -> bool:
        return self._user is not None and self._user.role == "admin"

    def token(self) -> Optional[str]:
        return self.storage.get_item(self.token_key)

    def state(self) -> SessionState:
        if not self._ready:
            return SessionState.UNINITIALIZED
        if self._user is None:
            return SessionState.ANONYMOUS
        return SessionState.AUTHENTICATED

    def last_error(self) -> Optional[SessionClientError]:
        """Error behind the most recent failed login/signup, None after a success"""
        return self._last_error

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> bool:
        """Authenticate with email and password. Returns True on success."""

        def request() -> NormalizedIdentity:
            body = self.client.login(email, password)
            return normalize_login_response(body, email, id_factory=self.id_factory)

        identity = self._authenticate(
            request,
            action="Login",
            rejected_message="Invalid email or password",
        )
        if identity is None:
            return False

        self.notifier.notify(
            Notification(
                title="Login successful",
                description=f"Welcome back, {identity.user.name}!",
                severity="success",
            )
        )
        return True

    def signup(self, name: str, email: str, password: str, role: Role = "user") -> bool:
        """Register a new account and start its session. Returns True on success."""
        if role not in VALID_ROLES:
            raise ValueError(f"role must be one of {VALID_ROLES}, got {role!r}")

        def request() -> NormalizedIdentity:
            body = self.client.signup(name, email, password, role)
            return normalize_signup_response(body, name, email, role, id_factory=self.id_factory)

        identity = self._authenticate(
            request,
            action="Signup",
            rejected_message="Failed to create account",
        )
        if identity is None:
            return False

        self.notifier.notify(
            Notification(
                title="Signup successful",
                description=f"Welcome, {identity.user.name}!",
                severity="success",
            )
        )
        return True

    def logout(self) -> None:
        """Clear the session locally. No server call."""
        self._check_usable()
        previous = self._user
        self._user = None
        self.storage.remove_item(self.user_key)
        self.storage.remove_item(self.token_key)
        if previous is not None:
            logger.info("Logged out", user_id=previous.id)
        self.notifier.notify(
            Notification(
                title="Logged out",
                description="You have been logged out successfully",
                severity="info",
            )
        )

    def _authenticate(
        self,
        request: Callable[[], NormalizedIdentity],
        action: str,
        rejected_message: str,
    ) -> Optional[NormalizedIdentity]:
        """Run a login/signup request, commit on success, notify on failure"""
        self._check_usable()
        with self._in_flight_lock:
            self._in_flight += 1
        try:
            try:
                identity = request()
            except InvalidCredentialsError as e:
                self._fail(e, f"{action} failed", e.message or rejected_message)
                return None
            except ConnectivityError as e:
                self._fail(e, f"{action} error", CONNECTIVITY_MESSAGE)
                return None
            except MalformedResponseError as e:
                self._fail(e, f"{action} error", MALFORMED_MESSAGE)
                return None

            try:
                self._commit(identity)
            except StorageError as e:
                self._fail(e, f"{action} error", STORAGE_MESSAGE)
                return None
            self._last_error = None
            logger.info(f"{action} succeeded", user_id=identity.user.id, role=identity.user.role)
            return identity
        finally:
            with self._in_flight_lock:
                self._in_flight -= 1

    def _fail(self, error: SessionClientError, title: str, description: str) -> None:
        self._last_error = error
        logger.warning(title, error_type=type(error).__name__, error=str(error))
        self.notifier.notify(Notification(title=title, description=description, severity="error"))

    def _commit(self, identity: NormalizedIdentity) -> None:
        """Persist the user first; token and audit failures do not undo the session"""
        user = identity.user
        self.storage.set_item(self.user_key, user.model_dump_json())
        self._user = user
        if identity.token:
            try:
                self.storage.set_item(self.token_key, identity.token)
            except StorageError as e:
                logger.error("Failed to save auth token", user_id=user.id, error=str(e))

        record = LoginRecord(
            user_id=user.id,
            email=user.email,
            timestamp=self.clock().isoformat(),
        )
        try:
            self.audit_log.append(record)
        except StorageError as e:
            logger.error("Failed to save login record", user_id=user.id, error=str(e))
