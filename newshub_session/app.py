"""Application wiring: settings -> storage, client, audit log, session manager"""

from typing import Optional

from .api.identity_client import IdentityClient
from .auth.session_manager import SessionManager
from .services.audit_log import LoginAuditLog
from .services.local_storage import JsonFileStorage
from .services.notifications import Notifier
from .utils.config import ConfigManager, Settings
from .utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


class SessionApp:
    """Owns the session manager and its collaborators for one client process"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
        configure_logging: bool = True,
    ):
        self.settings = settings
        self.notifier = notifier
        self.configure_logging = configure_logging
        self.session: Optional[SessionManager] = None

    def initialize(self) -> SessionManager:
        """Build collaborators and restore the persisted session"""
        if self.session is not None:
            return self.session

        if self.settings is None:
            self.settings = ConfigManager().load_settings()
        settings = self.settings

        if self.configure_logging:
            setup_logger(
                log_level=settings.logging.level,
                log_format=settings.logging.format,
                file_path=settings.logging.file_path,
                max_bytes=settings.logging.max_bytes,
                backup_count=settings.logging.backup_count,
            )

        logger.info(
            "Initializing session client",
            app_name=settings.app.name,
            version=settings.app.version,
            environment=settings.app.environment,
            identity_url=settings.identity.base_url,
        )

        storage = JsonFileStorage(settings.storage.path)
        client = IdentityClient(
            base_url=settings.identity.base_url,
            login_path=settings.identity.login_path,
            signup_path=settings.identity.signup_path,
            timeout=settings.identity.timeout,
            max_attempts=settings.identity.max_attempts,
        )
        audit_log = LoginAuditLog(
            storage,
            key=settings.storage.audit_key,
            max_records=settings.storage.audit_max_records,
        )
        self.session = SessionManager(
            client=client,
            storage=storage,
            audit_log=audit_log,
            notifier=self.notifier,
            user_key=settings.storage.user_key,
            token_key=settings.storage.token_key,
        )
        self.session.initialize()
        return self.session

    def close(self) -> None:
        if self.session is not None:
            self.session.dispose()
            self.session = None

    def __enter__(self) -> SessionManager:
        return self.initialize()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
