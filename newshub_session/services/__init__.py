from .audit_log import LoginAuditLog
from .local_storage import JsonFileStorage, MemoryStorage
from .notifications import ConsoleNotifier, LogNotifier, Notifier

__all__ = [
    "ConsoleNotifier",
    "JsonFileStorage",
    "LogNotifier",
    "LoginAuditLog",
    "MemoryStorage",
    "Notifier",
]
