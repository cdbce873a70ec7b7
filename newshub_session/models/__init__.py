from .user import LoginRecord, Notification, Role, User

__all__ = ["LoginRecord", "Notification", "Role", "User"]
