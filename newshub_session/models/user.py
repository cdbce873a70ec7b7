"""User, login record and notification models"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["admin", "user"]
Severity = Literal["info", "success", "error"]


class User(BaseModel):
    """Identity cached for the active session"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    email: str
    name: str
    role: Role = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class LoginRecord(BaseModel):
    """Audit entry written on every successful login or signup"""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    email: str
    timestamp: str  # ISO format, UTC


class Notification(BaseModel):
    """User-facing feedback for a session operation"""

    title: str
    description: str
    severity: Severity = "info"
