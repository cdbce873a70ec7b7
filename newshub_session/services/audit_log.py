"""Append-only login audit log kept in local storage"""

import json
from typing import List

from pydantic import ValidationError

from ..models.user import LoginRecord
from ..utils.logger import get_logger
from .local_storage import MemoryStorage

logger = get_logger(__name__)


class LoginAuditLog:
    """Stores LoginRecord entries as a JSON array under one storage key"""

    def __init__(self, storage: MemoryStorage, key: str = "news_hub_login_records", max_records: int = 500):
        self.storage = storage
        self.key = key
        self.max_records = max_records

    def _load_raw(self) -> List[dict]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Login audit log is corrupted, starting a new one", key=self.key)
            return []
        if not isinstance(data, list):
            logger.warning("Login audit log is not a list, starting a new one", key=self.key)
            return []
        return [item for item in data if isinstance(item, dict)]

    def append(self, record: LoginRecord) -> None:
        """Append a record, dropping the oldest beyond max_records"""
        entries = self._load_raw()
        entries.append(record.model_dump(by_alias=True))
        entries = entries[-self.max_records:]
        self.storage.set_item(self.key, json.dumps(entries))
        logger.debug("Login record saved", user_id=record.user_id, total=len(entries))

    def records(self) -> List[LoginRecord]:
        out: List[LoginRecord] = []
        for item in self._load_raw():
            try:
                out.append(LoginRecord(**item))
            except ValidationError:
                continue
        return out
