"""Unit tests for local storage and the login audit log"""

import json
from unittest.mock import patch

import pytest

from newshub_session.models.user import LoginRecord
from newshub_session.services.audit_log import LoginAuditLog
from newshub_session.services.local_storage import JsonFileStorage, MemoryStorage
from newshub_session.utils.exceptions import StorageError


class TestMemoryStorage:
    def test_set_get_remove(self):
        storage = MemoryStorage()
        storage.set_item("k", "v")

        assert storage.get_item("k") == "v"
        assert "k" in storage
        assert storage.keys() == ["k"]

        storage.remove_item("k")
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_rejects_non_string_values(self):
        with pytest.raises(TypeError):
            MemoryStorage().set_item("k", {"a": 1})


class TestJsonFileStorage:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "store" / "local_storage.json"
        JsonFileStorage(str(path)).set_item("news_hub_user", '{"id": "u1"}')

        reopened = JsonFileStorage(str(path))

        assert reopened.get_item("news_hub_user") == '{"id": "u1"}'

    def test_preserves_unrelated_keys(self, tmp_path):
        path = tmp_path / "local_storage.json"
        path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

        storage = JsonFileStorage(str(path))
        storage.set_item("auth_token", "t1")
        storage.remove_item("auth_token")

        assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark"}

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "local_storage.json"
        path.write_text("not json at all", encoding="utf-8")

        storage = JsonFileStorage(str(path))
        assert storage.keys() == []

        storage.set_item("k", "v")
        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_missing_file_is_empty(self, tmp_path):
        storage = JsonFileStorage(str(tmp_path / "absent.json"))
        assert storage.get_item("anything") is None

    def test_failed_write_keeps_previous_state(self, tmp_path):
        path = tmp_path / "local_storage.json"
        storage = JsonFileStorage(str(path))
        storage.set_item("news_hub_user", '{"id": "u1"}')
        saved = path.read_text(encoding="utf-8")

        with patch(
            "newshub_session.services.local_storage.tempfile.NamedTemporaryFile",
            side_effect=OSError(28, "No space left on device"),
        ):
            with pytest.raises(StorageError):
                storage.set_item("news_hub_user", '{"id": "u2"}')
            with pytest.raises(StorageError):
                storage.remove_item("news_hub_user")

        assert storage.get_item("news_hub_user") == '{"id": "u1"}'
        assert path.read_text(encoding="utf-8") == saved

    def test_unwritable_directory_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        storage = JsonFileStorage(str(blocker / "local_storage.json"))

        with pytest.raises(StorageError):
            storage.set_item("k", "v")

        assert storage.get_item("k") is None
        assert storage.keys() == []

    def test_no_temp_files_left_after_failed_write(self, tmp_path):
        path = tmp_path / "local_storage.json"
        storage = JsonFileStorage(str(path))

        with patch(
            "newshub_session.services.local_storage.json.dump",
            side_effect=OSError(5, "Input/output error"),
        ):
            with pytest.raises(StorageError):
                storage.set_item("k", "v")

        assert list(tmp_path.iterdir()) == []


class TestLoginAuditLog:
    def _record(self, n):
        return LoginRecord(user_id=f"u{n}", email=f"u{n}@news.io", timestamp=f"2026-01-0{n}T00:00:00+00:00")

    def test_append_and_read(self):
        storage = MemoryStorage()
        log = LoginAuditLog(storage)

        log.append(self._record(1))
        log.append(self._record(2))

        assert [r.user_id for r in log.records()] == ["u1", "u2"]
        stored = json.loads(storage.get_item("news_hub_login_records"))
        assert stored[0] == {"userId": "u1", "email": "u1@news.io", "timestamp": "2026-01-01T00:00:00+00:00"}

    def test_drops_oldest_beyond_limit(self):
        log = LoginAuditLog(MemoryStorage(), max_records=2)
        for n in range(1, 4):
            log.append(self._record(n))

        assert [r.user_id for r in log.records()] == ["u2", "u3"]

    def test_corrupt_log_is_restarted(self):
        storage = MemoryStorage({"news_hub_login_records": "{broken"})
        log = LoginAuditLog(storage)

        assert log.records() == []
        log.append(self._record(1))
        assert len(log.records()) == 1
