"""Shared fixtures: stub identity service, storage and recording notifier"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from fastapi.testclient import TestClient

from newshub_session.api.identity_client import IdentityClient
from newshub_session.auth.session_manager import SessionManager
from newshub_session.services.audit_log import LoginAuditLog
from newshub_session.services.local_storage import MemoryStorage
from newshub_session.services.notifications import Notifier

FIXED_NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


class StubIdentityService:
    """FastAPI app standing in for the identity service"""

    def __init__(self):
        self.replies: Dict[str, Tuple[int, Any]] = {}
        self.received: List[Tuple[str, Dict[str, Any]]] = []
        self.app = FastAPI()

        @self.app.post("/api/auth/{action}")
        async def handle(action: str, request: Request):
            self.received.append((action, await request.json()))
            status, body = self.replies.get(action, (404, {"message": "not configured"}))
            if isinstance(body, str):
                return Response(content=body, status_code=status, media_type="text/plain")
            return JSONResponse(content=body, status_code=status)

    def reply(self, action: str, status: int, body: Any) -> None:
        self.replies[action] = (status, body)


class RecordingNotifier(Notifier):
    def __init__(self):
        self.notifications = []

    def notify(self, notification):
        self.notifications.append(notification)

    @property
    def last(self):
        return self.notifications[-1]


@pytest.fixture
def identity_service():
    return StubIdentityService()


@pytest.fixture
def identity_client(identity_service):
    return IdentityClient(
        base_url="http://testserver",
        session=TestClient(identity_service.app),
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_manager(identity_client, storage, notifier):
    def _make(client=None, store=None):
        store = store if store is not None else storage
        return SessionManager(
            client=client or identity_client,
            storage=store,
            audit_log=LoginAuditLog(store),
            notifier=notifier,
            id_factory=lambda: "generated-id",
            clock=lambda: FIXED_NOW,
        )

    return _make


@pytest.fixture
def manager(make_manager):
    session = make_manager()
    session.initialize()
    return session
