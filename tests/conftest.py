# tests/conftest.py
"""
Pytest configuration and fixtures for the therapy center test suite.

Provides:
- In-memory document store and a container wired to it
- Service fixtures
- FastAPI test client bound to the same container
- Factories for kids, practitioners, goals and sessions

Tests never touch SQLite files or Supabase unless they build their own store.
"""

import os
from datetime import datetime, timezone
from typing import Any, Dict, Generator

import pytest
from fastapi.testclient import TestClient

# Set test environment before imports
os.environ["THERAPY_ENV"] = "test"
os.environ.pop("SUPER_ADMIN_KEY", None)

from therapy_center.adapters.store.memory import InMemoryDocumentStore
from therapy_center.config import TherapyCenterConfig
from therapy_center.core.container import Container
from therapy_center.core.models import Kid, Practitioner, PractitionerType
from therapy_center.main import create_app
from therapy_center.repositories import KidRepository, PractitionerRepository

ADMIN_KEY = "admin-key-1"
OTHER_ADMIN_KEY = "admin-key-2"
SUPER_KEY = "super-key-1"


# ============== Store & Container ==============

@pytest.fixture
def test_config() -> TherapyCenterConfig:
    return TherapyCenterConfig(
        environment="test",
        store_type="memory",
        allowed_origins=[],
        form_link_base="/therapy/form/new",
        super_admin_key=SUPER_KEY,
        super_admin_name="Root",
        log_level="WARNING",
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def container(test_config, store) -> Container:
    return Container(config=test_config, store=store)


# ============== Services ==============

@pytest.fixture
def sessions(container):
    return container.session_service()


@pytest.fixture
def forms(container):
    return container.form_service()


@pytest.fixture
def kids(container):
    return container.kid_service()


@pytest.fixture
def team(container):
    return container.team_service()


@pytest.fixture
def goals(container):
    return container.goal_service()


@pytest.fixture
def notifications(container):
    return container.notification_service()


@pytest.fixture
def board_requests(container):
    return container.board_request_service()


@pytest.fixture
def admins(container):
    return container.admin_service()


# ============== Factories ==============

@pytest.fixture
def base_date() -> datetime:
    return datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_kid(store):
    """Create a kid directly in the store."""
    repo = KidRepository(store)
    counter = {"n": 0}

    def _make(admin_id: str = "admin-1", name: str = None, **extra: Any) -> Kid:
        counter["n"] += 1
        kid_id = extra.pop("id", f"kid-{counter['n']}")
        return repo.save(Kid(
            id=kid_id,
            name=name or f"Kid {counter['n']}",
            age=6,
            gender="boy",
            admin_id=admin_id,
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            extra=extra,
        ))

    return _make


@pytest.fixture
def kid(make_kid) -> Kid:
    return make_kid(id="kid-noa", name="Noa")


@pytest.fixture
def therapist(store) -> Practitioner:
    return PractitionerRepository(store).save(Practitioner(
        id="pract-sara",
        name="Sara",
        type=PractitionerType.THERAPIST.value,
        created_by="admin-1",
    ))


@pytest.fixture
def weekly_session(sessions, kid, therapist, base_date):
    """One scheduled therapy session for the default kid."""
    return sessions.schedule(kid.id, therapist.id, base_date)


def form_payload(kid_id: str, session_id: str = None, **fields: Any) -> Dict[str, Any]:
    payload = {
        "kidId": kid_id,
        "cooperation": 80,
        "sessionDuration": 45,
        "mood": "calm",
        "successes": "Said three-word sentences",
    }
    if session_id:
        payload["sessionId"] = session_id
    payload.update(fields)
    return payload


@pytest.fixture
def make_form_payload():
    return form_payload


# ============== FastAPI Client Fixtures ==============

@pytest.fixture
def app(container):
    return create_app(container)


@pytest.fixture
def client(app, admins) -> Generator[TestClient, None, None]:
    """
    Test client over the in-memory container.

    Two center admins exist (ADMIN_KEY, OTHER_ADMIN_KEY) next to the
    bootstrap super admin created at startup.
    """
    admins.create_admin_key("Center One", ADMIN_KEY, created_by=None)
    admins.create_admin_key("Center Two", OTHER_ADMIN_KEY, created_by=None)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.fixture
def other_admin_headers() -> Dict[str, str]:
    return {"X-Admin-Key": OTHER_ADMIN_KEY}


@pytest.fixture
def super_headers() -> Dict[str, str]:
    return {"X-Admin-Key": SUPER_KEY}


@pytest.fixture
def admin_id(client, admin_headers) -> str:
    return client.get("/api/admin/me", headers=admin_headers).json()["adminId"]

