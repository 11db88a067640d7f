"""Shared pytest fixtures for inspection-sync tests."""

from __future__ import annotations

from typing import Any

import pytest

from inspection_sync.config import Config
from inspection_sync.model import Comment, Pano, Project, Room, SyncState
from inspection_sync.sync.repository import ProjectRepository


class RecordingAnalytics:
    """Analytics sink that keeps every event for assertions."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def track_event(self, name: str, properties) -> None:
        self.events.append((name, dict(properties)))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def clear(self) -> None:
        self.events.clear()


class FakeApiClient:
    """In-memory remote service that records calls in order.

    ``fail_on`` names an operation (e.g. ``"create_room"``) whose
    ``fail_after``-th invocation (0-based) raises ``error``.
    """

    def __init__(
        self,
        fail_on: str | None = None,
        fail_after: int = 0,
        error: Exception | None = None,
    ) -> None:
        self.calls: list[tuple] = []
        self.fail_on = fail_on
        self.fail_after = fail_after
        self.error = error or ConnectionError("service unavailable")
        self._seen: dict[str, int] = {}

    def _record(self, operation: str, *ids: str) -> None:
        count = self._seen.get(operation, 0)
        self._seen[operation] = count + 1
        if operation == self.fail_on and count == self.fail_after:
            raise self.error
        self.calls.append((operation, *ids))

    def operations(self) -> list[str]:
        return [c[0] for c in self.calls]

    async def create_project(self, project):
        self._record("create_project", project.id)

    async def update_project(self, project):
        self._record("update_project", project.id)

    async def create_room(self, project_id, room):
        self._record("create_room", project_id, room.id)

    async def update_room(self, project_id, room):
        self._record("update_room", project_id, room.id)

    async def create_pano(self, project_id, room_id, pano):
        self._record("create_pano", project_id, room_id, pano.id)

    async def delete_pano(self, project_id, room_id, pano_id):
        self._record("delete_pano", project_id, room_id, pano_id)

    async def create_comment(self, project_id, room_id, comment):
        self._record("create_comment", project_id, room_id, comment.id)

    async def update_comment(self, project_id, room_id, comment):
        self._record("update_comment", project_id, room_id, comment.id)


@pytest.fixture
def analytics():
    return RecordingAnalytics()


@pytest.fixture
def api_client():
    return FakeApiClient()


@pytest.fixture
def repo(api_client, analytics):
    return ProjectRepository(api_client, analytics)


@pytest.fixture
def synced_project():
    """A server snapshot: two rooms, one pano, two comments, all SYNCED."""
    return Project(
        id="p1",
        name="123 Main St",
        rooms=(
            Room(
                id="r1",
                name="Living Room",
                pano=Pano(id="x", image_data=b"\x01\x02\x03"),
                comments=(Comment(id="c1", text="Water stain"),),
            ),
            Room(
                id="r2",
                name="Kitchen",
                comments=(Comment(id="c2", text="Damp floor"),),
            ),
        ),
        sync_state=SyncState.SYNCED,
    )


@pytest.fixture
def mock_config():
    return Config(
        api_url="https://inspections.example.com/api",
        api_token="secret-token",
    )


@pytest.fixture
def make_repo(analytics):
    """Factory for a repository backed by a configurable fake client."""

    def _make(**client_kwargs) -> tuple[ProjectRepository, FakeApiClient]:
        client = FakeApiClient(**client_kwargs)
        return ProjectRepository(client, analytics), client

    return _make
