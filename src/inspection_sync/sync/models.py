"""Pydantic models describing an upload run.

- ``RemoteOperation``: Enum of the calls the upload walk can issue.
- ``RemoteCall``: One call that returned successfully.
- ``UploadReport``: Outcome of a successful ``upload_project``.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class RemoteOperation(str, Enum):
    """Remote-service operations, one per entity and verb."""

    CREATE_PROJECT = "create_project"
    UPDATE_PROJECT = "update_project"
    CREATE_ROOM = "create_room"
    UPDATE_ROOM = "update_room"
    CREATE_PANO = "create_pano"
    DELETE_PANO = "delete_pano"
    CREATE_COMMENT = "create_comment"
    UPDATE_COMMENT = "update_comment"

    @property
    def entity_type(self) -> str:
        return self.value.split("_", 1)[1]

    @property
    def verb(self) -> str:
        return self.value.split("_", 1)[0]


class RemoteCall(BaseModel):
    """A remote call issued during an upload walk.

    Attributes:
        operation: Which remote operation was called.
        entity_id: Id of the entity the call targeted.
        room_id: Owning room for panos and comments.
    """

    operation: RemoteOperation
    entity_id: str
    room_id: str | None = None

    model_config = {"frozen": True}

    @property
    def entity_type(self) -> str:
        return self.operation.entity_type


class UploadReport(BaseModel):
    """Result of a successful upload of one project.

    Attributes:
        project_id: The uploaded project.
        calls: Remote calls in the order they were issued.
        started_at: ISO 8601 timestamp when the upload started.
        completed_at: ISO 8601 timestamp when the upload completed.
    """

    project_id: str
    calls: list[RemoteCall] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @property
    def items_synced_count(self) -> int:
        """Number of entities actually transmitted."""
        return len(self.calls)

    def calls_for(self, operation: RemoteOperation) -> list[RemoteCall]:
        """Calls of the given *operation*, in walk order."""
        return [c for c in self.calls if c.operation == operation]
