"""Project repository: the single source of truth for local projects.

``ProjectRepository`` owns the observable collection of ``Project``
aggregates.  It:

1. Upserts aggregates on ``save()`` and announces every dirty entity to
   the analytics sink.
2. Uploads one aggregate on ``upload_project()`` by walking its tree and
   issuing one remote call per NEW, MODIFIED or DELETED entity.
3. Rewrites the aggregate as SYNCED only once every call succeeded.  Edits
   saved while the walk was running keep their pending flags.

Error handling is all-or-nothing per upload: the first failing call
aborts the walk, the failure is recorded, and the original exception
propagates with local state untouched.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import Any

from inspection_sync.analytics import Analytics
from inspection_sync.core.client import ApiClient
from inspection_sync.core.state_flow import StateFlow
from inspection_sync.errors import LookupMiss
from inspection_sync.model import Project, SyncState
from inspection_sync.sync.models import (
    RemoteCall,
    RemoteOperation,
    UploadReport,
)
from inspection_sync.sync.samples import sample_projects

logger = logging.getLogger(__name__)

_EVENT_BY_STATE = {
    SyncState.NEW: "entity_created",
    SyncState.MODIFIED: "entity_updated",
    SyncState.DELETED: "entity_deleted",
}


class ProjectRepository:
    """In-memory repository of project aggregates.

    All edits to rooms, panos and comments must go through ``Project``'s
    ``copy_by_*`` methods and then be stored with ``save()``.

    Args:
        api_client: Remote service used by ``upload_project``.
        analytics: Recorder for tracking events.
        serialize_uploads: Allow at most one running upload per project id.
        sample_data: Seed the collection with sample projects.
    """

    def __init__(
        self,
        api_client: ApiClient,
        analytics: Analytics,
        *,
        serialize_uploads: bool = True,
        sample_data: bool = False,
    ) -> None:
        self.api_client = api_client
        self.analytics = analytics
        self.serialize_uploads = serialize_uploads

        initial = sample_projects() if sample_data else ()
        self._projects: StateFlow[tuple[Project, ...]] = StateFlow(initial)
        self._upload_locks: dict[str, asyncio.Lock] = {}
        self._upload_lock_users: dict[str, int] = {}

    @property
    def projects(self) -> StateFlow[tuple[Project, ...]]:
        """Observable collection of all projects."""
        return self._projects

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, project_id: str) -> Project | None:
        """Return the stored project with *project_id*, or ``None``."""
        return next(
            (p for p in self._projects.value if p.id == project_id), None
        )

    def require(self, project_id: str) -> Project:
        """Return the stored project or raise ``LookupMiss``."""
        project = self.get(project_id)
        if project is None:
            raise LookupMiss("project", project_id)
        return project

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, project: Project) -> None:
        """Insert or replace *project* and announce its dirty entities.

        Every call re-announces the whole dirty set, not only what
        changed since the previous save.
        """
        is_new = self.get(project.id) is None
        self._store(project)

        self._track(
            "entity_created" if is_new else "entity_updated",
            entity_type="project",
            id=project.id,
        )

        for room in project.rooms:
            self._track_state(
                room.sync_state,
                entity_type="room",
                id=room.id,
                project_id=project.id,
            )
            if room.pano is not None:
                self._track_state(
                    room.pano.sync_state,
                    entity_type="pano",
                    id=room.pano.id,
                    project_id=project.id,
                    room_id=room.id,
                )
            for comment in room.comments:
                self._track_state(
                    comment.sync_state,
                    entity_type="comment",
                    id=comment.id,
                    project_id=project.id,
                    room_id=room.id,
                )

        tombstoned = set()
        for deleted in project.deleted_panos:
            tombstoned.add(deleted.pano_id)
            self._track(
                "entity_deleted",
                entity_type="pano",
                id=deleted.pano_id,
                project_id=project.id,
                room_id=deleted.room_id,
            )
        for pano_id in sorted(project.deleted_pano_ids - tombstoned):
            self._track(
                "entity_deleted",
                entity_type="pano",
                id=pano_id,
                project_id=project.id,
            )

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload_project(self, project_id: str) -> UploadReport | None:
        """Push every unsynced entity of one project to the remote service.

        Returns:
            An ``UploadReport`` on success, or ``None`` when no project
            with *project_id* is stored.

        Raises:
            Exception: Whatever the remote client raised, after an
                ``upload_failed`` event has been recorded.
        """
        if self.get(project_id) is None:
            logger.debug("Upload skipped: project %s not found", project_id)
            return None

        async with self._upload_lock(project_id):
            project = self.get(project_id)
            if project is None:
                return None
            return await self._upload(project)

    async def _upload(self, project: Project) -> UploadReport:
        started_at = datetime.now(timezone.utc).isoformat()
        self._track("upload_started", project_id=project.id)
        logger.info("Uploading project %s", project.id)

        calls: list[RemoteCall] = []
        try:
            await self._walk(project, calls)
        except Exception as exc:
            logger.error(
                "Upload of project %s failed after %d calls: %s",
                project.id,
                len(calls),
                exc,
            )
            self._track(
                "upload_failed",
                project_id=project.id,
                reason=str(exc) or "Unknown error",
                error_details=repr(exc),
            )
            raise

        current = self.get(project.id)
        if current is None or current == project:
            self._store(project.copy_by_marking_synced())
        else:
            logger.info(
                "Project %s changed during upload; newer edits stay pending",
                project.id,
            )
            self._store(current.copy_by_marking_uploaded(project))

        report = UploadReport(
            project_id=project.id,
            calls=calls,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )
        self._track(
            "upload_completed",
            project_id=project.id,
            success=True,
            items_synced_count=report.items_synced_count,
        )
        logger.info(
            "Uploaded project %s (%d items)",
            project.id,
            report.items_synced_count,
        )
        return report

    async def _walk(self, project: Project, calls: list[RemoteCall]) -> None:
        """Issue remote calls top-down, recording each one that returns."""
        client = self.api_client
        pid = project.id

        if project.sync_state == SyncState.NEW:
            await client.create_project(project)
            calls.append(self._call(RemoteOperation.CREATE_PROJECT, pid))
        elif project.sync_state == SyncState.MODIFIED:
            await client.update_project(project)
            calls.append(self._call(RemoteOperation.UPDATE_PROJECT, pid))

        for room in project.rooms:
            if room.sync_state == SyncState.NEW:
                await client.create_room(pid, room)
                calls.append(self._call(RemoteOperation.CREATE_ROOM, room.id))
            elif room.sync_state == SyncState.MODIFIED:
                await client.update_room(pid, room)
                calls.append(self._call(RemoteOperation.UPDATE_ROOM, room.id))

            pano = room.pano
            if pano is not None:
                # A MODIFIED pano has no update call in the protocol.
                if pano.sync_state == SyncState.NEW:
                    await client.create_pano(pid, room.id, pano)
                    calls.append(
                        self._call(RemoteOperation.CREATE_PANO, pano.id, room.id)
                    )
                elif pano.sync_state == SyncState.DELETED:
                    await client.delete_pano(pid, room.id, pano.id)
                    calls.append(
                        self._call(RemoteOperation.DELETE_PANO, pano.id, room.id)
                    )

            for comment in room.comments:
                if comment.sync_state == SyncState.NEW:
                    await client.create_comment(pid, room.id, comment)
                    calls.append(
                        self._call(
                            RemoteOperation.CREATE_COMMENT, comment.id, room.id
                        )
                    )
                elif comment.sync_state == SyncState.MODIFIED:
                    await client.update_comment(pid, room.id, comment)
                    calls.append(
                        self._call(
                            RemoteOperation.UPDATE_COMMENT, comment.id, room.id
                        )
                    )

        tombstoned = set()
        for deleted in project.deleted_panos:
            tombstoned.add(deleted.pano_id)
            await client.delete_pano(pid, deleted.room_id, deleted.pano_id)
            calls.append(
                self._call(
                    RemoteOperation.DELETE_PANO,
                    deleted.pano_id,
                    deleted.room_id,
                )
            )

        for pano_id in sorted(project.deleted_pano_ids - tombstoned):
            logger.warning(
                "Cannot delete pano %s of project %s remotely: no room id recorded",
                pano_id,
                pid,
            )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _call(
        operation: RemoteOperation, entity_id: str, room_id: str | None = None
    ) -> RemoteCall:
        logger.debug("Remote %s %s", operation.value, entity_id)
        return RemoteCall(
            operation=operation, entity_id=entity_id, room_id=room_id
        )

    @contextlib.asynccontextmanager
    async def _upload_lock(self, project_id: str):
        """Hold the upload lock of *project_id* while uploads are serialized.

        A lock lives only as long as some upload holds or awaits it.
        """
        if not self.serialize_uploads:
            yield
            return
        lock = self._upload_locks.get(project_id)
        if lock is None:
            lock = self._upload_locks[project_id] = asyncio.Lock()
        self._upload_lock_users[project_id] = (
            self._upload_lock_users.get(project_id, 0) + 1
        )
        try:
            async with lock:
                yield
        finally:
            self._upload_lock_users[project_id] -= 1
            if not self._upload_lock_users[project_id]:
                del self._upload_lock_users[project_id]
                del self._upload_locks[project_id]

    def _store(self, project: Project) -> None:
        """Upsert without emitting tracking events."""
        current = self._projects.value
        for index, existing in enumerate(current):
            if existing.id == project.id:
                updated = current[:index] + (project,) + current[index + 1 :]
                break
        else:
            updated = current + (project,)
        self._projects.emit(updated)

    def _track(self, name: str, **properties: Any) -> None:
        self.analytics.track_event(name, properties)

    def _track_state(self, state: SyncState, **properties: Any) -> None:
        event = _EVENT_BY_STATE.get(state)
        if event is not None:
            self._track(event, **properties)
