"""Reconciliation of local project aggregates with the remote service.

Modules:

- ``repository`` -- ``ProjectRepository``: observable collection, save
  with event tracking, and the upload walk.
- ``models``     -- ``RemoteOperation``, ``RemoteCall``, ``UploadReport``.
- ``reporter``   -- Human-readable and JSON rendering of projects and
  upload reports.
- ``samples``    -- Seed data mimicking a server snapshot.

Usage example
-------------
::

    from inspection_sync.analytics import ConsoleAnalytics
    from inspection_sync.model import Comment, Project, Room
    from inspection_sync.sync import ProjectRepository

    repo = ProjectRepository(api_client, ConsoleAnalytics())

    project = (
        Project.make("12 Elm St")
        .copy_by_adding_room(Room.make("Basement", id="r1"))
        .copy_by_adding_comment_to_room("r1", Comment.make("leak"))
    )
    repo.save(project)

    report = await repo.upload_project(project.id)
"""

from .models import RemoteCall, RemoteOperation, UploadReport
from .reporter import (
    format_project_tree,
    format_upload_report,
    pending_changes,
    project_to_json,
    report_to_json,
)
from .repository import ProjectRepository
from .samples import sample_projects

__all__ = [
    "ProjectRepository",
    "RemoteCall",
    "RemoteOperation",
    "UploadReport",
    "format_project_tree",
    "format_upload_report",
    "pending_changes",
    "project_to_json",
    "report_to_json",
    "sample_projects",
]
