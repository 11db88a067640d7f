"""Project and upload report formatting functions.

Provides human-readable and machine-readable output:

- ``format_project_tree`` -- indented tree of one project with sync flags.
- ``format_upload_report`` -- post-upload summary.
- ``project_to_json`` / ``report_to_json`` -- structured dicts for ``--json``.
- ``pending_changes`` -- how many calls the next upload would issue.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from inspection_sync.model import SyncState

if TYPE_CHECKING:
    from inspection_sync.model import Project
    from .models import UploadReport

_UPLOADED_STATES = (SyncState.NEW, SyncState.MODIFIED)
_UPLOADED_PANO_STATES = (SyncState.NEW, SyncState.DELETED)


def pending_changes(project: Project) -> int:
    """Count the remote calls an upload of *project* would issue."""
    count = 1 if project.sync_state in _UPLOADED_STATES else 0
    for room in project.rooms:
        if room.sync_state in _UPLOADED_STATES:
            count += 1
        if room.pano is not None and room.pano.sync_state in _UPLOADED_PANO_STATES:
            count += 1
        count += sum(
            1 for c in room.comments if c.sync_state in _UPLOADED_STATES
        )
    return count + len(project.deleted_panos)


# ------------------------------------------------------------------
# Human-readable output
# ------------------------------------------------------------------


def format_project_tree(project: Project) -> str:
    """Format *project* as an indented tree annotated with sync flags.

    Args:
        project: The aggregate to render.

    Returns:
        Multi-line formatted string.
    """
    lines = [
        f"Project '{project.name}' ({project.id}) [{project.sync_state.value}]"
    ]
    for room in project.rooms:
        lines.append(
            f"  Room '{room.name}' ({room.id}) [{room.sync_state.value}]"
        )
        if room.pano is not None:
            lines.append(
                f"    Pano {room.pano.id} [{room.pano.sync_state.value}] "
                f"{len(room.pano.image_data)} bytes"
            )
        for comment in room.comments:
            lines.append(
                f"    Comment {comment.id} [{comment.sync_state.value}]: "
                f"{comment.text}"
            )

    if project.deleted_panos or project.deleted_pano_ids:
        lines.append("Pending pano deletions:")
        for deleted in project.deleted_panos:
            lines.append(f"  {deleted.pano_id} (room {deleted.room_id})")
        for pano_id in sorted(project.deleted_pano_ids):
            lines.append(f"  {pano_id}")

    lines.append(f"Pending changes: {pending_changes(project)}")
    return "\n".join(lines)


def format_upload_report(report: UploadReport) -> str:
    """Format an upload report as human-readable text.

    Calls are listed in the order they were issued, followed by per-verb
    totals.
    """
    lines = [f"Upload report for project '{report.project_id}'"]
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    if not report.calls:
        lines.append("Nothing to upload.")
        return "\n".join(lines)

    for call in report.calls:
        target = call.entity_id
        if call.room_id:
            target += f" (room {call.room_id})"
        lines.append(f"  {call.operation.value:<15} {target}")
    lines.append("")

    verbs = Counter(call.operation.verb for call in report.calls)
    lines.append(
        f"Synced {report.items_synced_count} items: "
        f"{verbs['create']} created, {verbs['update']} updated, "
        f"{verbs['delete']} deleted"
    )
    return "\n".join(lines)


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def project_to_json(project: Project) -> dict:
    """Convert *project* to a JSON-serialisable dict.

    Image data is reduced to its byte length.
    """
    return {
        "id": project.id,
        "name": project.name,
        "sync_state": project.sync_state.value,
        "rooms": [
            {
                "id": room.id,
                "name": room.name,
                "sync_state": room.sync_state.value,
                "pano": (
                    {
                        "id": room.pano.id,
                        "size": len(room.pano.image_data),
                        "sync_state": room.pano.sync_state.value,
                    }
                    if room.pano is not None
                    else None
                ),
                "comments": [
                    {
                        "id": c.id,
                        "text": c.text,
                        "sync_state": c.sync_state.value,
                    }
                    for c in room.comments
                ],
            }
            for room in project.rooms
        ],
        "deleted_panos": [
            {"pano_id": d.pano_id, "room_id": d.room_id}
            for d in project.deleted_panos
        ],
        "deleted_pano_ids": sorted(project.deleted_pano_ids),
        "pending_changes": pending_changes(project),
    }


def report_to_json(report: UploadReport) -> dict:
    """Convert an ``UploadReport`` to a JSON-serialisable dict."""
    return {
        "project_id": report.project_id,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "items_synced_count": report.items_synced_count,
        "calls": [
            {
                "operation": c.operation.value,
                "entity_id": c.entity_id,
                "room_id": c.room_id,
            }
            for c in report.calls
        ],
    }
