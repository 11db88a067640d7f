"""Aggregate model: projects, rooms, panos, comments and their sync flags."""

from .entities import Comment, DeletedPano, Pano, Project, Room, SyncState

__all__ = [
    "Comment",
    "DeletedPano",
    "Pano",
    "Project",
    "Room",
    "SyncState",
]
