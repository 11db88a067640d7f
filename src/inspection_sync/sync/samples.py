"""Sample projects for demos and manual testing.

The projects mimic a snapshot loaded from the server, so every entity is
SYNCED and no tracking events are emitted when they are seeded.
"""

from __future__ import annotations

from inspection_sync.model import Comment, Pano, Project, Room


def sample_projects() -> tuple[Project, ...]:
    water_damage = (
        Project(id="sample-project-1", name="123 Main St - Water Damage")
        .copy_by_adding_room(Room.make("Living Room", id="room-1"))
        .copy_by_adding_room(Room.make("Kitchen", id="room-2"))
        .copy_by_adding_room(Room.make("Master Bedroom", id="room-3"))
        .copy_by_setting_pano_to_room(
            "room-1", Pano(id="pano-1", image_data=bytes([1, 2, 3]))
        )
        .copy_by_adding_comment_to_room(
            "room-1",
            Comment(id="comment-1", text="Water stain visible on ceiling"),
        )
        .copy_by_adding_comment_to_room(
            "room-1", Comment(id="comment-2", text="Carpet is damp near window")
        )
        .copy_by_adding_comment_to_room(
            "room-2", Comment(id="comment-3", text="Under sink damage observed")
        )
        # Attaching tags everything NEW; these came from the server.
        .copy_by_marking_synced()
    )
    inspection = Project(id="sample-project-2", name="456 Oak Ave - Inspection")
    return (water_damage, inspection)
