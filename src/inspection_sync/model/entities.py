"""Immutable aggregate model for inspection projects.

Defines the entities held by the local data layer:

- ``SyncState``: Per-entity synchronization flag.
- ``Comment``: Free-text note attached to a room.
- ``Pano``: Panoramic image, at most one per room.
- ``Room``: Owns its pano and comments.
- ``DeletedPano``: Tombstone for a pano still to be deleted remotely.
- ``Project``: Aggregate root owning all rooms.

All models are frozen.  ``Project`` is the only entry point for structural
edits: every ``copy_by_*`` method returns a new ``Project`` and leaves the
receiver untouched.  Edits that target an unknown room or comment id are
silent no-ops and return an equal aggregate.
"""

from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel


def _new_id() -> str:
    return str(uuid.uuid4())


class SyncState(str, Enum):
    """Whether an entity's local value has reached the remote service."""

    NEW = "new"
    MODIFIED = "modified"
    SYNCED = "synced"
    DELETED = "deleted"


def _created_state(state: SyncState) -> SyncState:
    """Flag for an entity being attached to the aggregate.

    A SYNCED value is a local creation and becomes NEW; any other flag
    is kept so server snapshots and staged edits pass through unchanged.
    """
    return SyncState.NEW if state == SyncState.SYNCED else state


def _edited_state(state: SyncState) -> SyncState:
    """Flag for an entity whose fields were edited locally."""
    if state in (SyncState.NEW, SyncState.DELETED):
        return state
    return SyncState.MODIFIED


def _settled(entity, sent, fields: tuple[str, ...]):
    """Flag *entity* against *sent*, its value in an uploaded snapshot."""
    if sent is None:
        return entity
    if entity.sync_state == sent.sync_state and all(
        getattr(entity, f) == getattr(sent, f) for f in fields
    ):
        state = SyncState.SYNCED
    elif sent.sync_state == SyncState.NEW == entity.sync_state:
        state = SyncState.MODIFIED
    else:
        return entity
    return entity.model_copy(update={"sync_state": state})


class Comment(BaseModel):
    """A note recorded against a room.

    Comments are created and edited, never deleted, so they never carry
    ``SyncState.DELETED``.
    """

    id: str
    text: str
    sync_state: SyncState = SyncState.SYNCED

    model_config = {"frozen": True}

    @classmethod
    def make(cls, text: str, id: str | None = None) -> Comment:
        return cls(id=id or _new_id(), text=text)


class Pano(BaseModel):
    """Panoramic image of a room.

    Attributes:
        id: Pano identifier.
        image_data: Raw image bytes.
        sync_state: ``DELETED`` marks a pano detached locally but not yet
            deleted on the server.
    """

    id: str
    image_data: bytes
    sync_state: SyncState = SyncState.SYNCED

    model_config = {"frozen": True}

    @classmethod
    def make(cls, image_data: bytes, id: str | None = None) -> Pano:
        return cls(id=id or _new_id(), image_data=image_data)


class Room(BaseModel):
    """A room inside a project."""

    id: str
    name: str
    pano: Pano | None = None
    comments: tuple[Comment, ...] = ()
    sync_state: SyncState = SyncState.SYNCED

    model_config = {"frozen": True}

    @classmethod
    def make(cls, name: str, id: str | None = None) -> Room:
        return cls(id=id or _new_id(), name=name)

    def comment(self, comment_id: str) -> Comment | None:
        """Return the comment with *comment_id*, or ``None``."""
        return next((c for c in self.comments if c.id == comment_id), None)


class DeletedPano(BaseModel):
    """A pano that must still be deleted server-side."""

    pano_id: str
    room_id: str

    model_config = {"frozen": True}


class Project(BaseModel):
    """Aggregate root of an inspection.

    Attributes:
        id: Project identifier.
        name: Display name.
        rooms: Rooms in display order.
        sync_state: Flag of the project's own fields.
        deleted_pano_ids: Legacy tombstones without a room id.
        deleted_panos: Tombstone log of panos awaiting remote deletion.
    """

    id: str
    name: str
    rooms: tuple[Room, ...] = ()
    sync_state: SyncState = SyncState.SYNCED
    deleted_pano_ids: frozenset[str] = frozenset()
    deleted_panos: tuple[DeletedPano, ...] = ()

    model_config = {"frozen": True}

    @classmethod
    def make(cls, name: str, id: str | None = None) -> Project:
        """Create a local project tagged ``NEW`` with a fresh id."""
        return cls(id=id or _new_id(), name=name, sync_state=SyncState.NEW)

    def room(self, room_id: str) -> Room | None:
        """Return the room with *room_id*, or ``None``."""
        return next((r for r in self.rooms if r.id == room_id), None)

    # ------------------------------------------------------------------
    # Derivations
    # ------------------------------------------------------------------

    def copy_by_adding_room(self, room: Room) -> Project:
        new_room = room.model_copy(
            update={"sync_state": _created_state(room.sync_state)}
        )
        return self.model_copy(update={"rooms": self.rooms + (new_room,)})

    def copy_by_adding_comment_to_room(
        self, room_id: str, comment: Comment
    ) -> Project:
        new_comment = comment.model_copy(
            update={"sync_state": _created_state(comment.sync_state)}
        )
        return self._copy_by_replacing_room(
            room_id,
            lambda r: r.model_copy(
                update={"comments": r.comments + (new_comment,)}
            ),
        )

    def copy_by_setting_pano_to_room(self, room_id: str, pano: Pano) -> Project:
        """Replace the room's pano outright; any previous pano is dropped."""
        new_pano = pano.model_copy(
            update={"sync_state": _created_state(pano.sync_state)}
        )
        return self._copy_by_replacing_room(
            room_id, lambda r: r.model_copy(update={"pano": new_pano})
        )

    def copy_by_removing_pano_from_room(self, room_id: str) -> Project:
        """Flag the room's pano ``DELETED``; it stays linked until uploaded."""
        room = self.room(room_id)
        if room is None or room.pano is None:
            return self
        deleted = room.pano.model_copy(
            update={"sync_state": SyncState.DELETED}
        )
        return self._copy_by_replacing_room(
            room_id, lambda r: r.model_copy(update={"pano": deleted})
        )

    def copy_by_updating_room_name(self, room_id: str, name: str) -> Project:
        return self._copy_by_replacing_room(
            room_id,
            lambda r: r.model_copy(
                update={
                    "name": name,
                    "sync_state": _edited_state(r.sync_state),
                }
            ),
        )

    def copy_by_updating_comment_in_room(
        self, room_id: str, comment_id: str, text: str
    ) -> Project:
        room = self.room(room_id)
        if room is None or room.comment(comment_id) is None:
            return self

        def _edit(r: Room) -> Room:
            comments = tuple(
                c.model_copy(
                    update={
                        "text": text,
                        "sync_state": _edited_state(c.sync_state),
                    }
                )
                if c.id == comment_id
                else c
                for c in r.comments
            )
            return r.model_copy(update={"comments": comments})

        return self._copy_by_replacing_room(room_id, _edit)

    def copy_by_updating_name(self, name: str) -> Project:
        return self.model_copy(
            update={
                "name": name,
                "sync_state": _edited_state(self.sync_state),
            }
        )

    def copy_by_marking_synced(self) -> Project:
        """Derive the aggregate as it stands after a successful upload.

        Every entity becomes ``SYNCED``, ``DELETED`` panos are detached
        and both tombstone collections are cleared.
        """
        return self.copy_by_marking_uploaded(self)

    def copy_by_marking_uploaded(self, uploaded: Project) -> Project:
        """Derive this aggregate after the earlier snapshot *uploaded* went up.

        Entities identical to their uploaded value become ``SYNCED``;
        ``DELETED`` panos uploaded unchanged are detached and uploaded
        tombstones are cleared.  Anything added or edited since the
        snapshot keeps its flag, except that an entity created by the
        upload and edited since becomes ``MODIFIED``.
        """
        sent_rooms = {r.id: r for r in uploaded.rooms}
        rooms = []
        for room in self.rooms:
            sent = sent_rooms.get(room.id)
            if sent is None:
                rooms.append(room)
                continue
            pano = room.pano
            if pano is not None and pano == sent.pano:
                if pano.sync_state == SyncState.DELETED:
                    pano = None
                else:
                    pano = pano.model_copy(
                        update={"sync_state": SyncState.SYNCED}
                    )
            sent_comments = {c.id: c for c in sent.comments}
            comments = tuple(
                _settled(c, sent_comments.get(c.id), ("text",))
                for c in room.comments
            )
            rooms.append(
                _settled(room, sent, ("name",)).model_copy(
                    update={"pano": pano, "comments": comments}
                )
            )
        return _settled(self, uploaded, ("name",)).model_copy(
            update={
                "rooms": tuple(rooms),
                "deleted_pano_ids": self.deleted_pano_ids
                - uploaded.deleted_pano_ids,
                "deleted_panos": tuple(
                    d
                    for d in self.deleted_panos
                    if d not in uploaded.deleted_panos
                ),
            }
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _copy_by_replacing_room(self, room_id, edit) -> Project:
        if self.room(room_id) is None:
            return self
        rooms = tuple(edit(r) if r.id == room_id else r for r in self.rooms)
        return self.model_copy(update={"rooms": rooms})
