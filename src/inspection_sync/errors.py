"""Exception hierarchy for inspection_sync."""


class InspectionSyncError(Exception):
    """Base exception for inspection_sync errors."""


class LookupMiss(InspectionSyncError):
    """Raised by strict accessors when a referenced id is absent.

    Aggregate derivations and ``ProjectRepository.upload_project`` never
    raise this; they treat an unknown id as a no-op.
    """

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(f"{entity_type} '{entity_id}' not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class RemoteCallFailure(InspectionSyncError):
    """Raised by the remote client when a call to the service fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
