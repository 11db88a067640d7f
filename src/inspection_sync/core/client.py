import base64
import logging
import threading
from typing import Protocol

import requests

from ..config import Config
from ..errors import RemoteCallFailure
from ..model import Comment, Pano, Project, Room
from .async_utils import run_sync

logger = logging.getLogger(__name__)


class ApiClient(Protocol):
    """Remote inspection service, one call per entity and verb.

    Any call may raise; the upload walk aborts on the first error.  There
    is deliberately no pano update and no room or comment deletion.
    """

    async def create_project(self, project: Project) -> None: ...

    async def update_project(self, project: Project) -> None: ...

    async def create_room(self, project_id: str, room: Room) -> None: ...

    async def update_room(self, project_id: str, room: Room) -> None: ...

    async def create_pano(
        self, project_id: str, room_id: str, pano: Pano
    ) -> None: ...

    async def delete_pano(
        self, project_id: str, room_id: str, pano_id: str
    ) -> None: ...

    async def create_comment(
        self, project_id: str, room_id: str, comment: Comment
    ) -> None: ...

    async def update_comment(
        self, project_id: str, room_id: str, comment: Comment
    ) -> None: ...


class RestApiClient:
    """JSON-over-HTTP implementation of ``ApiClient``.

    Each call runs a blocking ``requests`` request in a worker thread via
    ``run_sync``.  Sessions are thread-local because ``requests.Session``
    is not thread-safe.
    """

    def __init__(self, config: Config):
        if not config.api_url:
            raise ValueError(
                "API URL not found. Set INSPECTION_API_URL environment variable, "
                "pass --url CLI argument, or add 'url' to config.yml."
            )
        self.config = config
        self.base_url = config.api_url.rstrip("/")
        self._thread_local = threading.local()

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        if self.config.api_token:
            session.headers["Authorization"] = (
                f"Bearer {self.config.api_token}"
            )
        session.headers["Accept"] = "application/json"
        session.verify = not self.config.insecure
        return session

    def _request(
        self, method: str, path: str, payload: dict | None = None
    ) -> None:
        """Send one request; any 2xx status counts as success, whatever the body."""
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self._get_session().request(
                method,
                url,
                json=payload,
                timeout=(10, self.config.timeout),
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise RemoteCallFailure(
                f"{method} {path} failed with HTTP {status}", status_code=status
            ) from exc
        except requests.RequestException as exc:
            raise RemoteCallFailure(f"{method} {path} failed: {exc}") from exc

    async def _call(
        self, method: str, path: str, payload: dict | None = None
    ) -> None:
        await run_sync(self._request, method, path, payload)

    # ------------------------------------------------------------------
    # Payloads
    # ------------------------------------------------------------------

    @staticmethod
    def _project_payload(project: Project) -> dict:
        return {"id": project.id, "name": project.name}

    @staticmethod
    def _room_payload(room: Room) -> dict:
        return {"id": room.id, "name": room.name}

    @staticmethod
    def _pano_payload(pano: Pano) -> dict:
        return {
            "id": pano.id,
            "image_data": base64.b64encode(pano.image_data).decode("ascii"),
        }

    @staticmethod
    def _comment_payload(comment: Comment) -> dict:
        return {"id": comment.id, "text": comment.text}

    # ------------------------------------------------------------------
    # ApiClient operations
    # ------------------------------------------------------------------

    async def create_project(self, project: Project) -> None:
        await self._call("POST", "/projects", self._project_payload(project))

    async def update_project(self, project: Project) -> None:
        await self._call(
            "PUT", f"/projects/{project.id}", self._project_payload(project)
        )

    async def create_room(self, project_id: str, room: Room) -> None:
        await self._call(
            "POST", f"/projects/{project_id}/rooms", self._room_payload(room)
        )

    async def update_room(self, project_id: str, room: Room) -> None:
        await self._call(
            "PUT",
            f"/projects/{project_id}/rooms/{room.id}",
            self._room_payload(room),
        )

    async def create_pano(
        self, project_id: str, room_id: str, pano: Pano
    ) -> None:
        await self._call(
            "POST",
            f"/projects/{project_id}/rooms/{room_id}/pano",
            self._pano_payload(pano),
        )

    async def delete_pano(
        self, project_id: str, room_id: str, pano_id: str
    ) -> None:
        await self._call(
            "DELETE", f"/projects/{project_id}/rooms/{room_id}/pano/{pano_id}"
        )

    async def create_comment(
        self, project_id: str, room_id: str, comment: Comment
    ) -> None:
        await self._call(
            "POST",
            f"/projects/{project_id}/rooms/{room_id}/comments",
            self._comment_payload(comment),
        )

    async def update_comment(
        self, project_id: str, room_id: str, comment: Comment
    ) -> None:
        await self._call(
            "PUT",
            f"/projects/{project_id}/rooms/{room_id}/comments/{comment.id}",
            self._comment_payload(comment),
        )
