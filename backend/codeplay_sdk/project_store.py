import copy
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .client import ApiError, Client

logger = logging.getLogger(__name__)

TEMP_ID_PREFIX = "temp-"

Project = Dict[str, Any]
Listener = Callable[["ProjectStore"], None]


def _error_message(exc: Exception, fallback: str) -> str:
    if isinstance(exc, ApiError):
        return exc.message or fallback
    return str(exc) or fallback


class ProjectStore:
    """
    Cached list of the signed-in user's projects.

    Mutations are applied locally first and then confirmed with the server.
    Listeners are notified after every state change, so the optimistic state
    is observable before the server answers.
    """

    def __init__(self, client: Client):
        self.client = client
        self.projects: List[Project] = []
        self.pagination: Optional[Dict[str, int]] = None
        self.loading = False
        self.error: Optional[str] = None
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        for key, value in changes.items():
            setattr(self, key, value)
        for listener in list(self._listeners):
            listener(self)

    def get_project(self, project_id: str) -> Optional[Project]:
        for project in self.projects:
            if project.get("id") == project_id:
                return project
        return None

    def fetch_projects(self, **filters: Any) -> None:
        self._set(loading=True, error=None)
        try:
            response = self.client.list_projects(**filters)
        except Exception as exc:
            logger.warning("Fetching projects failed: %s", exc)
            self._set(loading=False, error=_error_message(exc, "Failed to fetch projects"))
            return
        self._set(
            projects=list(response.get("data") or []),
            pagination=response.get("pagination"),
            loading=False,
        )

    def create_project(self, data: Dict[str, Any]) -> Project:
        now = datetime.now(timezone.utc).isoformat()
        temp_id = f"{TEMP_ID_PREFIX}{time.time_ns()}"
        placeholder = {
            "id": temp_id,
            "title": data.get("title"),
            "description": data.get("description"),
            "template": data.get("template"),
            "createdAt": now,
            "updatedAt": now,
        }
        self._set(projects=[placeholder] + self.projects)

        try:
            created = self.client.create_project(data)
        except Exception as exc:
            self._set(
                projects=[project for project in self.projects if project.get("id") != temp_id],
                error=_error_message(exc, "Failed to create project"),
            )
            raise

        self._set(projects=[created if project.get("id") == temp_id else project for project in self.projects])
        return created

    def update_project(self, project_id: str, patch: Dict[str, Any]) -> Project:
        snapshot = copy.deepcopy(self.get_project(project_id))
        self._set(
            projects=[
                {**project, **patch} if project.get("id") == project_id else project
                for project in self.projects
            ]
        )

        try:
            updated = self.client.update_project(project_id, patch)
        except Exception as exc:
            projects = self.projects
            if snapshot is not None:
                projects = [snapshot if project.get("id") == project_id else project for project in projects]
            self._set(projects=projects, error=_error_message(exc, "Failed to update project"))
            raise

        self._set(projects=[updated if project.get("id") == project_id else project for project in self.projects])
        return updated

    def delete_project(self, project_id: str) -> None:
        index = next(
            (position for position, project in enumerate(self.projects) if project.get("id") == project_id),
            None,
        )
        removed = self.projects[index] if index is not None else None
        self._set(projects=[project for project in self.projects if project.get("id") != project_id])

        try:
            self.client.delete_project(project_id)
        except Exception as exc:
            projects = list(self.projects)
            if removed is not None:
                projects.insert(min(index, len(projects)), removed)
            self._set(projects=projects, error=_error_message(exc, "Failed to delete project"))
            raise

    def clone_project(self, project_id: str, new_title: Optional[str] = None) -> Project:
        try:
            cloned = self.client.clone_project(project_id, title=new_title)
        except Exception as exc:
            self._set(error=_error_message(exc, "Failed to clone project"))
            raise
        self._set(projects=[cloned] + self.projects)
        return cloned
