import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

from .client import Client
from .debounce import DEFAULT_AUTO_SAVE_DELAY
from .file_session import FileSession, OpenFile
from .file_tree import FileTree, iter_files, open_files_from_tree, update_file_content
from .settings import EditorSettings, SettingsStore

logger = logging.getLogger(__name__)


class EditorSession:
    """
    Binds a project's stored file tree to a FileSession.
    Saving a file writes its content back into the tree and uploads the whole
    tree with ``PUT /projects/{id}/files``.
    """

    def __init__(
        self,
        client: Client,
        project_id: str,
        settings: Optional[Union[EditorSettings, SettingsStore]] = None,
        auto_save_delay: float = DEFAULT_AUTO_SAVE_DELAY,
    ):
        self.client = client
        self.project_id = project_id
        self.project: Optional[Dict[str, Any]] = None
        self.tree: FileTree = {}
        self.files = FileSession(on_save=self._persist, settings=settings, auto_save_delay=auto_save_delay)

    def load(self, open_paths: Optional[List[str]] = None) -> Dict[str, Any]:
        self.project = self.client.get_project(self.project_id)
        template_files = self.project.get("templateFiles") or {}
        self.tree = template_files.get("content") or {}
        self.files.close_all()

        available = {open_file.path: open_file for open_file in open_files_from_tree(self.tree)}
        for path in open_paths or []:
            if path in available:
                self.files.open_file(available[path])
        return self.project

    @property
    def paths(self) -> List[str]:
        return [path for path, _ in iter_files(self.tree)]

    def open(self, path: str) -> OpenFile:
        for open_file in open_files_from_tree(self.tree):
            if open_file.path == path:
                return self.files.open_file(open_file)
        raise KeyError(path)

    async def _persist(self, open_file: OpenFile) -> None:
        tree = update_file_content(self.tree, open_file.path, open_file.content)
        # requests blocks; keep the upload off the event loop.
        response = await asyncio.to_thread(self.client.save_project_files, self.project_id, tree)
        self.tree = tree
        if response is not None:
            self.project = response
        logger.debug("Saved %s to project %s", open_file.path, self.project_id)
