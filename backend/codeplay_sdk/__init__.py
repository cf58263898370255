from .client import ApiError, Client
from .editor import EditorSession
from .file_session import FileSession, OpenFile
from .file_tree import open_files_from_tree, update_file_content
from .languages import get_language_from_file_name
from .project_store import ProjectStore
from .settings import EditorSettings, PanelLayoutStore, SettingsStore, UnknownSettingError
from .storage import LocalStorage

__all__ = [
    "ApiError",
    "Client",
    "EditorSession",
    "EditorSettings",
    "FileSession",
    "LocalStorage",
    "OpenFile",
    "PanelLayoutStore",
    "ProjectStore",
    "SettingsStore",
    "UnknownSettingError",
    "get_language_from_file_name",
    "open_files_from_tree",
    "update_file_content",
]
