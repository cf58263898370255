import inspect
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from .debounce import DEFAULT_AUTO_SAVE_DELAY, KeyedDebouncer
from .languages import get_language_from_file_name
from .settings import EditorSettings, SettingsStore

logger = logging.getLogger(__name__)

SaveCallback = Callable[["OpenFile"], Any]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class OpenFile:
    id: str
    name: str
    path: str
    content: str = ""
    language: str = "plaintext"
    is_unsaved: bool = False
    created_at: datetime = field(default_factory=_now)
    modified_at: datetime = field(default_factory=_now)

    @classmethod
    def from_path(cls, path: str, content: str = "", file_id: Optional[str] = None) -> "OpenFile":
        name = path.rsplit("/", 1)[-1]
        return cls(
            id=file_id or path,
            name=name,
            path=path,
            content=content,
            language=get_language_from_file_name(name),
        )


class FileSession:
    """
    Tracks the files open in the editor and which one is active.

    Saving is delegated to ``on_save``; the session itself does no I/O. The
    callback may be a plain function or a coroutine function. When auto-save
    is enabled, each edit restarts a per-file timer and the file is saved once
    it has been idle for ``auto_save_delay`` seconds.
    """

    def __init__(
        self,
        on_save: Optional[SaveCallback] = None,
        settings: Optional[Union[EditorSettings, SettingsStore]] = None,
        auto_save_delay: float = DEFAULT_AUTO_SAVE_DELAY,
        debouncer: Optional[KeyedDebouncer] = None,
    ):
        self.on_save = on_save
        self.settings = settings
        self._debouncer = debouncer or KeyedDebouncer(delay=auto_save_delay)
        self._files: List[OpenFile] = []
        self._active_file_id: Optional[str] = None
        self._listeners: List[Callable[["FileSession"], None]] = []

    # -- observation -------------------------------------------------------

    def subscribe(self, listener: Callable[["FileSession"], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # -- queries -----------------------------------------------------------

    @property
    def open_files(self) -> List[OpenFile]:
        return list(self._files)

    @property
    def active_file_id(self) -> Optional[str]:
        return self._active_file_id

    @property
    def active_file(self) -> Optional[OpenFile]:
        if self._active_file_id is None:
            return None
        return self.get_file(self._active_file_id)

    def get_file(self, file_id: str) -> Optional[OpenFile]:
        for open_file in self._files:
            if open_file.id == file_id:
                return open_file
        return None

    def has_unsaved_files(self) -> bool:
        return any(open_file.is_unsaved for open_file in self._files)

    def is_auto_save_pending(self, file_id: str) -> bool:
        return self._debouncer.is_pending(file_id)

    @property
    def auto_save_enabled(self) -> bool:
        if self.on_save is None:
            return False
        settings = self.settings.settings if isinstance(self.settings, SettingsStore) else self.settings
        return settings.auto_save if settings is not None else True

    # -- open / close ------------------------------------------------------

    def open_file(self, open_file: OpenFile) -> OpenFile:
        existing = self.get_file(open_file.id)
        if existing is not None:
            # Re-opening only focuses the tab; buffer and dirty state are kept.
            self._active_file_id = existing.id
            self._notify()
            return existing

        self._files.append(open_file)
        self._active_file_id = open_file.id
        self._notify()
        return open_file

    def close_file(self, file_id: str) -> None:
        if self.get_file(file_id) is None:
            return
        self._debouncer.cancel(file_id)
        self._files = [open_file for open_file in self._files if open_file.id != file_id]
        if self._active_file_id == file_id:
            self._active_file_id = self._files[0].id if self._files else None
        self._notify()

    def close_all(self) -> None:
        for open_file in self._files:
            self._debouncer.cancel(open_file.id)
        self._files = []
        self._active_file_id = None
        self._notify()

    def close_others(self, file_id: str) -> None:
        keep = self.get_file(file_id)
        if keep is None:
            return
        for open_file in self._files:
            if open_file.id != file_id:
                self._debouncer.cancel(open_file.id)
        self._files = [keep]
        self._active_file_id = keep.id
        self._notify()

    def set_active(self, file_id: str) -> None:
        if self.get_file(file_id) is None:
            return
        self._active_file_id = file_id
        self._notify()

    # -- edits -------------------------------------------------------------

    def update_content(self, file_id: str, content: str) -> None:
        open_file = self.get_file(file_id)
        if open_file is None:
            return
        open_file.content = content
        open_file.is_unsaved = True
        open_file.modified_at = _now()
        self._notify()

        if self.auto_save_enabled:
            self._debouncer.schedule(file_id, lambda: self._auto_save(file_id))

    def rename_file(self, file_id: str, name: str) -> None:
        open_file = self.get_file(file_id)
        if open_file is None:
            return
        open_file.name = name
        self._notify()

    def update_path(self, file_id: str, path: str) -> None:
        open_file = self.get_file(file_id)
        if open_file is None:
            return
        open_file.path = path
        self._notify()

    # -- saving ------------------------------------------------------------

    async def save(self, file_id: str) -> bool:
        """
        Persist one file through ``on_save``.
        Returns False when the file is not open or no callback is set. If the
        callback raises, the file stays dirty and the error propagates.
        """
        self._debouncer.cancel(file_id)
        open_file = self.get_file(file_id)
        if open_file is None or self.on_save is None:
            return False

        snapshot = replace(open_file)
        result = self.on_save(snapshot)
        if inspect.isawaitable(result):
            await result

        current = self.get_file(file_id)
        # An edit made while the save was in flight keeps the file dirty.
        if current is not None and current.content == snapshot.content:
            current.is_unsaved = False
            self._notify()
        return True

    async def save_all(self) -> int:
        saved = 0
        for open_file in [item for item in self._files if item.is_unsaved]:
            if await self.save(open_file.id):
                saved += 1
        return saved

    async def _auto_save(self, file_id: str) -> None:
        open_file = self.get_file(file_id)
        if open_file is None or not open_file.is_unsaved:
            return
        logger.debug("Auto-saving %s", file_id)
        await self.save(file_id)

    async def wait_for_pending_saves(self) -> None:
        await self._debouncer.drain()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "open_files": [vars(open_file).copy() for open_file in self._files],
            "active_file_id": self._active_file_id,
        }
