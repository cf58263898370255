import json
import logging
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .storage import LocalStorage

logger = logging.getLogger(__name__)

SETTINGS_STORAGE_KEY = "editor-settings"
LAYOUT_STORAGE_KEY = "editor-layout-sizes"


class UnknownSettingError(KeyError):
    pass


class EditorSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True, frozen=False)

    theme: Literal["light", "dark"] = "dark"
    font_size: int = Field(14, ge=8, le=32)
    tab_size: int = Field(2, ge=1, le=8)
    word_wrap: bool = True
    minimap: bool = True
    format_on_save: bool = True
    auto_save: bool = True
    line_numbers: bool = True
    font_ligatures: bool = True

    def merge(self, patch: Dict[str, Any]) -> "EditorSettings":
        """Return a new settings record with ``patch`` applied on top of this one."""
        unknown = sorted(set(patch) - set(type(self).model_fields))
        if unknown:
            raise UnknownSettingError(", ".join(unknown))
        return type(self).model_validate({**self.model_dump(), **patch})

    def update_setting(self, key: str, value: Any) -> "EditorSettings":
        return self.merge({key: value})


class PanelSizes(BaseModel):
    model_config = ConfigDict(extra="forbid")

    explorer: float = Field(20, ge=0, le=100)
    editor: float = Field(60, ge=0, le=100)
    preview: float = Field(20, ge=0, le=100)

    def merge(self, patch: Dict[str, Any]) -> "PanelSizes":
        unknown = sorted(set(patch) - set(type(self).model_fields))
        if unknown:
            raise UnknownSettingError(", ".join(unknown))
        return type(self).model_validate({**self.model_dump(), **patch})


def _load_stored(storage: LocalStorage, key: str) -> Dict[str, Any]:
    raw = storage.get_item(key)
    if not raw:
        return {}
    try:
        stored = json.loads(raw)
    except ValueError:
        logger.warning("Discarding corrupt %s entry", key)
        return {}
    return stored if isinstance(stored, dict) else {}


class _PersistedStore:
    model_cls: type
    storage_key: str

    def __init__(self, storage: Optional[LocalStorage] = None):
        self.storage = storage if storage is not None else LocalStorage()
        self._listeners: List[Callable[[Any], None]] = []
        self._value = self._load()

    def _load(self):
        stored = _load_stored(self.storage, self.storage_key)
        defaults = self.model_cls()
        known = {key: value for key, value in stored.items() if key in self.model_cls.model_fields}
        try:
            return defaults.merge(known)
        except ValidationError:
            # A single bad value voids the stored entry rather than half-applying it.
            logger.warning("Stored %s failed validation; using defaults", self.storage_key)
            return defaults

    def _persist(self) -> None:
        self.storage.set_item(self.storage_key, json.dumps(self._value.model_dump()))
        for listener in list(self._listeners):
            listener(self._value)

    def subscribe(self, listener: Callable[[Any], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def merge(self, patch: Dict[str, Any]):
        self._value = self._value.merge(patch)
        self._persist()
        return self._value

    def reset(self):
        self._value = self.model_cls()
        self._persist()
        return self._value


class SettingsStore(_PersistedStore):
    """Editor preferences kept in local storage only."""

    model_cls = EditorSettings
    storage_key = SETTINGS_STORAGE_KEY

    @property
    def settings(self) -> EditorSettings:
        return self._value

    def update_settings(self, patch: Dict[str, Any]) -> EditorSettings:
        return self.merge(patch)

    def update_setting(self, key: str, value: Any) -> EditorSettings:
        return self.merge({key: value})

    def reset_settings(self) -> EditorSettings:
        return self.reset()


class PanelLayoutStore(_PersistedStore):
    model_cls = PanelSizes
    storage_key = LAYOUT_STORAGE_KEY

    @property
    def sizes(self) -> PanelSizes:
        return self._value

    def set_sizes(self, patch: Dict[str, Any]) -> PanelSizes:
        return self.merge(patch)
