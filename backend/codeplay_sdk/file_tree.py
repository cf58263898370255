import copy
from typing import Any, Dict, Iterator, List, Tuple

from .file_session import OpenFile

FileTree = Dict[str, Dict[str, Any]]


def iter_files(tree: FileTree, prefix: str = "") -> Iterator[Tuple[str, Dict[str, Any]]]:
    """Yield ``(path, node)`` for every file node, depth first in insertion order."""
    for name, node in (tree or {}).items():
        path = f"{prefix}{name}"
        if node.get("type") == "folder":
            yield from iter_files(node.get("children") or {}, prefix=f"{path}/")
        else:
            yield path, node


def open_files_from_tree(tree: FileTree) -> List[OpenFile]:
    return [
        OpenFile.from_path(path, content=node.get("content") or "")
        for path, node in iter_files(tree)
    ]


def update_file_content(tree: FileTree, path: str, content: str) -> FileTree:
    """
    Return a copy of ``tree`` with the file at ``path`` set to ``content``.
    Missing folders and the file itself are created.
    """
    updated = copy.deepcopy(tree or {})
    parts = [part for part in path.split("/") if part]
    if not parts:
        raise ValueError("File path must not be empty")

    level = updated
    for folder in parts[:-1]:
        node = level.get(folder)
        if node is None:
            node = {"name": folder, "type": "folder", "children": {}}
            level[folder] = node
        elif node.get("type") != "folder":
            raise ValueError(f"'{folder}' in path '{path}' is a file, not a folder")
        level = node.setdefault("children", {})

    name = parts[-1]
    existing = level.get(name)
    if existing is not None and existing.get("type") == "folder":
        raise ValueError(f"'{path}' is a folder")
    level[name] = {"name": name, "type": "file", "content": content}
    return updated
