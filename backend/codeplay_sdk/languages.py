from typing import Dict

# Suffix matches are tried first, in order, so multi-part names like
# "Dockerfile" resolve before the bare-extension lookup.
FILE_LANGUAGE_MAP: Dict[str, str] = {
    ".ts": "typescript",
    ".js": "javascript",
    ".tsx": "typescript",
    ".jsx": "javascript",
    ".css": "css",
    ".scss": "scss",
    ".html": "html",
    ".json": "json",
    ".jsonc": "jsonc",
    ".md": "markdown",
    ".py": "python",
    ".sql": "sql",
    ".sh": "shell",
    ".bash": "shell",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".xml": "xml",
    ".Dockerfile": "dockerfile",
    "Dockerfile": "dockerfile",
}

LANGUAGE_MAP: Dict[str, str] = {
    "typescript": "typescript",
    "javascript": "javascript",
    "tsx": "typescript",
    "jsx": "javascript",
    "css": "css",
    "scss": "scss",
    "html": "html",
    "json": "json",
    "jsonc": "jsonc",
    "markdown": "markdown",
    "python": "python",
    "sql": "sql",
    "bash": "shell",
    "shell": "shell",
    "yaml": "yaml",
    "yml": "yaml",
    "xml": "xml",
    "dockerfile": "dockerfile",
    "ts": "typescript",
    "js": "javascript",
    "py": "python",
    "sh": "shell",
}

DEFAULT_LANGUAGE = "plaintext"


def get_language_from_file_name(file_name: str) -> str:
    for suffix, language in FILE_LANGUAGE_MAP.items():
        if file_name.endswith(suffix):
            return language

    if "." in file_name:
        extension = file_name.rsplit(".", 1)[-1].lower()
        if extension in LANGUAGE_MAP:
            return LANGUAGE_MAP[extension]

    return DEFAULT_LANGUAGE
