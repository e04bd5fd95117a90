"""Reading local files into the conversation."""

import os
from pathlib import Path

from .errors import FileNotFoundForContext, FileNotReadable, FileReadFailed

FILE_TYPE_MAP = {
    ".rb": "ruby",
    ".js": "javascript",
    ".py": "python",
    ".java": "java",
    ".c": "c",
    ".cpp": "cpp",
    ".cs": "csharp",
    ".go": "go",
    ".html": "html",
    ".css": "css",
    ".json": "json",
    ".xml": "xml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".sh": "bash",
    ".sql": "sql",
    ".md": "markdown",
    ".txt": "",
}


def fence_language(path: Path) -> str:
    return FILE_TYPE_MAP.get(path.suffix.lower(), "")


def read_context_file(path_str: str) -> tuple[Path, str]:
    """Resolve ``path_str`` and return (absolute path, text).

    Raises FileNotFoundForContext, FileNotReadable or FileReadFailed.
    """
    path = Path(path_str.strip()).expanduser().absolute()
    if not path.exists():
        raise FileNotFoundForContext(f"File not found: {path}", str(path))
    if not os.access(path, os.R_OK):
        raise FileNotReadable(f"Cannot read file (permission denied): {path}", str(path))
    try:
        return path, path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise FileReadFailed(f"Error reading file {path}: {e}", str(path)) from e


def format_file_message(path: Path, content: str) -> str:
    return (
        f"System Message: File Content ({path.name})\n"
        f"```{fence_language(path)}\n"
        f"{content}\n"
        "```"
    )
