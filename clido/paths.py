"""
TODO File Location and Opening
==============================
Decides which file backs the TODO list and opens it for the store.

Resolution order:
    1. an explicit path (`--todo-path` / `todo-path <path>`)
    2. the CLIDO_TODO_PATH environment variable
    3. the platform default
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional

logger = logging.getLogger(__name__)

TODO_PATH_ENV = "CLIDO_TODO_PATH"


def default_todo_path() -> str:
    if sys.platform.startswith("win"):
        return "TODOS.bin"
    return "/usr/local/share/clido/TODOS.bin"


def resolve_todo_path(explicit: Optional[str] = None) -> str:
    """Pick the TODO file path. See module docstring for precedence."""
    path = explicit or os.environ.get(TODO_PATH_ENV, "") or default_todo_path()
    return os.path.expanduser(path)


@contextmanager
def open_todo_file(path: str) -> Iterator[BinaryIO]:
    """Open `path` for binary read/write, creating an empty file if missing.

    The stream is positioned at offset 0 and is closed when the block
    exits, whether it exits normally or by an exception.

    Raises:
        OSError: the file could neither be opened nor created.
    """
    try:
        stream = open(path, "r+b")
    except FileNotFoundError as e:
        print(f"[INFO] Failed to read TODO file at \"{path}\": {e.strerror}. Creating a new one...")
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        stream = open(path, "w+b")
        print("[INFO] Successfully created a new TODO file")
    logger.debug("Opened TODO file %s", path)

    try:
        yield stream
    finally:
        stream.close()
        logger.debug("Closed TODO file %s", path)
