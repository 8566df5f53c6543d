# clido — Command Line Interface to DO
"""
clido: a command-line TODO list kept in a flat binary file.
"""

__version__ = "0.1.1"

from .record import (
    TodoRecord, RecordError, MalformedRecordError, ShortWriteError, RecordTooLargeError,
    encode_record, decode_record, encoded_size,
)
from .store import TodoStore
from .paths import default_todo_path, resolve_todo_path, open_todo_file

__all__ = [
    "TodoRecord", "RecordError", "MalformedRecordError", "ShortWriteError",
    "RecordTooLargeError", "encode_record", "decode_record", "encoded_size",
    "TodoStore",
    "default_todo_path", "resolve_todo_path", "open_todo_file",
]
