"""
Record Codec — On-Disk Layout of a Single TODO
===============================================
Encodes and decodes exactly one TODO record at a binary stream's cursor.

Layout:
    text_len   u32, little-endian
    text       text_len raw bytes (UTF-8 by convention)
    done       u8, 0 or 1

A TODO file is nothing more than these records back to back. There is no
header, no magic number and no record count; readers stop at end of file.
"""

from __future__ import annotations

import io
import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)

_LENGTH = struct.Struct("<I")
_FLAG = struct.Struct("<B")

MAX_TEXT_LENGTH = 0xFFFFFFFF


# ─────────────────────────────────────────────────────────────
#  Errors
# ─────────────────────────────────────────────────────────────

class RecordError(Exception):
    """Base class for every failure of the TODO file layer."""
    pass


class MalformedRecordError(RecordError):
    """A record was truncated or its length prefix ran past end of file."""

    def __init__(self, message: str, offset: Optional[int] = None,
                 records_read: int = 0):
        super().__init__(message)
        self.offset = offset
        self.records_read = records_read


class ShortWriteError(RecordError):
    """The stream accepted fewer bytes than a record needs."""
    pass


class RecordTooLargeError(RecordError):
    """Text does not fit behind a 32-bit length prefix."""
    pass


# ─────────────────────────────────────────────────────────────
#  TodoRecord
# ─────────────────────────────────────────────────────────────

@dataclass
class TodoRecord:
    """One TODO item.

    The index of a record is its position in the file and is never stored.
    """

    text: bytes
    done: bool = False

    @classmethod
    def from_text(cls, text: str, done: bool = False) -> TodoRecord:
        return cls(text=text.encode("utf-8"), done=done)

    @property
    def label(self) -> str:
        """Text for display; undecodable bytes are replaced."""
        return self.text.decode("utf-8", errors="replace")

    def mark_done(self) -> bool:
        """Flip to done. Returns False if the record was already done."""
        if self.done:
            return False
        self.done = True
        return True


def encoded_size(record: TodoRecord) -> int:
    """Bytes the record occupies on disk."""
    return _LENGTH.size + len(record.text) + _FLAG.size


# ─────────────────────────────────────────────────────────────
#  Encode / Decode
# ─────────────────────────────────────────────────────────────

def encode_record(stream: BinaryIO, record: TodoRecord) -> None:
    """Write one record at the stream's current position.

    Raises:
        RecordTooLargeError: text longer than a u32 can describe.
        ShortWriteError: the stream took only part of the record. The
            stream position is then undefined; nothing is rolled back.
        OSError: the underlying write failed.
    """
    text = bytes(record.text)
    if len(text) > MAX_TEXT_LENGTH:
        raise RecordTooLargeError(
            f"TODO text is {len(text)} bytes; at most {MAX_TEXT_LENGTH} fit in a record"
        )

    payload = _LENGTH.pack(len(text)) + text + _FLAG.pack(1 if record.done else 0)
    written = stream.write(payload)
    if written is not None and written != len(payload):
        raise ShortWriteError(
            f"Wrote {written} of {len(payload)} bytes of a TODO record"
        )


_READ_CHUNK = 64 * 1024


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    # Bounded chunks: a corrupt length prefix must not size the buffer.
    # Unbuffered streams may also return short reads before EOF.
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(min(remaining, _READ_CHUNK))
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _bytes_left(stream: BinaryIO) -> Optional[int]:
    """Bytes between the cursor and end of stream, or None if unknown."""
    try:
        if not stream.seekable():
            return None
        position = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        stream.seek(position, io.SEEK_SET)
    except (OSError, AttributeError):
        return None
    return end - position


def decode_record(stream: BinaryIO) -> Optional[TodoRecord]:
    """Read one record from the stream's current position.

    Returns:
        The decoded record, or None when the stream ends exactly where a
        record would start.

    Raises:
        MalformedRecordError: the prefix, text or flag came up short.
    """
    offset = _tell(stream)

    prefix = _read_exact(stream, _LENGTH.size)
    if not prefix:
        return None
    if len(prefix) != _LENGTH.size:
        raise MalformedRecordError(
            f"Truncated length prefix: {len(prefix)} of {_LENGTH.size} bytes",
            offset=offset,
        )

    (length,) = _LENGTH.unpack(prefix)
    left = _bytes_left(stream)
    if left is not None and length + _FLAG.size > left:
        raise MalformedRecordError(
            f"Record declares {length} text bytes but only {left} bytes remain",
            offset=offset,
        )

    text = _read_exact(stream, length)
    if len(text) != length:
        raise MalformedRecordError(
            f"Record declares {length} text bytes but only {len(text)} remain",
            offset=offset,
        )

    flag = _read_exact(stream, _FLAG.size)
    if len(flag) != _FLAG.size:
        raise MalformedRecordError("Missing done flag", offset=offset)

    (done,) = _FLAG.unpack(flag)
    if done > 1:
        logger.debug("Non-canonical done flag %d at offset %s", done, offset)
    return TodoRecord(text=text, done=done != 0)


def _tell(stream: BinaryIO) -> Optional[int]:
    try:
        return stream.tell()
    except (OSError, AttributeError):
        return None
