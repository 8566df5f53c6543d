"""
TodoStore — File-Backed List of TODO Records
=============================================
Owns the in-memory ordered list of records for one open TODO file and keeps
the file consistent with it.

Write protocol:
    append_one   — new records go to end of file, nothing else is touched
    rewrite_all  — any change to existing records rewrites every record
                   from offset 0; the file is never truncated

Records are never removed or reordered, so the index a user sees in `show`
stays valid for `done` as long as the file is only used through this class.
"""

from __future__ import annotations

import io
import logging
from typing import BinaryIO, Iterable, Optional

from clido.record import (
    MalformedRecordError, RecordError, TodoRecord,
    decode_record, encode_record, encoded_size,
)

logger = logging.getLogger(__name__)


class TodoStore:
    """Record list bound to a readable+writable binary stream.

    The stream is borrowed: opening and closing it is the caller's job
    (see clido.paths.open_todo_file).
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._records: list[TodoRecord] = []
        self._loaded = False

    # ─── Reading ──────────────────────────────────────────

    def load_all(self) -> list[TodoRecord]:
        """Decode every record from the start of the stream.

        An empty file is an empty list. A malformed record anywhere in the
        file is an error, even after valid records; the records already
        read are not returned.

        Raises:
            MalformedRecordError: with `offset` and `records_read` set.
        """
        self._stream.seek(0, io.SEEK_SET)
        records: list[TodoRecord] = []
        while True:
            try:
                record = decode_record(self._stream)
            except MalformedRecordError as e:
                raise MalformedRecordError(
                    f"Record {len(records)} is malformed: {e}",
                    offset=e.offset,
                    records_read=len(records),
                ) from e
            if record is None:
                break
            records.append(record)

        self._records = records
        self._loaded = True
        logger.debug("Loaded %d TODO record(s)", len(records))
        return list(records)

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def records(self) -> list[TodoRecord]:
        """Loaded records (copy of the list, records themselves shared)."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def pending(self) -> list[tuple[int, TodoRecord]]:
        """(index, record) pairs that are not done yet."""
        return [(i, r) for i, r in enumerate(self._records) if not r.done]

    def completed(self) -> list[tuple[int, TodoRecord]]:
        """(index, record) pairs that are done."""
        return [(i, r) for i, r in enumerate(self._records) if r.done]

    # ─── Mutations ────────────────────────────────────────

    def mark_done(self, indices: Iterable[int]) -> list[int]:
        """Mark the records at `indices` as done, in memory only.

        Indices outside the loaded range are ignored. Records that were
        already done are left alone and not reported.

        Returns:
            Newly marked indices, in record order.
        """
        wanted = {i for i in indices if 0 <= i < len(self._records)}
        marked = []
        for index, record in enumerate(self._records):
            if index in wanted and record.mark_done():
                marked.append(index)
        return marked

    # ─── Writing ──────────────────────────────────────────

    def append_one(self, record: TodoRecord) -> Optional[int]:
        """Write one record at end of file.

        Loading first is not required. When the store has been loaded the
        record also joins the in-memory list.

        Returns:
            The record's index if the store was loaded, otherwise None.
        """
        self._stream.seek(0, io.SEEK_END)
        encode_record(self._stream, record)
        self._stream.flush()
        logger.debug("Appended TODO record (%d bytes)", encoded_size(record))

        if not self._loaded:
            return None
        self._records.append(record)
        return len(self._records) - 1

    def rewrite_all(self, records: Optional[Iterable[TodoRecord]] = None) -> None:
        """Write `records` (default: the loaded ones) from offset 0.

        The file is not truncated, so the new contents must be at least as
        long as the old ones. A shorter rewrite is refused before anything
        is written. A failure part way through leaves old and new bytes
        mixed in the file. On success the written records become the
        store's in-memory list.
        """
        if records is None:
            records = self._records
        records = list(records)

        new_size = sum(encoded_size(r) for r in records)
        old_size = self._stream.seek(0, io.SEEK_END)
        if new_size < old_size:
            raise RecordError(
                f"Rewrite of {new_size} bytes would leave {old_size - new_size} "
                f"stale bytes at the end of a {old_size}-byte TODO file"
            )

        self._stream.seek(0, io.SEEK_SET)
        for record in records:
            encode_record(self._stream, record)
        self._stream.flush()
        self._records = records
        self._loaded = True
        logger.debug("Rewrote %d TODO record(s), %d bytes", len(records), new_size)
