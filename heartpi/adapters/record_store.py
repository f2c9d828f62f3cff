"""
Flat, append-only record store shared by credentials and heart-rate history.

One table holds two row shapes keyed by username (case-insensitive):

    Username,Password                  <- header, written on first write
    alice,abc123                       <- credential row (2 fields)
    alice,1718000000,72.4              <- reading row (3 fields)

Rows carry no type tag; they are classified by field count. To keep that
unambiguous, the store refuses to write any field containing a comma, a quote
or a line break. Fields are stripped on read, so values with surrounding
whitespace are refused too.

Single-writer contract: one process appends at a time. Nothing is locked.
"""

import csv
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import TracebackType
from typing import Protocol, Self

import structlog

from heartpi.domain.errors import DuplicateUserError, StorageIOError, ValidationError
from heartpi.domain.models import CredentialRow, ReadingRow, ReadingSample

logger = structlog.get_logger(__name__)

HEADER = ("Username", "Password")
_FORBIDDEN_CHARS = frozenset(',"\r\n')


class RecordStore(Protocol):
    """Storage interface the services depend on."""

    def open(self) -> None: ...

    def close(self) -> None: ...

    def exists(self, username: str) -> bool: ...

    def verify(self, username: str, password: str) -> bool: ...

    def credential_for(self, username: str) -> CredentialRow | None: ...

    def add_credential(self, username: str, password: str) -> CredentialRow: ...

    def add_reading(self, username: str, timestamp: int, heart_rate: float) -> ReadingRow: ...

    def readings_for(self, username: str) -> Iterable[ReadingSample]: ...

    def usernames(self) -> list[str]: ...


def _same_user(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def check_field(name: str, value: str) -> None:
    """Reject values that would not read back as written."""
    if _FORBIDDEN_CHARS.intersection(value):
        raise ValidationError(f"{name} must not contain commas, quotes or line breaks")
    # Fields are stripped on read
    if value != value.strip():
        raise ValidationError(f"{name} must not start or end with whitespace")


class ReadingHistory:
    """
    Lazy view of one user's reading rows.

    Every iteration re-scans the store, so the view can be iterated again
    after more readings are appended.
    """

    def __init__(self, store: "FlatRecordStore", username: str) -> None:
        self._store = store
        self.username = username

    def __iter__(self) -> Iterator[ReadingSample]:
        for row in self._store.rows():
            if isinstance(row, ReadingRow) and _same_user(row.username, self.username):
                yield ReadingSample(timestamp=row.timestamp, heart_rate=row.heart_rate)


class FlatRecordStore:
    """
    Record store logic shared by all backends.

    Subclasses supply raw field lists through _scan() and persist them
    through _append(); parsing and the credential rules live here.
    """

    def __init__(self) -> None:
        self._is_open = False
        self.logger = logger.bind(component=type(self).__name__)

    # Backend hooks

    def _scan(self) -> Iterator[list[str]]:
        raise NotImplementedError

    def _append(self, fields: list[str]) -> None:
        raise NotImplementedError

    def _on_open(self) -> None:
        pass

    def _on_close(self) -> None:
        pass

    # Lifecycle

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> None:
        if self._is_open:
            return
        self._on_open()
        self._is_open = True
        self.logger.info("record_store_opened")

    def close(self) -> None:
        if not self._is_open:
            return
        self._is_open = False
        self._on_close()
        self.logger.info("record_store_closed")

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _require_open(self) -> None:
        if not self._is_open:
            raise RuntimeError("Record store not open - call open() or use it as a context manager")

    # Parsing

    def rows(self) -> Iterator[CredentialRow | ReadingRow]:
        """All data rows in insertion order, classified by field count."""
        self._require_open()
        for line_no, fields in enumerate(self._scan(), start=1):
            fields = [f.strip() for f in fields]
            if not fields or fields == [""] or tuple(fields) == HEADER:
                continue
            if len(fields) == 2:
                yield CredentialRow(username=fields[0], password=fields[1])
            elif len(fields) == 3:
                try:
                    yield ReadingRow(
                        username=fields[0],
                        timestamp=int(fields[1]),
                        heart_rate=float(fields[2]),
                    )
                except ValueError:
                    self.logger.warning("malformed_reading_row_skipped", line=line_no)
            else:
                self.logger.warning("unrecognised_row_skipped", line=line_no, fields=len(fields))

    def row_count(self) -> int:
        return sum(1 for _ in self.rows())

    # Queries

    def _credential(self, username: str) -> CredentialRow | None:
        for row in self.rows():
            if isinstance(row, CredentialRow) and _same_user(row.username, username):
                return row
        return None

    def exists(self, username: str) -> bool:
        return self._credential(username) is not None

    def verify(self, username: str, password: str) -> bool:
        # Usernames compare case-insensitively, passwords exactly
        for row in self.rows():
            if (
                isinstance(row, CredentialRow)
                and _same_user(row.username, username)
                and row.password == password
            ):
                return True
        return False

    def credential_for(self, username: str) -> CredentialRow | None:
        """Stored credential row, keeping the spelling used at registration."""
        return self._credential(username)

    def usernames(self) -> list[str]:
        seen: dict[str, str] = {}
        for row in self.rows():
            if isinstance(row, CredentialRow):
                seen.setdefault(row.username.casefold(), row.username)
        return list(seen.values())

    def readings_for(self, username: str) -> ReadingHistory:
        self._require_open()
        return ReadingHistory(self, username)

    # Writes

    def add_credential(self, username: str, password: str) -> CredentialRow:
        self._require_open()
        check_field("username", username)
        check_field("password", password)
        if not username:
            raise ValidationError("username must not be empty")
        existing = self._credential(username)
        if existing is not None:
            self.logger.warning("duplicate_user_rejected", username=username)
            raise DuplicateUserError(existing.username)

        row = CredentialRow(username=username, password=password)
        self._append([row.username, row.password])
        self.logger.info("credential_added", username=username)
        return row

    def add_reading(self, username: str, timestamp: int, heart_rate: float) -> ReadingRow:
        self._require_open()
        check_field("username", username)
        row = ReadingRow(username=username, timestamp=int(timestamp), heart_rate=float(heart_rate))
        # repr() round-trips floats exactly
        self._append([row.username, str(row.timestamp), repr(row.heart_rate)])
        self.logger.debug("reading_added", username=username, timestamp=row.timestamp)
        return row


class CsvRecordStore(FlatRecordStore):
    """
    Record store backed by a comma-separated file.

    The file is held open in append mode while the store is open; every write
    is flushed and fsynced before returning so readers see it immediately.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__()
        self.path = Path(path)
        self._handle = None
        self._writer = None
        self.logger = self.logger.bind(path=str(self.path))

    def _on_open(self) -> None:
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = open(self.path, "a", newline="", encoding="utf-8")
        except OSError as e:
            self.logger.error("record_store_open_failed", error=str(e))
            raise self._io_error("open", e) from e
        self._writer = csv.writer(self._handle, lineterminator="\n")

    def _io_error(self, action: str, e: Exception) -> StorageIOError:
        return StorageIOError(f"Cannot {action} record store {self.path}: {e}", str(self.path))

    def _on_close(self) -> None:
        if self._handle is not None:
            self._handle.close()
        self._handle = None
        self._writer = None

    def _scan(self) -> Iterator[list[str]]:
        if not self.path.exists():
            return
        try:
            with open(self.path, newline="", encoding="utf-8") as f:
                yield from csv.reader(f)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            self.logger.error("record_store_read_failed", error=str(e))
            raise self._io_error("read", e) from e

    def _append(self, fields: list[str]) -> None:
        assert self._handle is not None and self._writer is not None
        try:
            if self._handle.tell() == 0:
                self._writer.writerow(HEADER)
            self._writer.writerow(fields)
            self._handle.flush()
            os.fsync(self._handle.fileno())
        except OSError as e:
            self.logger.error("record_store_write_failed", error=str(e))
            raise self._io_error("write", e) from e


class InMemoryRecordStore(FlatRecordStore):
    """Record store kept in a list of field lists. Used by tests and demos."""

    def __init__(self, lines: Iterable[list[str]] | None = None) -> None:
        super().__init__()
        self.lines: list[list[str]] = [list(line) for line in lines or []]

    def _scan(self) -> Iterator[list[str]]:
        # Snapshot so appends during iteration are not picked up mid-scan
        yield from list(self.lines)

    def _append(self, fields: list[str]) -> None:
        if not self.lines:
            self.lines.append(list(HEADER))
        self.lines.append(list(fields))
