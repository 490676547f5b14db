"""Query responses: parsed column metadata plus the records that follow it."""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, BinaryIO

from typed_columns.column import ColumnDescriptor

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 8192
MAX_BUFFER_SIZE = 1024 * 1024


def get_buffer_size(size: int | None, default: int = DEFAULT_BUFFER_SIZE, maximum: int = MAX_BUFFER_SIZE) -> int:
    """Clamp a requested buffer size to ``(0, maximum]``, using ``default`` if unset."""
    if size is None or size <= 0:
        size = default
    return min(size, maximum)


@dataclass(frozen=True)
class ResponseSummary:
    """Progress counters reported by the server for one response."""

    read_rows: int = 0
    read_bytes: int = 0
    written_rows: int = 0
    written_bytes: int = 0
    total_rows_to_read: int = 0


EMPTY_SUMMARY = ResponseSummary()


class Record(Sequence[Any]):
    """One decoded row, addressable by position or by column name."""

    def __init__(self, columns: Sequence[ColumnDescriptor], values: Sequence[Any]) -> None:
        if len(values) != len(columns):
            raise ValueError(f"Record has {len(values)} value(s) but {len(columns)} column(s)")
        self.columns = columns
        self.values = tuple(values)

    def __getitem__(self, index):  # type: ignore[override]
        return self.values[index]

    def __len__(self) -> int:
        return len(self.values)

    def index_of(self, name: str) -> int:
        """Return the position of a column by name."""
        for i, column in enumerate(self.columns):
            if column.name == name:
                return i
        raise KeyError(f"Column '{name}' not found")

    def get(self, name: str) -> Any:
        """Get a value by column name."""
        return self.values[self.index_of(name)]

    def to_dict(self) -> dict[str, Any]:
        return {column.name: value for column, value in zip(self.columns, self.values)}

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Record):
            return self.values == other.values and list(self.columns) == list(other.columns)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Record({self.to_dict()!r})"


class Response(ABC):
    """Result of a query: column metadata, summary and a stream of records.

    A response holds server resources until closed; use it as a context
    manager, or call ``close()`` once the records have been consumed.
    """

    @property
    @abstractmethod
    def columns(self) -> list[ColumnDescriptor]:
        """Return the parsed columns of the result, in order."""

    @property
    @abstractmethod
    def summary(self) -> ResponseSummary:
        """Return the progress summary of the query."""

    @property
    @abstractmethod
    def input_stream(self) -> BinaryIO | None:
        """Return the raw payload stream, or None if there is none."""

    @abstractmethod
    def records(self) -> Iterable[Record]:
        """Return the records of the result; they can only be iterated once."""

    @abstractmethod
    def close(self) -> None:
        """Release the resources held by this response."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Return whether the response has been closed."""

    def first_record(self) -> Record:
        """Return the first record, raising LookupError if there is none."""
        for record in self.records():
            return record
        raise LookupError("Response has no records")

    def stream(self) -> Iterator[Record]:
        """Return an iterator over the records."""
        return iter(self.records())

    def pipe(self, output: BinaryIO, buffer_size: int | None = None) -> int:
        """Copy the raw payload to ``output`` and return the number of bytes copied.

        Flushing ``output`` is left to the caller.
        """
        stream = self.input_stream
        if stream is None:
            return 0
        size = get_buffer_size(buffer_size)
        total = 0
        while True:
            chunk = stream.read(size)
            if not chunk:
                break
            output.write(chunk)
            total += len(chunk)
        return total

    def __enter__(self) -> Response:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class _EmptyResponse(Response):
    """Stateless response without columns or records."""

    @property
    def columns(self) -> list[ColumnDescriptor]:
        return []

    @property
    def summary(self) -> ResponseSummary:
        return EMPTY_SUMMARY

    @property
    def input_stream(self) -> BinaryIO | None:
        return None

    def records(self) -> Iterable[Record]:
        return []

    def close(self) -> None:
        pass

    @property
    def closed(self) -> bool:
        # Shared instance, never reports closed
        return False


EMPTY_RESPONSE: Response = _EmptyResponse()


class RecordListResponse(Response):
    """Response over rows that have already been decoded.

    Args:
        columns: Parsed columns, e.g. from ``typed_columns.parse``.
        rows: One sequence of values per row, in column order.
        payload: Raw bytes served by ``input_stream`` and ``pipe``.
        summary: Progress summary; derived from the rows if omitted.
    """

    def __init__(
        self,
        columns: Sequence[ColumnDescriptor],
        rows: Iterable[Sequence[Any]],
        payload: bytes | None = None,
        summary: ResponseSummary | None = None,
    ) -> None:
        self._columns = list(columns)
        self._records = [Record(self._columns, row) for row in rows]
        self._payload = io.BytesIO(payload) if payload is not None else None
        if summary is None:
            summary = ResponseSummary(
                read_rows=len(self._records),
                read_bytes=len(payload) if payload is not None else 0,
            )
        self._summary = summary
        self._closed = False

    @property
    def columns(self) -> list[ColumnDescriptor]:
        return list(self._columns)

    @property
    def summary(self) -> ResponseSummary:
        return self._summary

    @property
    def input_stream(self) -> BinaryIO | None:
        self._check_open()
        return self._payload

    def records(self) -> Iterable[Record]:
        self._check_open()
        return list(self._records)

    def close(self) -> None:
        if self._closed:
            return
        if self._payload is not None:
            self._payload.close()
        self._closed = True
        logger.debug("Closed response with %d record(s)", len(self._records))

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("Response is closed")
