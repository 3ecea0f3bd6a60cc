"""
Streaming log reader.

Pulls one line at a time from a byte or text source, matches it against a
compiled format and yields one Entry per line. No read-ahead happens beyond
the line being parsed.
"""

from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Union

import structlog

from ..config import ReaderSettings, get_settings
from .compiler import CompiledFormat, compile_format
from .entry import Entry
from .exceptions import IoError, LineFormatMismatch

logger = structlog.get_logger(__name__)


class ReaderState(str, Enum):
    """Reader lifecycle states."""

    ACTIVE = "active"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class Reader:
    """
    Parse log lines from ``source`` using a ``$name`` format template.

    ``source`` is a binary or text file object (anything with ``readline``)
    or an iterable of lines. Iterating the reader yields entries; a line that
    does not match raises LineFormatMismatch from that pull only, and the
    next pull continues with the following line. A read failure raises
    IoError and every later pull fails the same way.
    """

    def __init__(
        self,
        source: Any,
        template: str,
        settings: Optional[ReaderSettings] = None,
    ) -> None:
        self._init(source, compile_format(template), settings)

    @classmethod
    def with_format(
        cls,
        source: Any,
        compiled_format: CompiledFormat,
        settings: Optional[ReaderSettings] = None,
    ) -> "Reader":
        """Create a reader that shares an already compiled format."""
        reader = cls.__new__(cls)
        reader._init(source, compiled_format, settings)
        return reader

    def _init(
        self,
        source: Any,
        compiled_format: CompiledFormat,
        settings: Optional[ReaderSettings],
    ) -> None:
        self.settings = settings or get_settings()
        self._format = compiled_format
        self._readline = self._line_source(source)
        self._state = ReaderState.ACTIVE
        self._failure: Optional[IoError] = None
        self._line_number = 0

        logger.info(
            "Reader initialized",
            fields=len(compiled_format.field_names),
            source_type=type(source).__name__,
        )

    @staticmethod
    def _line_source(source: Any) -> Callable[[], Optional[Union[str, bytes]]]:
        readline = getattr(source, "readline", None)
        if callable(readline):
            # readline() signals end of input with an empty string
            return lambda: readline() or None

        iterator = iter(source)
        return lambda: next(iterator, None)

    @property
    def compiled_format(self) -> CompiledFormat:
        return self._format

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def line_number(self) -> int:
        """Number of lines consumed from the source so far."""
        return self._line_number

    def _next_line(self) -> Optional[str]:
        try:
            raw = self._readline()
        except (OSError, ValueError) as e:
            # ValueError covers text-mode decode failures and closed files
            self._state = ReaderState.FAILED
            self._failure = IoError(e)
            logger.error(
                "Failed to read log source",
                line_number=self._line_number + 1,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise self._failure from e

        if raw is None:
            return None

        self._line_number += 1
        if isinstance(raw, bytes):
            try:
                line = raw.decode(self.settings.encoding, self.settings.decode_errors)
            except UnicodeDecodeError as e:
                self._state = ReaderState.FAILED
                self._failure = IoError(e)
                logger.error("Failed to decode log line", line_number=self._line_number, error=str(e))
                raise self._failure from e
        else:
            line = raw

        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        return line

    def read(self) -> Optional[Entry]:
        """
        Parse the next line.

        Returns None once the source is exhausted, and on every call after.
        """
        if self._state is ReaderState.FAILED:
            raise IoError(self._failure.cause) from self._failure.cause
        if self._state is ReaderState.EXHAUSTED:
            return None

        while True:
            line = self._next_line()
            if line is None:
                self._state = ReaderState.EXHAUSTED
                logger.debug("Log source exhausted", lines=self._line_number)
                return None
            if self.settings.skip_blank_lines and not line.strip():
                continue
            break

        try:
            return self._format.parse_line(
                line,
                line_number=self._line_number,
                preview_chars=self.settings.mismatch_preview_chars,
            )
        except LineFormatMismatch:
            logger.debug("Log line does not match format", line_number=self._line_number)
            raise

    def __iter__(self) -> Iterator[Entry]:
        return self

    def __next__(self) -> Entry:
        entry = self.read()
        if entry is None:
            raise StopIteration
        return entry

    def collect_all(self) -> List[Entry]:
        """
        Read every remaining entry.

        Fails fast: the first mismatch or read error is raised and the
        entries parsed before it are discarded.
        """
        return list(self)

    def process_entries(self, callback: Callable[[Entry], Any]) -> int:
        """
        Call ``callback`` once per remaining entry, in source order.

        Stops at the first parse error, read error or exception raised by the
        callback, and propagates it. Returns the number of entries processed.
        """
        processed = 0
        for entry in self:
            callback(entry)
            processed += 1
        return processed
