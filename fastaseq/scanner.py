"""Streaming FASTA scanner.

The scanner rebuilds records from a binary, line-oriented input. It has two
advance granularities sharing one state: :meth:`Scanner.scan_line` moves
over non-empty lines, and :meth:`Scanner.scan_sequence` assembles those
lines into records retrieved with :meth:`Scanner.sequence`.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Iterator, List, Optional

from .sequence import DEFAULT_LINE_LENGTH, Sequence

HEADER_MARKER = ord(">")
LINE_TERMINATORS = b"\r\n"

logger = logging.getLogger(__name__)


class Scanner:
    """Read FASTA records one at a time from ``stream``.

    ``stream`` only needs a ``readline()`` method returning ``bytes``. A
    scanner is bound to one stream and never rewinds.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._line = b""
        self._is_header = False
        self._trailing = b""
        self._at_eof = False
        self.error: Optional[OSError] = None

        self._current_header = ""
        self._previous_header = ""
        self._data = bytearray()
        self._first_sequence = True
        self._last_sequence = False
        self._input_done = False
        self.records_read = 0

    @property
    def line(self) -> bytes:
        """The last non-empty line scanned, without its terminator."""
        return self._line

    @property
    def is_header(self) -> bool:
        return self._is_header

    def scan_line(self) -> bool:
        """Advance to the next non-empty line.

        Returns False once the input is exhausted. If the input ended on a
        line without a terminator, that line is held back for :meth:`flush`.
        """

        while True:
            try:
                raw = self._stream.readline()
            except OSError as exc:
                logger.warning("Read failed after %s records: %s", self.records_read, exc)
                self.error = exc
                self._at_eof = False
                self._trailing = b""
                return False
            if not raw:
                self._at_eof = True
                self._trailing = b""
                return False
            if not raw.endswith(b"\n"):
                self._at_eof = True
                self._trailing = raw.rstrip(LINE_TERMINATORS)
                return False
            line = raw.rstrip(LINE_TERMINATORS)
            if line:
                self._line = line
                self._is_header = line[0] == HEADER_MARKER
                return True

    def flush(self) -> bytes:
        """Return the unterminated bytes left after the last :meth:`scan_line`.

        Empty if the input ended with a line break, or on a read failure.
        """

        if self._at_eof:
            return self._trailing
        return b""

    def scan_sequence(self) -> bool:
        """Advance to the next record; returns False when there are no more."""
        if self._last_sequence:
            return False
        if not self._input_done:
            while self.scan_line():
                if self._is_header:
                    if self._open_header(self._line):
                        return True
                else:
                    self._data += self._line
            self._input_done = True
            trailing = self.flush()
            self._trailing = b""
            if trailing[:1] == b">":
                # A final header without a line break still opens a record.
                if self._open_header(trailing):
                    return True
            else:
                self._data += trailing

        self._last_sequence = True
        self._previous_header = self._current_header
        return not self._first_sequence

    def _open_header(self, line: bytes) -> bool:
        self._previous_header = self._current_header
        self._current_header = line[1:].decode("utf-8", errors="surrogateescape")
        if self._first_sequence:
            self._first_sequence = False
            return False
        return True

    def sequence(self) -> Sequence:
        """Return the record found by the last :meth:`scan_sequence` call."""
        seq = Sequence(self._previous_header, self._data, DEFAULT_LINE_LENGTH)
        self._data.clear()
        self.records_read += 1
        return seq

    def __iter__(self) -> Iterator[Sequence]:
        while self.scan_sequence():
            yield self.sequence()


def read_all(stream: BinaryIO) -> List[Sequence]:
    """Read every record from ``stream`` into a list."""
    return list(Scanner(stream))
