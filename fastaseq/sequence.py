"""FASTA sequence record and in-place residue transformations."""

from __future__ import annotations

import logging
import math
import random
import sys
from typing import Sequence as SequenceType, Union

DEFAULT_LINE_LENGTH = 70
UNBOUNDED = sys.maxsize

_FORWARD = b"ACGTUWSMKRYBDHVNacgtuwsmkrybdhvn"
_REVERSE = b"TGCAAWSKMYRVHDBNtgcaawskmyrvhdbn"
COMPLEMENT_TABLE = bytes.maketrans(_FORWARD, _REVERSE)

CANONICAL_BASES = frozenset(b"ACGTacgt")
_GC = frozenset(b"GC")

BytesLike = Union[bytes, bytearray, memoryview, str]

logger = logging.getLogger(__name__)


def _to_bytearray(data: BytesLike) -> bytearray:
    if isinstance(data, str):
        return bytearray(data.encode("ascii"))
    return bytearray(data)


class Sequence:
    """A nucleotide or protein sequence: a header, residue bytes and a wrap width.

    The residue buffer is always a private copy, so transformations may
    mutate it in place without touching the caller's data.
    """

    __slots__ = ("_header", "_data", "_line_length")
    __hash__ = None  # mutable

    def __init__(self, header: str = "", data: BytesLike = b"", line_length: int = DEFAULT_LINE_LENGTH) -> None:
        self._header = header
        self._data = _to_bytearray(data)
        self._line_length = DEFAULT_LINE_LENGTH
        self.set_line_length(line_length)

    @property
    def header(self) -> str:
        return self._header

    @header.setter
    def header(self, value: str) -> None:
        self._header = value

    @property
    def data(self) -> bytearray:
        return self._data

    @data.setter
    def data(self, value: BytesLike) -> None:
        self._data = _to_bytearray(value)

    @property
    def line_length(self) -> int:
        return self._line_length

    def set_header(self, header: str) -> None:
        """Replace the existing header."""
        self._header = header

    def set_data(self, data: BytesLike) -> None:
        """Replace the existing data with a copy of ``data``."""
        self._data = _to_bytearray(data)

    def set_line_length(self, line_length: int) -> None:
        """Set the wrap width; values below 1 request unbounded lines."""
        self._line_length = UNBOUNDED if line_length < 1 else line_length

    def append_to_header(self, suffix: str) -> None:
        self._header += suffix

    def equals(self, other: "Sequence") -> bool:
        """Return True if headers and data are identical. Line length is ignored."""
        return self._header == other._header and self._data == other._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sequence):
            return NotImplemented
        return self.equals(other)

    def __len__(self) -> int:
        return len(self._data)

    def length(self) -> int:
        """Return the number of residues."""
        return len(self._data)

    def to_fasta(self) -> str:
        """Render the record, wrapping data at ``line_length`` residues per line.

        No line break follows the last chunk. A record without data renders
        as the header line alone.
        """

        text = self._data.decode("ascii", errors="surrogateescape")
        width = self._line_length
        lines = [f">{self._header}"]
        lines.extend(text[idx : idx + width] for idx in range(0, len(text), width))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_fasta()

    def __repr__(self) -> str:
        preview = self._data[:20].decode("ascii", errors="replace")
        if len(self._data) > 20:
            preview += "..."
        return f"Sequence(header={self._header!r}, data={preview!r}, length={len(self._data)})"

    def shuffle(self, rng: random.Random) -> None:
        """Permute the residues in place (Fisher-Yates); composition is unchanged.

        ``rng`` is any object with a ``randrange`` method, typically a seeded
        :class:`random.Random`, so results are reproducible.
        """

        data = self._data
        for i in range(len(data) - 1, 0, -1):
            j = rng.randrange(i + 1)
            data[i], data[j] = data[j], data[i]

    def reverse(self) -> None:
        self._data.reverse()

    def complement(self) -> None:
        """Complement nucleotide codes, including IUPAC ambiguity codes.

        Bytes outside the table pass through unchanged.
        """

        self._data[:] = self._data.translate(COMPLEMENT_TABLE)

    def reverse_complement(self) -> None:
        self.reverse()
        self.complement()

    def gc(self) -> float:
        """Return the fraction of uppercase G and C residues.

        An empty sequence yields ``nan``.
        """

        if not self._data:
            return math.nan
        count = sum(1 for residue in self._data if residue in _GC)
        return count / len(self._data)

    def clean(self) -> None:
        """Keep only ACGT residues (either case), preserving order and case."""
        self._data[:] = bytes(residue for residue in self._data if residue in CANONICAL_BASES)

    def data_to_upper(self) -> None:
        self._data[:] = self._data.upper()


def concatenate(sequences: SequenceType[Sequence], separator: Union[int, bytes, str] = 0) -> Sequence | None:
    """Glue headers and data of ``sequences`` into a single record.

    A non-zero ``separator`` byte is placed between successive headers and
    between successive data pieces. A single input is returned as is; an
    empty input is reported and yields ``None``.
    """

    sep = _separator_byte(separator)
    if not sequences:
        logger.error("concatenate: the input list is empty")
        return None
    if len(sequences) == 1:
        return sequences[0]

    joiner = bytes([sep]) if sep else b""
    header = joiner.decode("utf-8", errors="surrogateescape").join(seq.header for seq in sequences)
    data = joiner.join(seq.data for seq in sequences)
    return Sequence(header, data)


def _separator_byte(separator: Union[int, bytes, str]) -> int:
    if isinstance(separator, int):
        if not 0 <= separator <= 255:
            raise ValueError(f"Separator must be a single byte, got {separator}")
        return separator
    if isinstance(separator, str):
        separator = separator.encode("latin-1")
    if len(separator) > 1:
        raise ValueError(f"Separator must be a single byte, got {separator!r}")
    return separator[0] if separator else 0
