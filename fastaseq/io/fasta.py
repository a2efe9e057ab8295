"""FASTA file reading and writing built on the streaming scanner."""

from __future__ import annotations

import contextlib
import sys
from pathlib import Path
from typing import BinaryIO, Generator, Iterable, Iterator, List, Union

from ..scanner import Scanner
from ..sequence import Sequence

STDIO = "-"

PathLike = Union[str, Path]


@contextlib.contextmanager
def open_fasta(path: PathLike) -> Iterator[BinaryIO]:
    """Yield a binary handle for ``path``; ``-`` reads standard input."""

    if str(path) == STDIO:
        yield sys.stdin.buffer
        return
    with Path(path).open("rb") as handle:
        yield handle


@contextlib.contextmanager
def open_output(path: PathLike) -> Iterator[BinaryIO]:
    """Yield a binary handle for writing ``path``; ``-`` writes standard output."""

    if str(path) == STDIO:
        yield sys.stdout.buffer
        sys.stdout.buffer.flush()
        return
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("wb") as handle:
        yield handle


def iter_fasta(path: PathLike) -> Generator[Sequence, None, None]:
    """Yield records from a FASTA file one at a time."""

    with open_fasta(path) as handle:
        yield from Scanner(handle)


def read_fasta(path: PathLike) -> List[Sequence]:
    """Read a FASTA file into a list of Sequences."""
    return list(iter_fasta(path))


def write_fasta(handle: BinaryIO, sequences: Iterable[Sequence], line_length: int | None = None) -> int:
    """Write records to an open binary handle and return how many were written.

    When ``line_length`` is given it replaces each record's own wrap width.
    """

    count = 0
    for seq in sequences:
        if line_length is not None:
            seq.set_line_length(line_length)
        handle.write(str(seq).encode("utf-8", errors="surrogateescape"))
        handle.write(b"\n")
        count += 1
    return count
