"""Tests for the streaming FASTA scanner."""

from __future__ import annotations

import io

import pytest

from fastaseq.scanner import Scanner, read_all
from fastaseq.sequence import DEFAULT_LINE_LENGTH, Sequence


def _records(payload: bytes) -> list[tuple[str, bytes]]:
    return [(seq.header, bytes(seq.data)) for seq in read_all(io.BytesIO(payload))]


class _FailingStream:
    """Yields the given lines, then fails like a broken pipe."""

    def __init__(self, lines: list[bytes]) -> None:
        self._lines = list(lines)

    def readline(self) -> bytes:
        if self._lines:
            return self._lines.pop(0)
        raise OSError("device went away")


def test_empty_input_has_no_records() -> None:
    assert _records(b"") == []


def test_input_without_header_has_no_records() -> None:
    assert _records(b"ACGT\nACGT\n") == []
    assert _records(b"\n\n\n") == []


def test_lone_marker_is_one_empty_record() -> None:
    assert _records(b">") == [("", b"")]
    assert _records(b">\n") == [("", b"")]


def test_header_without_data() -> None:
    assert _records(b">only\n") == [("only", b"")]


def test_consecutive_headers_produce_empty_record() -> None:
    assert _records(b">a\n>b\nAC\n") == [("a", b""), ("b", b"AC")]


def test_multi_record_file() -> None:
    payload = b">s1 first\nACGT\nTTGA\n>s2 second\nGG\n>s3\nC\n"
    assert _records(payload) == [("s1 first", b"ACGTTTGA"), ("s2 second", b"GG"), ("s3", b"C")]


def test_unterminated_final_line_is_kept() -> None:
    assert _records(b">a\nACGT\nTTGA") == [("a", b"ACGTTTGA")]
    assert _records(b">a\nAC\n>b\nGGGG") == [("a", b"AC"), ("b", b"GGGG")]


def test_unterminated_final_header_opens_empty_record() -> None:
    assert _records(b">a\nAC\n>b") == [("a", b"AC"), ("b", b"")]


def test_crlf_line_endings() -> None:
    assert _records(b">a\r\nAC\r\nGT\r\n>b\r\nTT") == [("a", b"ACGT"), ("b", b"TT")]


def test_blank_lines_are_ignored() -> None:
    payload = b"\n\n>a\n\nAC\n\n\nGT\n\n>b\n\nT"
    assert _records(payload) == [("a", b"ACGT"), ("b", b"T")]


def test_scan_sequence_stays_exhausted() -> None:
    scanner = Scanner(io.BytesIO(b">a\nAC\n"))
    assert scanner.scan_sequence()
    assert scanner.sequence().header == "a"
    assert not scanner.scan_sequence()
    assert not scanner.scan_sequence()


def test_sequence_returns_private_copy() -> None:
    scanner = Scanner(io.BytesIO(b">a\nAC\n>b\nGT\n"))
    assert scanner.scan_sequence()
    first = scanner.sequence()
    assert scanner.scan_sequence()
    second = scanner.sequence()
    assert first.data == b"AC"
    assert second.data == b"GT"
    assert first.line_length == DEFAULT_LINE_LENGTH
    assert scanner.records_read == 2


def test_scan_line_classifies_and_flushes() -> None:
    scanner = Scanner(io.BytesIO(b">h\nAC\n\nGT"))
    assert scanner.scan_line()
    assert scanner.is_header and scanner.line == b">h"
    assert scanner.scan_line()
    assert not scanner.is_header and scanner.line == b"AC"
    assert not scanner.scan_line()
    assert scanner.flush() == b"GT"


def test_flush_is_empty_after_terminated_input() -> None:
    scanner = Scanner(io.BytesIO(b">h\nAC\n"))
    while scanner.scan_line():
        pass
    assert scanner.flush() == b""


def test_read_failure_ends_the_stream() -> None:
    scanner = Scanner(_FailingStream([b">a\n", b"AC\n"]))
    records = list(scanner)
    assert [(seq.header, bytes(seq.data)) for seq in records] == [("a", b"AC")]
    assert isinstance(scanner.error, OSError)
    assert scanner.flush() == b""


def test_non_utf8_header_bytes_survive() -> None:
    (seq,) = read_all(io.BytesIO(b">caf\xe9\nAC\n"))
    assert seq.header.encode("utf-8", errors="surrogateescape") == b"caf\xe9"


@pytest.mark.parametrize("line_length", [1, 4, 5, 9, 10, 0])
def test_round_trip_through_text(line_length: int) -> None:
    original = Sequence("seq desc", b"ACCGTAGGT")
    original.set_line_length(line_length)
    text = str(original).encode("ascii")
    assert read_all(io.BytesIO(text)) == [original]
    assert read_all(io.BytesIO(text + b"\n")) == [original]


def test_round_trip_of_multiple_records() -> None:
    originals = [Sequence("a", b"ACGTACGT"), Sequence("", b""), Sequence("c", b"TT")]
    for seq in originals:
        seq.set_line_length(3)
    text = "\n".join(str(seq) for seq in originals).encode("ascii")
    assert read_all(io.BytesIO(text)) == originals


class _CountingStream(io.BytesIO):
    def __init__(self, payload: bytes) -> None:
        super().__init__(payload)
        self.reads = 0

    def readline(self, size: int | None = -1) -> bytes:
        self.reads += 1
        return super().readline(size)


def test_unterminated_final_header_ends_reading() -> None:
    stream = _CountingStream(b">a\nAC\n>b")
    records = [(seq.header, bytes(seq.data)) for seq in Scanner(stream)]
    assert records == [("a", b"AC"), ("b", b"")]
    assert stream.reads == 3


def test_lone_marker_is_read_once() -> None:
    stream = _CountingStream(b">")
    assert len(read_all(stream)) == 1
    assert stream.reads == 1
