"""Streaming FASTA scanning and sequence transformations."""

from .scanner import Scanner, read_all
from .sequence import COMPLEMENT_TABLE, DEFAULT_LINE_LENGTH, UNBOUNDED, Sequence, concatenate

__version__ = "0.1.0"

__all__ = [
    "COMPLEMENT_TABLE",
    "DEFAULT_LINE_LENGTH",
    "UNBOUNDED",
    "Scanner",
    "Sequence",
    "concatenate",
    "read_all",
]
