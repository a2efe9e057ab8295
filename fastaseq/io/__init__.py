"""IO helpers for fastaseq."""

from .fasta import iter_fasta, open_fasta, open_output, read_fasta, write_fasta
from .paths import ensure_dir, now_iso, sha256_digest, write_bytes, write_json

__all__ = [
    "ensure_dir",
    "write_json",
    "write_bytes",
    "now_iso",
    "sha256_digest",
    "open_fasta",
    "open_output",
    "iter_fasta",
    "read_fasta",
    "write_fasta",
]
