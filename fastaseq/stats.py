"""Per-record composition statistics."""

from __future__ import annotations

import math
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterable

import pandas as pd

from .sequence import Sequence

COUNTED_RESIDUES = ("A", "C", "G", "T", "N")
COLUMNS = ["header", "length", "gc", *COUNTED_RESIDUES, "other"]


def composition_row(seq: Sequence) -> Dict[str, Any]:
    counts = Counter(seq.data.upper())
    row: Dict[str, Any] = {"header": seq.header, "length": seq.length(), "gc": seq.gc()}
    counted = 0
    for residue in COUNTED_RESIDUES:
        row[residue] = counts.get(ord(residue), 0)
        counted += row[residue]
    row["other"] = seq.length() - counted
    return row


def composition_table(sequences: Iterable[Sequence]) -> pd.DataFrame:
    """Return one row of composition counts per record.

    ``gc`` follows :meth:`Sequence.gc` (uppercase G/C only, NaN for empty
    records); the residue counts are case-insensitive.
    """

    rows = [composition_row(seq) for seq in sequences]
    return pd.DataFrame(rows, columns=COLUMNS)


def n50(lengths: Iterable[int]) -> int:
    ordered = sorted(lengths, reverse=True)
    half = sum(ordered) / 2
    running = 0
    for length in ordered:
        running += length
        if running >= half:
            return length
    return 0


def summarize(table: pd.DataFrame) -> Dict[str, Any]:
    """Aggregate a composition table into whole-file figures.

    The overall ``gc`` here counts both cases, unlike the per-record column.
    """

    total = int(table["length"].sum()) if not table.empty else 0
    gc_total = int(table["G"].sum() + table["C"].sum()) if not table.empty else 0
    return {
        "records": int(len(table)),
        "total_length": total,
        "mean_length": float(table["length"].mean()) if not table.empty else math.nan,
        "min_length": int(table["length"].min()) if not table.empty else 0,
        "max_length": int(table["length"].max()) if not table.empty else 0,
        "n50": n50(table["length"].tolist()),
        "gc": gc_total / total if total else math.nan,
    }


def write_stats(table: pd.DataFrame, path: Path, float_format: str = "%.4f") -> None:
    """Write the table as CSV, or TSV when the suffix is .tsv/.txt."""

    path.parent.mkdir(parents=True, exist_ok=True)
    sep = "\t" if path.suffix.lower() in {".tsv", ".txt"} else ","
    table.to_csv(path, sep=sep, index=False, float_format=float_format)
