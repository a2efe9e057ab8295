"""Tests for composition statistics."""

from __future__ import annotations

import math
from pathlib import Path

import pandas as pd
import pytest

from fastaseq.sequence import Sequence
from fastaseq.stats import COLUMNS, composition_table, n50, summarize, write_stats


def _table() -> pd.DataFrame:
    return composition_table(
        [
            Sequence("a", b"ACGTNn"),
            Sequence("b", b"gcX"),
            Sequence("e", b""),
        ]
    )


def test_composition_table_counts() -> None:
    table = _table()
    assert list(table.columns) == COLUMNS
    first = table.iloc[0]
    assert first["length"] == 6
    assert first["gc"] == pytest.approx(2 / 6)
    assert (first["A"], first["C"], first["G"], first["T"], first["N"], first["other"]) == (1, 1, 1, 1, 2, 0)
    second = table.iloc[1]
    assert second["gc"] == 0.0
    assert (second["C"], second["G"], second["other"]) == (1, 1, 1)
    assert math.isnan(table.iloc[2]["gc"])


def test_empty_table_keeps_columns() -> None:
    table = composition_table([])
    assert table.empty
    assert list(table.columns) == COLUMNS
    summary = summarize(table)
    assert summary["records"] == 0
    assert summary["total_length"] == 0
    assert math.isnan(summary["gc"])


def test_summarize() -> None:
    summary = summarize(_table())
    assert summary["records"] == 3
    assert summary["total_length"] == 9
    assert summary["min_length"] == 0
    assert summary["max_length"] == 6
    assert summary["n50"] == 6
    assert summary["gc"] == pytest.approx(4 / 9)


def test_n50() -> None:
    assert n50([2, 3, 4, 5, 6]) == 5
    assert n50([]) == 0


def test_write_stats_picks_separator(tmp_path: Path) -> None:
    table = _table()
    csv_path = tmp_path / "stats.csv"
    tsv_path = tmp_path / "stats.tsv"
    write_stats(table, csv_path)
    write_stats(table, tsv_path)
    assert pd.read_csv(csv_path)["length"].tolist() == [6, 3, 0]
    assert pd.read_csv(tsv_path, sep="\t")["header"].tolist() == ["a", "b", "e"]
