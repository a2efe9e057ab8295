"""Sequence filtering utilities."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List

from .io.paths import sha256_digest
from .sequence import Sequence


@dataclass(slots=True)
class FilterRequest:
    min_len: int = 0
    max_len: int = 0
    min_gc: float = 0.0
    max_gc: float = 1.0
    clean: bool = False
    uppercase: bool = False
    dedupe: bool = False


@dataclass(slots=True)
class FilterResult:
    total_records: int = 0
    kept: List[Sequence] = field(default_factory=list)
    reasons: Counter = field(default_factory=Counter)

    @property
    def kept_records(self) -> int:
        return len(self.kept)


def filter_sequences(sequences: Iterable[Sequence], request: FilterRequest, logger) -> FilterResult:
    """Clean, case-fold and screen records by length, GC fraction and duplication.

    Records are modified in place by ``clean``/``uppercase`` before being
    checked. ``max_len`` of 0 disables the upper bound. GC is only checked
    for non-empty records.
    """

    if request.min_gc > request.max_gc:
        raise ValueError(f"min_gc ({request.min_gc}) exceeds max_gc ({request.max_gc})")

    result = FilterResult()
    seen: set[str] = set()
    for seq in sequences:
        result.total_records += 1
        was_empty = seq.length() == 0
        if request.clean:
            seq.clean()
        if request.uppercase:
            seq.data_to_upper()
        reason = _classify(seq, request, seen, was_empty)
        result.reasons[reason] += 1
        if reason == "ok":
            result.kept.append(seq)
        else:
            logger.debug("Dropping %r: %s", seq.header, reason)

    logger.info(
        "Kept %s/%s records (%s)",
        result.kept_records,
        result.total_records,
        ", ".join(f"{key}={value}" for key, value in sorted(result.reasons.items())),
    )
    return result


def _classify(seq: Sequence, request: FilterRequest, seen: set[str], was_empty: bool) -> str:
    length = seq.length()
    if length == 0 and request.clean:
        return "empty" if was_empty else "empty_after_clean"
    if length < request.min_len:
        return "too_short"
    if request.max_len > 0 and length > request.max_len:
        return "too_long"
    gc = seq.gc()
    if not math.isnan(gc) and not request.min_gc <= gc <= request.max_gc:
        return "gc_out_of_range"
    if request.dedupe:
        digest = sha256_digest(seq.data.decode("latin-1").upper())
        if digest in seen:
            return "duplicate"
        seen.add(digest)
    return "ok"
