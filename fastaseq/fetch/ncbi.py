"""NCBI Entrez client for downloading FASTA records."""

from __future__ import annotations

import io
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Sequence as SequenceType

import requests

from ..io.paths import ensure_dir, sha256_digest, write_bytes
from ..scanner import Scanner
from ..sequence import Sequence

ENTREZ_BASE = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
EFETCH_ENDPOINT = f"{ENTREZ_BASE}/efetch.fcgi"

DEFAULT_FETCH_BATCH_SIZE = 100


@dataclass(slots=True)
class FetchRequest:
    """Parameters used to query NCBI."""

    ids: List[str]
    cache_dir: Path | None = None
    db: str = "nuccore"
    email: str | None = None
    tool: str = "fastaseq"
    api_key: str | None = None
    sleep: float = 0.34
    timeout: int = 30
    retries: int = 3
    batch_size: int = DEFAULT_FETCH_BATCH_SIZE


class NCBIClient:
    """Thin wrapper around requests with caching and retries."""

    def __init__(self, request: FetchRequest, logger, session: requests.Session | None = None) -> None:
        self.request = request
        self.logger = logger
        self.session = session or requests.Session()

    def efetch(self, ids: SequenceType[str]) -> bytes:
        params = {
            "db": self.request.db,
            "id": ",".join(ids),
            "rettype": "fasta",
            "retmode": "text",
        }
        cache_path = self._cache_path(f"{self.request.db}|{','.join(ids)}")
        if cache_path and cache_path.exists():
            self.logger.debug("Cache hit: %s", cache_path)
            return cache_path.read_bytes()

        payload = self._request(EFETCH_ENDPOINT, params)
        if cache_path:
            write_bytes(cache_path, payload)
        return payload

    def _request(self, url: str, params: dict[str, Any]) -> bytes:
        combined_params = {**params, **self._shared_params()}
        last_exc: Exception | None = None
        for attempt in range(1, self.request.retries + 1):
            try:
                response = self.session.get(url, params=combined_params, timeout=self.request.timeout)
                response.raise_for_status()
                if self.request.sleep > 0:
                    time.sleep(self.request.sleep)
                return response.content
            except requests.RequestException as exc:
                last_exc = exc
                delay = 2 ** (attempt - 1)
                self.logger.warning(
                    "Request to %s failed (attempt %s/%s): %s",
                    url,
                    attempt,
                    self.request.retries,
                    exc,
                )
                if attempt == self.request.retries:
                    break
                time.sleep(delay)
        raise RuntimeError(f"Failed to call {url}: {last_exc}") from last_exc

    def _shared_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"tool": self.request.tool}
        if self.request.email:
            params["email"] = self.request.email
        if self.request.api_key:
            params["api_key"] = self.request.api_key
        return params

    def _cache_path(self, cache_key: str) -> Path | None:
        if self.request.cache_dir is None:
            return None
        path = self.request.cache_dir / "efetch" / f"{sha256_digest(cache_key)}.fasta"
        ensure_dir(path.parent)
        return path


def fetch_sequences(request: FetchRequest, logger, session: requests.Session | None = None) -> List[Sequence]:
    """Download the requested IDs and parse the responses into Sequences."""

    if request.retries < 1:
        raise ValueError("retries must be at least 1")
    client = NCBIClient(request, logger, session=session)
    sequences: List[Sequence] = []
    for batch in _chunked(request.ids, request.batch_size):
        payload = client.efetch(batch)
        records = list(Scanner(io.BytesIO(payload)))
        logger.debug("Batch of %s IDs returned %s records", len(batch), len(records))
        sequences.extend(records)
    logger.info("Fetched %s records for %s IDs", len(sequences), len(request.ids))
    return sequences


def _chunked(seq: SequenceType[str], size: int) -> Iterable[SequenceType[str]]:
    for idx in range(0, len(seq), size):
        yield seq[idx : idx + size]
