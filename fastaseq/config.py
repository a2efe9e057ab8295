"""Default settings and environment configuration for fastaseq."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from dotenv import find_dotenv, load_dotenv

from .sequence import DEFAULT_LINE_LENGTH

DEFAULT_CACHE_DIR = Path("data") / "cache"

ENVIRONMENT_VARIABLES = (
    "NCBI_EMAIL",
    "NCBI_TOOL",
    "NCBI_API_KEY",
    "FASTASEQ_LINE_LENGTH",
)


@dataclass(slots=True)
class FormatDefaults:
    """Options shared by every command that writes FASTA."""

    in_fasta: str = "-"
    out: str = "-"
    line_length: int = DEFAULT_LINE_LENGTH


@dataclass(slots=True)
class FilterDefaults:
    """Default values for filter command arguments."""

    min_len: int = 0
    max_len: int = 0
    min_gc: float = 0.0
    max_gc: float = 1.0


@dataclass(slots=True)
class StatsDefaults:
    """Defaults for the stats command."""

    separator: str = "\t"
    float_format: str = "%.4f"


@dataclass(slots=True)
class FetchDefaults:
    """Options surfaced on the CLI fetch command."""

    cache_dir: Path = DEFAULT_CACHE_DIR
    db: str = "nuccore"
    tool: str = "fastaseq"
    sleep: float = 0.34
    timeout: int = 30
    retries: int = 3
    batch_size: int = 100


FORMAT_DEFAULTS = FormatDefaults()
FILTER_DEFAULTS = FilterDefaults()
STATS_DEFAULTS = StatsDefaults()
FETCH_DEFAULTS = FetchDefaults()


@dataclass
class RuntimeConfig:
    """Values read from the environment (and an optional .env file)."""

    ncbi_email: Optional[str]
    ncbi_tool: Optional[str]
    ncbi_api_key: Optional[str]
    line_length: Optional[int]

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {
            "NCBI_EMAIL": self.ncbi_email,
            "NCBI_TOOL": self.ncbi_tool,
            "NCBI_API_KEY": self.ncbi_api_key,
            "FASTASEQ_LINE_LENGTH": None if self.line_length is None else str(self.line_length),
        }

    def missing_keys(self) -> Iterator[str]:
        for key, value in self.as_dict().items():
            if not value:
                yield key


PathLike = Union[str, Path]


def load_environment(start_path: Optional[PathLike] = None) -> Optional[Path]:
    """Load the closest .env file without overriding pre-existing variables."""

    if start_path is not None:
        env_path = _find_env_upwards(Path(start_path).resolve())
    else:
        found = find_dotenv(usecwd=True)
        env_path = Path(found) if found else None
    if env_path is None:
        return None
    load_dotenv(env_path, override=False)
    return env_path


def collect_runtime_config(start_path: Optional[PathLike] = None) -> RuntimeConfig:
    """Ensure the .env file is sourced and expose the values as a dataclass."""

    load_environment(start_path)
    env = os.environ
    return RuntimeConfig(
        ncbi_email=env.get("NCBI_EMAIL"),
        ncbi_tool=env.get("NCBI_TOOL"),
        ncbi_api_key=env.get("NCBI_API_KEY"),
        line_length=_parse_int(env.get("FASTASEQ_LINE_LENGTH"), "FASTASEQ_LINE_LENGTH"),
    )


def _find_env_upwards(start: Path) -> Optional[Path]:
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.exists():
            return candidate
    return None


def _parse_int(value: Optional[str], name: str) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
