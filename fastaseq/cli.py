"""Command-line interface for fastaseq."""

from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .config import (
    FETCH_DEFAULTS,
    FILTER_DEFAULTS,
    FORMAT_DEFAULTS,
    STATS_DEFAULTS,
    collect_runtime_config,
    load_environment,
)
from .fetch.ncbi import FetchRequest, fetch_sequences
from .filters import FilterRequest, filter_sequences
from .io import iter_fasta, now_iso, open_output, read_fasta, write_fasta, write_json
from .logging_utils import configure_logging, get_logger
from .sequence import Sequence, concatenate
from .stats import composition_table, summarize, write_stats

Handler = Callable[[argparse.Namespace], int]
Transform = Callable[[Sequence], None]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fastaseq",
        description="fastaseq - stream, transform and summarize FASTA files.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_format_parser(subparsers)
    _add_revcomp_parser(subparsers)
    _add_shuffle_parser(subparsers)
    _add_clean_parser(subparsers)
    _add_upper_parser(subparsers)
    _add_concat_parser(subparsers)
    _add_stats_parser(subparsers)
    _add_filter_parser(subparsers)
    _add_fetch_parser(subparsers)
    return parser


def _add_input_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--in-fasta",
        default=FORMAT_DEFAULTS.in_fasta,
        help="Input FASTA file ('-' for stdin, the default).",
    )


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--out",
        default=FORMAT_DEFAULTS.out,
        help="Output FASTA file ('-' for stdout, the default).",
    )
    parser.add_argument(
        "--line-length",
        type=int,
        default=None,
        help=(
            f"Residues per output line; values below 1 disable wrapping "
            f"(default: FASTASEQ_LINE_LENGTH or {FORMAT_DEFAULTS.line_length})."
        ),
    )


def _add_format_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("format", help="Rewrap records to a fixed line length.")
    _add_input_argument(parser)
    _add_output_arguments(parser)
    parser.set_defaults(handler=_handle_format)


def _add_revcomp_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("revcomp", help="Reverse and/or complement nucleotide records.")
    _add_input_argument(parser)
    _add_output_arguments(parser)
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--reverse-only",
        action="store_true",
        help="Reverse residues without complementing.",
    )
    mode.add_argument(
        "--complement-only",
        action="store_true",
        help="Complement residues without reversing.",
    )
    parser.set_defaults(handler=_handle_revcomp)


def _add_shuffle_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("shuffle", help="Shuffle residues within each record.")
    _add_input_argument(parser)
    _add_output_arguments(parser)
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random generator (default: nondeterministic).",
    )
    parser.set_defaults(handler=_handle_shuffle)


def _add_clean_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("clean", help="Drop every residue other than A, C, G and T.")
    _add_input_argument(parser)
    _add_output_arguments(parser)
    parser.add_argument(
        "--upper",
        action="store_true",
        help="Also convert the retained residues to uppercase.",
    )
    parser.set_defaults(handler=_handle_clean)


def _add_upper_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("upper", help="Convert residues to uppercase.")
    _add_input_argument(parser)
    _add_output_arguments(parser)
    parser.set_defaults(handler=_handle_upper)


def _add_concat_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("concat", help="Merge all records into a single record.")
    _add_input_argument(parser)
    _add_output_arguments(parser)
    parser.add_argument(
        "--separator",
        default="",
        help="Single character placed between merged headers and data (default: none).",
    )
    parser.add_argument(
        "--header",
        help="Replace the merged header with this text.",
    )
    parser.set_defaults(handler=_handle_concat)


def _add_stats_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("stats", help="Report per-record composition statistics.")
    _add_input_argument(parser)
    parser.add_argument(
        "--out-table",
        type=Path,
        help="Write the table to this CSV/TSV file instead of stdout.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        help="Write whole-file summary figures as JSON.",
    )
    parser.set_defaults(handler=_handle_stats)


def _add_filter_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("filter", help="Filter records by length and GC content.")
    _add_input_argument(parser)
    _add_output_arguments(parser)
    parser.add_argument(
        "--min-len",
        type=int,
        default=FILTER_DEFAULTS.min_len,
        help=f"Minimum sequence length (default: {FILTER_DEFAULTS.min_len}).",
    )
    parser.add_argument(
        "--max-len",
        type=int,
        default=FILTER_DEFAULTS.max_len,
        help="Maximum sequence length (0 disables).",
    )
    parser.add_argument(
        "--min-gc",
        type=float,
        default=FILTER_DEFAULTS.min_gc,
        help=f"Minimum GC fraction (default: {FILTER_DEFAULTS.min_gc}).",
    )
    parser.add_argument(
        "--max-gc",
        type=float,
        default=FILTER_DEFAULTS.max_gc,
        help=f"Maximum GC fraction (default: {FILTER_DEFAULTS.max_gc}).",
    )
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Drop non-ACGT residues before filtering.",
    )
    parser.add_argument(
        "--upper",
        action="store_true",
        help="Convert residues to uppercase before filtering.",
    )
    parser.add_argument(
        "--dedupe",
        action="store_true",
        help="Remove duplicate sequences, keeping first occurrence.",
    )
    parser.set_defaults(handler=_handle_filter)


def _add_fetch_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("fetch", help="Download FASTA records from NCBI Entrez.")
    parser.add_argument("--id", dest="ids", nargs="+", default=[], help="Accessions or UIDs to fetch.")
    parser.add_argument(
        "--id-file",
        type=Path,
        help="File with one accession per line.",
    )
    _add_output_arguments(parser)
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=FETCH_DEFAULTS.cache_dir,
        help="Directory for local fetch cache.",
    )
    parser.add_argument("--no-cache", action="store_true", help="Disable the local fetch cache.")
    parser.add_argument("--db", default=FETCH_DEFAULTS.db, help="NCBI database to query (default: nuccore).")
    parser.add_argument(
        "--email",
        help="Contact email for NCBI (default: read from NCBI_EMAIL env if unset).",
    )
    parser.add_argument("--tool", default=None, help="Tool identifier reported to NCBI.")
    parser.add_argument(
        "--api-key",
        help="NCBI API key (default: read from NCBI_API_KEY env if unset).",
    )
    parser.add_argument(
        "--sleep",
        type=float,
        default=None,
        help="Seconds to wait between requests (default: 0.34 or 0.1 when API key provided).",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=FETCH_DEFAULTS.timeout,
        help="HTTP timeout in seconds.",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=FETCH_DEFAULTS.retries,
        help="Number of attempts for transient network errors.",
    )
    parser.set_defaults(handler=_handle_fetch)


def _resolve_line_length(args: argparse.Namespace) -> int:
    if args.line_length is not None:
        return args.line_length
    configured = collect_runtime_config().line_length
    return configured if configured is not None else FORMAT_DEFAULTS.line_length


def _apply(sequences: Iterable[Sequence], *transforms: Transform) -> Iterator[Sequence]:
    for seq in sequences:
        for transform in transforms:
            transform(seq)
        yield seq


def _write_records(args: argparse.Namespace, sequences: Iterable[Sequence]) -> int:
    line_length = _resolve_line_length(args)
    with open_output(args.out) as handle:
        count = write_fasta(handle, sequences, line_length=line_length)
    get_logger().debug("Wrote %s records to %s", count, args.out)
    return 0


def _handle_format(args: argparse.Namespace) -> int:
    _require_input(args.in_fasta)
    return _write_records(args, iter_fasta(args.in_fasta))


def _handle_revcomp(args: argparse.Namespace) -> int:
    _require_input(args.in_fasta)
    if args.reverse_only:
        transforms: tuple[Transform, ...] = (Sequence.reverse,)
    elif args.complement_only:
        transforms = (Sequence.complement,)
    else:
        transforms = (Sequence.reverse_complement,)
    return _write_records(args, _apply(iter_fasta(args.in_fasta), *transforms))


def _handle_shuffle(args: argparse.Namespace) -> int:
    _require_input(args.in_fasta)
    rng = random.Random(args.seed)
    return _write_records(args, _apply(iter_fasta(args.in_fasta), lambda seq: seq.shuffle(rng)))


def _handle_clean(args: argparse.Namespace) -> int:
    _require_input(args.in_fasta)
    transforms: tuple[Transform, ...] = (Sequence.clean, Sequence.data_to_upper) if args.upper else (Sequence.clean,)
    return _write_records(args, _apply(iter_fasta(args.in_fasta), *transforms))


def _handle_upper(args: argparse.Namespace) -> int:
    _require_input(args.in_fasta)
    return _write_records(args, _apply(iter_fasta(args.in_fasta), Sequence.data_to_upper))


def _handle_concat(args: argparse.Namespace) -> int:
    _require_input(args.in_fasta)
    merged = concatenate(read_fasta(args.in_fasta), args.separator)
    if merged is None:
        get_logger().error("No records found in %s", args.in_fasta)
        return 1
    if args.header is not None:
        merged.set_header(args.header)
    return _write_records(args, [merged])


def _handle_stats(args: argparse.Namespace) -> int:
    _require_input(args.in_fasta)
    table = composition_table(iter_fasta(args.in_fasta))
    if args.out_table:
        write_stats(table, args.out_table, float_format=STATS_DEFAULTS.float_format)
        get_logger().info("Stats table -> %s", args.out_table)
    else:
        table.to_csv(sys.stdout, sep=STATS_DEFAULTS.separator, index=False, float_format=STATS_DEFAULTS.float_format)
    if args.summary:
        summary = summarize(table)
        summary["timestamp"] = now_iso()
        write_json(args.summary, summary)
        get_logger().info("Summary -> %s", args.summary)
    return 0


def _handle_filter(args: argparse.Namespace) -> int:
    _require_input(args.in_fasta)
    request = FilterRequest(
        min_len=args.min_len,
        max_len=args.max_len,
        min_gc=args.min_gc,
        max_gc=args.max_gc,
        clean=args.clean,
        uppercase=args.upper,
        dedupe=args.dedupe,
    )
    result = filter_sequences(iter_fasta(args.in_fasta), request, get_logger())
    return _write_records(args, result.kept)


def _handle_fetch(args: argparse.Namespace) -> int:
    ids = list(args.ids)
    if args.id_file:
        _require_input(args.id_file)
        ids.extend(line.strip() for line in args.id_file.read_text(encoding="utf-8").splitlines() if line.strip())
    if not ids:
        raise ValueError("No IDs given; use --id or --id-file.")
    runtime = collect_runtime_config()
    email = args.email or runtime.ncbi_email
    api_key = args.api_key or runtime.ncbi_api_key
    sleep_interval = args.sleep if args.sleep is not None else (0.1 if api_key else FETCH_DEFAULTS.sleep)
    request = FetchRequest(
        ids=ids,
        cache_dir=None if args.no_cache else args.cache_dir,
        db=args.db,
        email=email,
        tool=args.tool or runtime.ncbi_tool or FETCH_DEFAULTS.tool,
        api_key=api_key,
        sleep=sleep_interval,
        timeout=args.timeout,
        retries=args.retries,
        batch_size=FETCH_DEFAULTS.batch_size,
    )
    sequences = fetch_sequences(request, get_logger())
    return _write_records(args, sequences)


def _require_input(path: str | Path) -> None:
    if str(path) != "-" and not Path(path).exists():
        raise FileNotFoundError(f"Input file not found: {path}")


def main(argv: list[str] | None = None) -> int:
    load_environment()
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)
    logger = get_logger()
    handler: Handler = args.handler

    try:
        return handler(args)
    except (FileNotFoundError, ValueError) as exc:
        logger.error(str(exc))
        return 1
    except Exception:  # pragma: no cover - safety net
        logger.exception("Unexpected error")
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
