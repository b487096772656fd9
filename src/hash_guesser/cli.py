"""
Local command line for the hash guesser.

    hash-guesser search --hash <hex> --pattern "(Pass|pass)[0-9]{2}" --algorithm MD5
    hash-guesser digest "pass42" --algorithm MD5
    hash-guesser count "[a-z]{1,6}"
"""
from __future__ import annotations

import argparse
from logging import getLogger
from typing import Optional

from hash_guesser.config import (DEFAULT_ALGORITHM, DEFAULT_REPORTING_INTERVAL, DEFAULT_WORKERS,
                                 SEARCH_LOGGER, add_log_level_argument, log_level_value, setup_logger)
from hash_guesser.cracker.cracker_core import hexdigest_of
from hash_guesser.cracker.orchestrator import SearchOrchestrator, SearchTask
from hash_guesser.cracker.sinks import LoggingProgressSink
from hash_guesser.errors import CompileError, ConfigurationError
from hash_guesser.models.models import SearchMode
from hash_guesser.pattern import compile_pattern

logger = getLogger(SEARCH_LOGGER)

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_BAD_INPUT = 2

WAIT_POLL_SECONDS = 0.5


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Hash Guesser")
    add_log_level_argument(parser)
    parser.add_argument("--log-file", default=None,
                        help="Also write logs to this file under logs/")
    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Search for a plaintext")
    search.add_argument("--hash", required=True, help="Target digest in hex")
    search.add_argument("--pattern", required=True, help="Candidate pattern")
    search.add_argument("--algorithm", default=DEFAULT_ALGORITHM)
    search.add_argument("--workers", type=int, default=DEFAULT_WORKERS)
    search.add_argument("--random", action="store_true",
                        help="Draw random candidates instead of enumerating")
    search.add_argument("--seed", type=int, default=None)
    search.add_argument("--interval", type=float, default=DEFAULT_REPORTING_INTERVAL,
                        help="Seconds between progress reports (0 = every candidate)")
    search.add_argument("--extra-symbols", default="",
                        help="Extra characters allowed inside [...] classes")

    digest = commands.add_parser("digest", help="Print the digest of each text")
    digest.add_argument("texts", nargs="+")
    digest.add_argument("--algorithm", default=DEFAULT_ALGORITHM)

    count = commands.add_parser("count", help="Print the size of a pattern's candidate space")
    count.add_argument("pattern")
    count.add_argument("--extra-symbols", default="")
    count.add_argument("--show", type=int, default=0,
                       help="Also print the first N candidates")

    return parser


def run_search(args: argparse.Namespace) -> int:
    task = SearchTask.create(
        args.hash, args.pattern,
        algorithm=args.algorithm,
        workers=args.workers,
        mode=SearchMode.RANDOM if args.random else SearchMode.LEXICOGRAPHIC,
        seed=args.seed,
        extra_symbols=args.extra_symbols,
    )
    orchestrator = SearchOrchestrator(task, LoggingProgressSink(), args.interval)
    orchestrator.start()
    try:
        while not orchestrator.wait(WAIT_POLL_SECONDS):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping workers")
        orchestrator.stop_all()
        orchestrator.wait()

    result = orchestrator.result()
    if result.found:
        print(f"Plaintext found! {result.candidate}")
        return EXIT_FOUND
    logger.info(f"No plaintext found ({result.status.value}) after {result.total_candidates:,} candidates")
    return EXIT_NOT_FOUND


def run_digest(args: argparse.Namespace) -> int:
    for text in args.texts:
        print(f"{text} -> {hexdigest_of(text, args.algorithm)}")
    return EXIT_FOUND


def run_count(args: argparse.Namespace) -> int:
    pattern = compile_pattern(args.pattern, args.extra_symbols)
    print(pattern.space_size)
    for offset in range(min(args.show, pattern.space_size)):
        print(pattern.candidate_at(offset))
    return EXIT_FOUND


COMMANDS = {
    "search": run_search,
    "digest": run_digest,
    "count": run_count,
}


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(SEARCH_LOGGER, log_level=log_level_value(args.log_level), log_file=args.log_file)
    try:
        return COMMANDS[args.command](args)
    except (CompileError, ConfigurationError) as e:
        logger.error(str(e))
        return EXIT_BAD_INPUT


if __name__ == "__main__":
    raise SystemExit(main())
