"""
Command line client for a running search server.

    hash-guesser-ctl start --hash <hex> --pattern "[a-z]{1,5}" --workers 4
    hash-guesser-ctl status
    hash-guesser-ctl pause | resume | stop
    hash-guesser-ctl interval 0.5
"""
from __future__ import annotations

import argparse
import json
from logging import getLogger
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from hash_guesser.config import (CLIENT_LOGGER, DEFAULT_ALGORITHM, DEFAULT_REPORTING_INTERVAL,
                                 DEFAULT_WORKERS, REQUEST_TIMEOUT, SEARCH_SERVER_URL,
                                 add_log_level_argument, log_level_value, setup_logger)
from hash_guesser.models.models import SearchMode
from hash_guesser.models.schemas.request import ReportingIntervalRequest, StartSearchRequest

logger = getLogger(CLIENT_LOGGER)


class SearchClient:
    """Thin httpx wrapper around the search server's routes."""

    def __init__(self, base_url: str = SEARCH_SERVER_URL,
                 transport: Optional[httpx.BaseTransport] = None,
                 timeout: float = REQUEST_TIMEOUT) -> None:
        self._client = httpx.Client(base_url=base_url, transport=transport, timeout=timeout)

    def __enter__(self) -> "SearchClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, url: str, payload: Optional[dict] = None) -> dict:
        logger.debug(f"{method} {url} {payload or ''}")
        response = self._client.request(method, url, json=payload)
        response.raise_for_status()
        return response.json()

    def start(self, request: StartSearchRequest) -> dict:
        return self._request("POST", "/search", request.model_dump(mode="json"))

    def pause(self) -> dict:
        return self._request("POST", "/search/pause")

    def resume(self) -> dict:
        return self._request("POST", "/search/resume")

    def stop(self) -> dict:
        return self._request("POST", "/search/stop")

    def set_reporting_interval(self, seconds: Optional[float]) -> dict:
        payload = ReportingIntervalRequest(seconds=seconds)
        return self._request("PUT", "/search/reporting-interval", payload.model_dump())

    def status(self) -> dict:
        return self._request("GET", "/search/status")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Hash Guesser Search Client")
    add_log_level_argument(parser)
    parser.add_argument("--server", default=SEARCH_SERVER_URL,
                        help="Base URL of the search server")
    commands = parser.add_subparsers(dest="command", required=True)

    start = commands.add_parser("start", help="Start a new search")
    start.add_argument("--hash", required=True, help="Target digest in hex")
    start.add_argument("--pattern", required=True, help="Candidate pattern")
    start.add_argument("--algorithm", default=DEFAULT_ALGORITHM)
    start.add_argument("--workers", type=int, default=DEFAULT_WORKERS)
    start.add_argument("--random", action="store_true",
                       help="Draw random candidates instead of enumerating")
    start.add_argument("--seed", type=int, default=None)
    start.add_argument("--interval", type=float, default=DEFAULT_REPORTING_INTERVAL,
                       help="Seconds between progress reports")
    start.add_argument("--extra-symbols", default="",
                       help="Extra characters allowed inside [...] classes")

    for name in ("pause", "resume", "stop", "status"):
        commands.add_parser(name, help=f"{name.capitalize()} the current search")

    interval = commands.add_parser("interval", help="Change the reporting interval")
    interval.add_argument("seconds", type=float)

    return parser


def run_command(client: SearchClient, args: argparse.Namespace) -> dict:
    if args.command == "start":
        request = StartSearchRequest(
            hash=args.hash,
            pattern=args.pattern,
            algorithm=args.algorithm,
            workers=args.workers,
            mode=SearchMode.RANDOM if args.random else SearchMode.LEXICOGRAPHIC,
            seed=args.seed,
            reporting_interval=args.interval,
            extra_symbols=args.extra_symbols,
        )
        return client.start(request)
    if args.command == "interval":
        return client.set_reporting_interval(args.seconds)
    return getattr(client, args.command)()


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(CLIENT_LOGGER, log_level=log_level_value(args.log_level))

    try:
        with SearchClient(args.server) as client:
            result = run_command(client, args)
    except ValidationError as e:
        logger.error(f"Invalid request: {e}")
        return 2
    except httpx.HTTPStatusError as e:
        try:
            detail = e.response.json().get("detail", e.response.text)
        except ValueError:
            detail = e.response.text
        logger.error(f"Server rejected {args.command}: {e.response.status_code} {detail}")
        return 1
    except httpx.RequestError as e:
        logger.error(f"Cannot reach search server at {args.server}: {e}")
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
