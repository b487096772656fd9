"""
Search server for the hash guesser.

Runs one search at a time and exposes its controls over HTTP.
"""

import threading
from contextlib import asynccontextmanager
from logging import getLogger
from typing import AsyncIterator, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import RedirectResponse

from hash_guesser.config import SEARCH_LOGGER, SEARCH_SERVER_LOGGER, parse_server_args, setup_logger
from hash_guesser.cracker.cracker_core import ALGORITHMS, digest_size
from hash_guesser.cracker.orchestrator import SearchOrchestrator, SearchTask
from hash_guesser.cracker.sinks import StatusBoard
from hash_guesser.errors import CompileError, ConfigurationError
from hash_guesser.models.models import TaskStatus
from hash_guesser.models.schemas.request import ReportingIntervalRequest, StartSearchRequest
from hash_guesser.models.schemas.response import (AlgorithmInfo, ControlResponse, SearchStatusResponse,
                                                  StartSearchResponse, WorkerRow)

logger = getLogger(SEARCH_SERVER_LOGGER)

STATUS_LINES = {
    TaskStatus.PENDING: "Idle",
    TaskStatus.RUNNING: "Searching...",
    TaskStatus.PAUSED: "Paused",
    TaskStatus.EXHAUSTED: "Search exhausted, no plaintext found",
    TaskStatus.STOPPED: "Stopped",
}


class SearchSession:
    """The current (or last) search and its status board."""

    def __init__(self) -> None:
        self.orchestrator: Optional[SearchOrchestrator] = None
        self.board: Optional[StatusBoard] = None
        # held while a search is checked for, created and started
        self.lock = threading.Lock()

    def require(self) -> SearchOrchestrator:
        if self.orchestrator is None:
            raise HTTPException(status_code=404, detail="No search has been started")
        return self.orchestrator

    def shutdown(self) -> None:
        with self.lock:
            if self.orchestrator is not None and self.orchestrator.active:
                self.orchestrator.stop_all()
                self.orchestrator.wait(timeout=5)


def create_app(session: Optional[SearchSession] = None) -> FastAPI:
    """Build the FastAPI application around ``session``."""
    session = session or SearchSession()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Lifespan events for the application."""
        logger.info("Search server is starting")
        yield
        session.shutdown()
        logger.info("Shutting down search server")

    app = FastAPI(title="Hash Guesser Search Server", lifespan=lifespan)
    app.state.session = session

    @app.get("/")
    async def root() -> RedirectResponse:
        """Redirect to the docs."""
        return RedirectResponse(url="/docs")

    @app.get("/health")
    async def health() -> Dict[str, str]:
        """Health check."""
        return {"status": "active"}

    @app.get("/algorithms", response_model=List[AlgorithmInfo])
    async def algorithms() -> List[AlgorithmInfo]:
        """List the supported hash algorithms."""
        return [AlgorithmInfo(name=name, digest_size=digest_size(name)) for name in ALGORITHMS]

    @app.post("/search", response_model=StartSearchResponse)
    def start_search(req: StartSearchRequest) -> StartSearchResponse:
        """Compile the pattern and start a new search."""
        with session.lock:
            if session.orchestrator is not None and session.orchestrator.active:
                raise HTTPException(status_code=409, detail="A search is already running")

            try:
                task = SearchTask.create(
                    req.hash, req.pattern,
                    algorithm=req.algorithm,
                    workers=req.workers,
                    mode=req.mode,
                    seed=req.seed,
                    extra_symbols=req.extra_symbols,
                )
            except (CompileError, ConfigurationError) as e:
                logger.error(f"Rejected search: {e}")
                raise HTTPException(status_code=400, detail=str(e))

            board = StatusBoard()
            orchestrator = SearchOrchestrator(task, board, req.reporting_interval)
            session.orchestrator, session.board = orchestrator, board
            orchestrator.start()

        logger.info(f"Search started: pattern={req.pattern!r} workers={task.workers}")
        return StartSearchResponse(status=orchestrator.status, workers=task.workers,
                                   space_size=str(task.pattern.space_size))

    @app.post("/search/pause", response_model=ControlResponse)
    def pause_search() -> ControlResponse:
        orchestrator = session.require()
        orchestrator.pause_all()
        return ControlResponse(status=orchestrator.status)

    @app.post("/search/resume", response_model=ControlResponse)
    def resume_search() -> ControlResponse:
        orchestrator = session.require()
        orchestrator.resume_all()
        return ControlResponse(status=orchestrator.status)

    @app.post("/search/stop", response_model=ControlResponse)
    def stop_search() -> ControlResponse:
        orchestrator = session.require()
        orchestrator.stop_all()
        return ControlResponse(status=orchestrator.status)

    @app.put("/search/reporting-interval", response_model=ControlResponse)
    def set_reporting_interval(req: ReportingIntervalRequest) -> ControlResponse:
        orchestrator = session.require()
        orchestrator.set_reporting_interval(req.seconds)
        return ControlResponse(status=orchestrator.status)

    @app.get("/search/status", response_model=SearchStatusResponse)
    def search_status() -> SearchStatusResponse:
        """Return the task status and one row per worker."""
        orchestrator = session.require()
        result = orchestrator.result()
        board_rows = {row["worker_id"]: row for row in session.board.snapshot()}
        rows = []
        for worker_status in orchestrator.statuses:
            board_row = board_rows.get(worker_status.worker_id, {})
            rows.append(WorkerRow(
                worker_id=worker_status.worker_id,
                last_candidate=board_row.get("last_candidate") or "",
                rate=board_row.get("rate", 0.0),
                total=worker_status.cumulative,
                state=worker_status.state.value,
                matched=worker_status.matched,
            ))

        return SearchStatusResponse(
            status=result.status,
            status_line=f"Plaintext found! {result.candidate}" if result.found else STATUS_LINES[result.status],
            algorithm=orchestrator.task.algorithm,
            mode=orchestrator.task.mode.value,
            space_size=str(orchestrator.task.pattern.space_size),
            total_candidates=result.total_candidates,
            plaintext=result.candidate,
            workers=rows,
        )

    return app


app = create_app()


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_server_args(argv)
    setup_logger(SEARCH_SERVER_LOGGER, log_level=args.log_level, log_file=args.log_file)
    setup_logger(SEARCH_LOGGER, log_level=args.log_level, log_file=args.log_file)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
