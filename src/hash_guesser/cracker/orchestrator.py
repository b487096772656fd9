"""
Search orchestrator: builds a task, runs one worker process per stream and
exposes the task-wide controls.
"""
from __future__ import annotations

import multiprocessing
import queue
import threading
import time
from dataclasses import dataclass
from logging import getLogger
from typing import Optional, Union

from hash_guesser.config import (DEFAULT_ALGORITHM, DEFAULT_MODE, DEFAULT_REPORTING_INTERVAL,
                                 DEFAULT_WORKERS, EVENT_POLL_SECONDS, SEARCH_LOGGER,
                                 WORKER_START_METHOD)
from hash_guesser.cracker.control import SearchControl
from hash_guesser.cracker.cracker_core import parse_target, resolve_algorithm
from hash_guesser.cracker.sinks import ProgressSink
from hash_guesser.cracker.worker import SearchWorker
from hash_guesser.errors import ConfigurationError
from hash_guesser.models.models import SearchMode, TaskStatus, WorkerEvent, WorkerState, WorkerStatus
from hash_guesser.pattern import Pattern, compile_pattern
from hash_guesser.streams import CandidateStream, create_stream
from hash_guesser.utils.range_utils import split_range

logger = getLogger(SEARCH_LOGGER)


@dataclass(frozen=True)
class SearchTask:
    """Everything a search needs, validated up front.

    target:    Raw digest being searched for.
    algorithm: Canonical algorithm name (e.g. "SHA-256").
    pattern:   Compiled candidate pattern.
    workers:   Number of worker processes.
    mode:      Candidate generation mode.
    seed:      Base seed for random mode; worker i uses seed + i - 1.
    """
    target: bytes
    algorithm: str
    pattern: Pattern
    workers: int
    mode: SearchMode = SearchMode.LEXICOGRAPHIC
    seed: Optional[int] = None

    @classmethod
    def create(cls, target_hex: str, pattern: Union[str, Pattern],
               algorithm: str = DEFAULT_ALGORITHM, workers: int = DEFAULT_WORKERS,
               mode: Union[str, SearchMode] = DEFAULT_MODE, seed: Optional[int] = None,
               extra_symbols: str = "") -> "SearchTask":
        """Validate the inputs and build a task.

        Raises:
            ConfigurationError: Unsupported algorithm, bad target digest,
                                worker count below one or unknown mode.
            CompileError:       Malformed pattern.
        """
        canonical = resolve_algorithm(algorithm)
        target = parse_target(target_hex, canonical)
        if workers < 1:
            raise ConfigurationError(f"worker count must be at least 1, got {workers}")
        try:
            search_mode = SearchMode(mode)
        except ValueError:
            raise ConfigurationError(
                f"unknown generation mode {mode!r}; expected one of "
                f"{[m.value for m in SearchMode]}") from None
        if isinstance(pattern, str):
            pattern = compile_pattern(pattern, extra_symbols)
        return cls(target=target, algorithm=canonical, pattern=pattern,
                   workers=workers, mode=search_mode, seed=seed)

    def streams(self) -> list[CandidateStream]:
        """One private stream per worker.

        Lexicographic workers get contiguous slices of the candidate space;
        random workers get independently seeded streams.
        """
        if self.mode is SearchMode.LEXICOGRAPHIC:
            slices = split_range(0, self.pattern.space_size - 1, self.workers)
            return [create_stream(self.mode.value, self.pattern, start=start, stop=end + 1)
                    for start, end in slices]
        return [create_stream(self.mode.value, self.pattern,
                              seed=None if self.seed is None else self.seed + i)
                for i in range(self.workers)]


@dataclass(frozen=True)
class SearchResult:
    status: TaskStatus
    candidate: Optional[str]
    worker_id: Optional[int]
    total_candidates: int

    @property
    def found(self) -> bool:
        return self.candidate is not None


class SearchOrchestrator:
    """Run a SearchTask's worker processes and expose task-wide controls.

    Workers send their events over one queue. A thread in this process
    drains it and calls the sink, so sink callbacks never run concurrently
    with each other. Every control method is idempotent and may be called
    from any thread while the search runs.
    """

    def __init__(self, task: SearchTask, sink: Optional[ProgressSink] = None,
                 reporting_interval: Optional[float] = DEFAULT_REPORTING_INTERVAL) -> None:
        self.task = task
        self.sink = sink or ProgressSink()
        self._context = multiprocessing.get_context(WORKER_START_METHOD)
        self.control = SearchControl(reporting_interval, self._context)
        self._events = self._context.Queue()
        self._counts = self._context.RawArray("q", task.workers)
        self._claimed = self._context.Value("i", 0)
        self._statuses = [WorkerStatus(worker_id) for worker_id in range(1, task.workers + 1)]
        self._workers: list[SearchWorker] = []
        self._pump: Optional[threading.Thread] = None
        self._finished = threading.Event()
        self._winner: Optional[tuple[int, str]] = None
        self._started = False

    def start(self) -> None:
        if self._started:
            raise RuntimeError("search has already been started")
        self._started = True

        self._workers = [
            SearchWorker(worker_id, stream, self.task.target, self.task.algorithm,
                         self.control, self._events, self._counts, self._claimed)
            for worker_id, stream in enumerate(self.task.streams(), start=1)
        ]
        logger.info(
            f"Starting {len(self._workers)} {self.task.mode.value} workers: "
            f"{self.task.algorithm} target={self.task.target.hex()[:8]}… "
            f"space={self.task.pattern.space_size:,}")
        for worker in self._workers:
            worker.start()
        self._pump = threading.Thread(target=self._pump_events, name="search-events", daemon=True)
        self._pump.start()

    # -- worker events --------------------------------------------------------

    def _pump_events(self) -> None:
        running = {worker.worker_id for worker in self._workers}
        dead: set[int] = set()
        next_check = time.monotonic() + EVENT_POLL_SECONDS

        while running:
            try:
                kind, worker_id, *payload = self._events.get(timeout=EVENT_POLL_SECONDS)
            except queue.Empty:
                pass
            else:
                if kind is WorkerEvent.STOPPED:
                    if worker_id not in running:
                        continue
                    running.discard(worker_id)
                self._dispatch(kind, worker_id, payload)

            if time.monotonic() >= next_check:
                dead = self._reap_dead_workers(running, dead)
                next_check = time.monotonic() + EVENT_POLL_SECONDS

        for worker in self._workers:
            worker.join()
        logger.info(f"All workers stopped after {self.total_candidates:,} candidates")
        self._finished.set()

    def _reap_dead_workers(self, running: set[int], dead: set[int]) -> set[int]:
        """Give up on workers that died without a STOPPED event.

        A clean exit always sends STOPPED first, so only workers with a
        non-zero exit code are candidates. They are given up on when already
        dead at the previous check, so the events they sent get drained first.
        """
        now_dead = {worker.worker_id for worker in self._workers
                    if worker.worker_id in running and worker.exitcode not in (None, 0)}
        for worker_id in now_dead & dead:
            logger.error(f"[worker {worker_id}] - exited with code "
                         f"{self._workers[worker_id - 1].exitcode} without reporting")
            running.discard(worker_id)
            self._dispatch(WorkerEvent.STOPPED, worker_id,
                           [False, self._counts[worker_id - 1], False])
        return now_dead - dead

    def _dispatch(self, kind: WorkerEvent, worker_id: int, payload: list) -> None:
        status = self._statuses[worker_id - 1]
        try:
            if kind is WorkerEvent.STARTED:
                self.sink.on_worker_started(worker_id)
            elif kind is WorkerEvent.STATE:
                status.state = payload[0]
            elif kind is WorkerEvent.PROGRESS:
                last_candidate, throughput, cumulative = payload
                status.last_candidate = last_candidate
                self.sink.on_progress(worker_id, last_candidate, throughput, cumulative)
            elif kind is WorkerEvent.MATCH:
                status.matched = True
                self._winner = (worker_id, payload[0])
                self.sink.on_match_found(worker_id, payload[0])
            elif kind is WorkerEvent.ERROR:
                logger.error(f"[worker {worker_id}] - crashed: {payload[0]}")
            elif kind is WorkerEvent.STOPPED:
                matched, cumulative, exhausted = payload
                if exhausted:
                    logger.info(f"[worker {worker_id}] - candidates exhausted after {cumulative:,}")
                status.state = WorkerState.STOPPED
                self.sink.on_worker_stopped(worker_id, matched)
        except Exception as e:
            logger.error(f"[worker {worker_id}] - sink failed on {kind.value} event", exc_info=e)

    # -- control surface ------------------------------------------------------

    def pause_all(self) -> None:
        if self.control.pause():
            logger.info("Search paused")

    def resume_all(self) -> None:
        if self.control.resume():
            logger.info("Search resumed")

    def stop_all(self) -> None:
        if self.control.stop():
            logger.info("Search stop requested")

    def set_reporting_interval(self, seconds: Optional[float]) -> None:
        self.control.reporting_interval = seconds
        logger.info(f"Reporting interval set to {seconds}")

    # -- observation ----------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._started and not self._finished.is_set()

    @property
    def statuses(self) -> list[WorkerStatus]:
        for status in self._statuses:
            status.cumulative = self._counts[status.worker_id - 1]
        return list(self._statuses)

    @property
    def total_candidates(self) -> int:
        return sum(self._counts)

    @property
    def match(self) -> Optional[tuple[int, str]]:
        return self._winner

    @property
    def status(self) -> TaskStatus:
        return self.result().status

    def _status_for(self, winner: Optional[tuple[int, str]], finished: bool) -> TaskStatus:
        if winner is not None:
            return TaskStatus.FOUND
        if not self._started:
            return TaskStatus.PENDING
        if not finished:
            if self._claimed.value:
                # the winner's MATCH event has not been drained yet
                return TaskStatus.RUNNING
            if self.control.stopped:
                return TaskStatus.STOPPED
            return TaskStatus.PAUSED if self.control.paused else TaskStatus.RUNNING
        return TaskStatus.STOPPED if self.control.stopped else TaskStatus.EXHAUSTED

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every worker stopped. Returns False on timeout."""
        if not self._started:
            return True
        return self._finished.wait(timeout)

    def result(self) -> SearchResult:
        """A consistent snapshot: ``found`` holds exactly when the status is FOUND."""
        finished = self._finished.is_set()
        winner = self._winner
        worker_id, candidate = winner if winner is not None else (None, None)
        return SearchResult(status=self._status_for(winner, finished), candidate=candidate,
                            worker_id=worker_id, total_candidates=self.total_candidates)
