import os
import threading
import time

import pytest

from hash_guesser.cracker.cracker_core import hexdigest_of
from hash_guesser.cracker.orchestrator import SearchOrchestrator, SearchTask
from hash_guesser.cracker.sinks import ProgressSink, StatusBoard
from hash_guesser.errors import CompileError, ConfigurationError
from hash_guesser.models.models import SearchMode, TaskStatus, WorkerState
from hash_guesser.pattern import compile_pattern

SHA256_ABC = hexdigest_of("abc", "SHA-256")
UNREACHABLE = hexdigest_of("not in any test pattern", "SHA-256")


class RecordingSink(ProgressSink):
    def __init__(self):
        self.lock = threading.Lock()
        self.started = []
        self.progress = []
        self.matches = []
        self.stops = []

    def on_worker_started(self, worker_id):
        with self.lock:
            self.started.append(worker_id)

    def on_progress(self, worker_id, last_candidate, recent_throughput, cumulative_count):
        with self.lock:
            self.progress.append((worker_id, last_candidate, cumulative_count))

    def on_match_found(self, worker_id, candidate):
        with self.lock:
            self.matches.append((worker_id, candidate))

    def on_worker_stopped(self, worker_id, matched):
        with self.lock:
            self.stops.append((worker_id, matched))

    @property
    def stopped(self):
        worker_ids = [worker_id for worker_id, _ in self.stops]
        assert sorted(worker_ids) == sorted(set(worker_ids)), f"worker stopped twice: {self.stops}"
        return dict(self.stops)


def run(task, sink, interval=0.0, timeout=30):
    orchestrator = SearchOrchestrator(task, sink, interval)
    orchestrator.start()
    assert orchestrator.wait(timeout)
    return orchestrator


def wait_until(condition, timeout=15.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return False


def test_lexicographic_search_finds_plaintext():
    sink = RecordingSink()
    task = SearchTask.create(SHA256_ABC, "[a-c]{3}", algorithm="SHA-256", workers=3)
    orchestrator = run(task, sink)

    result = orchestrator.result()
    assert result.found
    assert result.candidate == "abc"
    assert result.status is TaskStatus.FOUND
    assert sink.matches == [(result.worker_id, "abc")]
    assert sorted(sink.started) == [1, 2, 3]
    assert sink.stopped[result.worker_id] is True
    assert [m for w, m in sink.stopped.items() if w != result.worker_id] == [False, False]
    # the final progress report of the winner names the match
    assert (result.worker_id, "abc") in [(w, c) for w, c, _ in sink.progress]


def test_random_search_finds_plaintext():
    sink = RecordingSink()
    task = SearchTask.create(SHA256_ABC, "[a-c]{3}", workers=2, mode="random", seed=11)
    orchestrator = run(task, sink)

    assert orchestrator.result().candidate == "abc"
    assert len(sink.matches) == 1
    assert sorted(sink.stopped.values()) == [False, True]


def test_exhaustion_without_match():
    sink = RecordingSink()
    task = SearchTask.create(UNREACHABLE, "[a-c]{2}", workers=2)
    orchestrator = run(task, sink)

    assert orchestrator.status is TaskStatus.EXHAUSTED
    assert orchestrator.total_candidates == 9
    assert sink.matches == []
    assert sink.stopped == {1: False, 2: False}
    assert sorted(c for _, c, _ in sink.progress) == sorted(
        compile_pattern("[a-c]{2}").candidate_at(i) for i in range(9))


def test_more_workers_than_candidates():
    sink = RecordingSink()
    target = hexdigest_of("b", "MD5")
    task = SearchTask.create(target, "[ab]", algorithm="MD5", workers=4)
    orchestrator = run(task, sink)

    assert orchestrator.match == (2, "b")
    assert len(sink.stopped) == 4
    assert orchestrator.statuses[2].cumulative == 0
    assert orchestrator.statuses[3].cumulative == 0


def test_pause_and_resume_skip_nothing():
    pattern = compile_pattern("[a-z]{4}")
    sink = RecordingSink()
    task = SearchTask.create(UNREACHABLE, pattern, workers=1)
    orchestrator = SearchOrchestrator(task, sink, reporting_interval=0)
    orchestrator.start()

    assert wait_until(lambda: len(sink.progress) >= 10)
    orchestrator.pause_all()
    assert wait_until(lambda: orchestrator.statuses[0].state is WorkerState.PAUSED)
    assert orchestrator.status is TaskStatus.PAUSED
    # the paused worker produces nothing once its queued events are drained
    time.sleep(0.3)
    seen = len(sink.progress)
    time.sleep(0.2)
    assert len(sink.progress) == seen
    assert orchestrator.total_candidates == seen

    orchestrator.resume_all()
    assert wait_until(lambda: len(sink.progress) > seen + 10)
    orchestrator.stop_all()
    assert orchestrator.wait(15)
    candidates = [c for _, c, _ in sink.progress]
    assert candidates == [pattern.candidate_at(i) for i in range(len(candidates))]


def test_resume_wakes_every_worker():
    sink = RecordingSink()
    task = SearchTask.create(UNREACHABLE, "[a-z]{8}", workers=4, mode=SearchMode.RANDOM, seed=1)
    orchestrator = SearchOrchestrator(task, sink, reporting_interval=60)
    orchestrator.start()
    orchestrator.pause_all()
    orchestrator.pause_all()
    assert wait_until(lambda: all(s.state is WorkerState.PAUSED for s in orchestrator.statuses))

    counts = [s.cumulative for s in orchestrator.statuses]
    orchestrator.resume_all()
    orchestrator.resume_all()
    assert wait_until(lambda: all(s.cumulative > c for s, c in zip(orchestrator.statuses, counts)))

    orchestrator.stop_all()
    assert orchestrator.wait(15)


def test_stop_all_stops_every_worker_promptly():
    sink = RecordingSink()
    task = SearchTask.create(UNREACHABLE, "[a-z]{10}", workers=4, mode="random")
    orchestrator = SearchOrchestrator(task, sink)
    orchestrator.start()
    assert wait_until(lambda: orchestrator.total_candidates > 100)

    orchestrator.stop_all()
    orchestrator.stop_all()
    assert orchestrator.wait(15)
    assert orchestrator.status is TaskStatus.STOPPED
    assert sink.stopped == {1: False, 2: False, 3: False, 4: False}
    assert all(s.state is WorkerState.STOPPED for s in orchestrator.statuses)


def test_stop_while_paused():
    sink = RecordingSink()
    task = SearchTask.create(UNREACHABLE, "[a-z]{10}", workers=3)
    orchestrator = SearchOrchestrator(task, sink)
    orchestrator.start()
    orchestrator.pause_all()
    assert wait_until(lambda: all(s.state is WorkerState.PAUSED for s in orchestrator.statuses))

    orchestrator.stop_all()
    assert orchestrator.wait(15)
    assert orchestrator.status is TaskStatus.STOPPED
    assert len(sink.stopped) == 3


def test_reporting_interval_limits_reports():
    sink = RecordingSink()
    task = SearchTask.create(UNREACHABLE, "[a-c]{6}", workers=1)
    run(task, sink, interval=60)
    assert sink.progress == []


def test_set_reporting_interval():
    task = SearchTask.create(UNREACHABLE, "[a]", workers=1)
    orchestrator = SearchOrchestrator(task)
    orchestrator.set_reporting_interval(0.25)
    assert orchestrator.control.reporting_interval == 0.25
    with pytest.raises(ConfigurationError):
        orchestrator.set_reporting_interval(-1)


def test_start_twice_is_an_error():
    task = SearchTask.create(UNREACHABLE, "[a]", workers=1)
    orchestrator = SearchOrchestrator(task)
    assert orchestrator.status is TaskStatus.PENDING
    orchestrator.start()
    with pytest.raises(RuntimeError):
        orchestrator.start()
    assert orchestrator.wait(15)


def test_status_board_rows():
    board = StatusBoard()
    task = SearchTask.create(SHA256_ABC, "[a-c]{3}", workers=2)
    run(task, board)
    rows = board.snapshot()
    assert [row["worker_id"] for row in rows] == [1, 2]
    assert all(row["state"] == "stopped" for row in rows)
    assert [row["matched"] for row in rows] == [True, False]
    assert rows[0]["last_candidate"] == "abc"


@pytest.mark.parametrize("kwargs, error", [
    ({"target_hex": hexdigest_of("abc", "MD5"), "pattern": "abc", "algorithm": "SHA-256"},
     ConfigurationError),
    ({"target_hex": SHA256_ABC, "pattern": "abc", "algorithm": "ROT13"}, ConfigurationError),
    ({"target_hex": SHA256_ABC, "pattern": "abc", "workers": 0}, ConfigurationError),
    ({"target_hex": SHA256_ABC, "pattern": "abc", "mode": "sideways"}, ConfigurationError),
    ({"target_hex": SHA256_ABC, "pattern": "(abc"}, CompileError),
])
def test_task_construction_failures(kwargs, error):
    with pytest.raises(error):
        SearchTask.create(**kwargs)


def test_task_streams_split_the_space():
    task = SearchTask.create(SHA256_ABC, "[a-j]", workers=3)
    windows = [(s.start, s.stop) for s in task.streams()]
    assert windows == [(0, 4), (4, 7), (7, 10)]


def test_workers_run_in_their_own_processes():
    task = SearchTask.create(UNREACHABLE, "[a-c]{2}", workers=2)
    orchestrator = run(task, RecordingSink())
    pids = {worker.pid for worker in orchestrator._workers}
    assert len(pids) == 2
    assert os.getpid() not in pids
    assert all(worker.exitcode == 0 for worker in orchestrator._workers)


def test_failing_sink_does_not_stall_the_search():
    class FailingSink(RecordingSink):
        def on_progress(self, worker_id, last_candidate, recent_throughput, cumulative_count):
            raise RuntimeError("display went away")

    sink = FailingSink()
    task = SearchTask.create(SHA256_ABC, "[a-c]{3}", workers=2)
    orchestrator = run(task, sink)
    assert orchestrator.result().candidate == "abc"
    assert sink.stopped.keys() == {1, 2}


def test_result_is_consistent_with_status():
    task = SearchTask.create(SHA256_ABC, "[a-c]{3}", workers=2)
    orchestrator = SearchOrchestrator(task, RecordingSink(), reporting_interval=0)
    orchestrator.start()
    while True:
        result = orchestrator.result()
        assert result.found == (result.status is TaskStatus.FOUND)
        if orchestrator.wait(0.001):
            break
    assert orchestrator.result().status is TaskStatus.FOUND
