from __future__ import annotations

import time
from concurrent.futures import Future

from presence_attendance.roster.loader import RosterLoader


class ManualExecutor:
    """Runs nothing until the test resolves the returned future."""

    def __init__(self):
        self.jobs: list[tuple[Future, tuple]] = []
        self.shutdown_called = False

    def submit(self, fn, *args):
        future = Future()
        self.jobs.append((future, (fn, args)))
        return future

    def run(self, index: int = -1) -> None:
        future, (fn, args) = self.jobs[index]
        try:
            future.set_result(fn(*args))
        except Exception as e:
            future.set_exception(e)

    def shutdown(self, wait=True, cancel_futures=False):
        self.shutdown_called = True


def test_snapshot_is_none_until_loaded(roster_repo):
    executor = ManualExecutor()
    loader = RosterLoader(lambda s, y: roster_repo.list_for_section(s, year_level=y), executor=executor)

    loader.request(5)
    assert loader.snapshot() is None

    executor.run()
    assert [e.user_id for e in loader.snapshot()] == [7, 8]
    assert loader.section_id == 5


def test_new_request_drops_previous_roster(roster_repo):
    executor = ManualExecutor()
    loader = RosterLoader(lambda s, y: roster_repo.list_for_section(s, year_level=y), executor=executor)
    loader.request(5)
    executor.run()

    loader.request(6, 2)

    assert loader.snapshot() is None
    executor.run()
    assert [e.user_id for e in loader.snapshot()] == [12]


def test_superseded_load_is_ignored(roster_repo):
    executor = ManualExecutor()
    loader = RosterLoader(lambda s, y: roster_repo.list_for_section(s, year_level=y), executor=executor)
    loader.request(5)
    loader.request(6)

    executor.run(0)
    assert loader.snapshot() is None

    executor.run(1)
    assert [e.section_id for e in loader.snapshot()] == [6]


def test_failed_load_keeps_snapshot_empty():
    executor = ManualExecutor()

    def fetch(section_id, year_level):
        raise RuntimeError("server unreachable")

    loader = RosterLoader(fetch, executor=executor)
    loader.request(5)
    executor.run()

    assert loader.snapshot() is None
    assert loader.error == "server unreachable"


def test_close_leaves_injected_executor_alone():
    executor = ManualExecutor()
    RosterLoader(lambda s, y: [], executor=executor).close()
    assert not executor.shutdown_called


def test_default_executor_loads_in_background(roster_repo):
    loader = RosterLoader(lambda s, y: roster_repo.list_for_section(s, year_level=y))
    try:
        loader.request(5).result(timeout=5)
        # done-callbacks may still be running on the worker thread
        for _ in range(100):
            if loader.snapshot() is not None:
                break
            time.sleep(0.01)
        assert len(loader.snapshot()) == 2
    finally:
        loader.close()


def test_cancelled_load_leaves_loader_empty_without_error(roster_repo):
    executor = ManualExecutor()
    loader = RosterLoader(lambda s, y: roster_repo.list_for_section(s, year_level=y), executor=executor)
    future = loader.request(5)

    assert future.cancel()

    assert loader.snapshot() is None
    assert loader.error is None
