import csv
import json
import threading
from datetime import timedelta

import pytest

from link_checker.crawler.models import CrawlOutcome, CrawlRun
from link_checker.exceptions import PersistenceError
from link_checker.report import EMPTY_REPORT, ResultPersister
from link_checker.report import atomic
from link_checker.reporter import aggregate_outcomes


@pytest.fixture()
def finished_run() -> CrawlRun:
    run = CrawlRun(base_url="http://example.test/")
    run.finish()
    return run


def test_persist_writes_report_csv_and_run(tmp_path, sample_outcomes, finished_run):
    persister = ResultPersister(tmp_path)
    report = aggregate_outcomes(sample_outcomes)

    json_path, csv_path = persister.persist(report, finished_run)

    assert json.loads(json_path.read_text(encoding="utf-8")) == report.to_dict()
    with csv_path.open(encoding="utf-8", newline="") as fh:
        rows = list(csv.reader(fh))
    assert rows[0] == ["Found on", "URL"]
    assert sorted(rows[1:]) == [
        ["http://example.test/", "http://example.test/missing"],
        ["http://example.test/", "http://example.test/slow"],
    ]

    loaded = persister.load_run()
    assert loaded is not None
    assert loaded.base_url == "http://example.test/"
    assert loaded.completed_at == finished_run.completed_at
    assert not loaded.is_stale(timedelta(hours=1))


def test_load_report_before_any_run(tmp_path):
    persister = ResultPersister(tmp_path / "never-written")
    assert persister.load_report() == EMPTY_REPORT == "{}"
    assert persister.load_run() is None


def test_persist_overwrites_previous_run_without_leftovers(tmp_path, sample_outcomes, finished_run):
    persister = ResultPersister(tmp_path)
    persister.persist(aggregate_outcomes(sample_outcomes), finished_run)
    persister.persist(aggregate_outcomes(sample_outcomes[:2]), finished_run)

    assert json.loads(persister.load_report()) == aggregate_outcomes(sample_outcomes[:2]).to_dict()
    assert persister.csv_path.read_text(encoding="utf-8") == "Found on,URL\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == sorted(
        [persister.json_path.name, persister.csv_path.name, persister.run_path.name]
    )


def test_reader_never_sees_partial_report(tmp_path, finished_run):
    persister = ResultPersister(tmp_path)
    old = aggregate_outcomes(
        [CrawlOutcome(url=f"http://example.test/old{i}", found_on_url=None, status_code=404) for i in range(300)]
    )
    new = aggregate_outcomes(
        [CrawlOutcome(url=f"http://example.test/new{i}", found_on_url=None, status_code=200) for i in range(300)]
    )
    persister.persist(old, finished_run)
    expected = (old.to_dict(), new.to_dict())

    stop = threading.Event()
    seen = []

    def reader():
        while not stop.is_set():
            seen.append(json.loads(persister.load_report()))

    thread = threading.Thread(target=reader)
    thread.start()
    try:
        for i in range(30):
            persister.persist(new if i % 2 == 0 else old, finished_run)
    finally:
        stop.set()
        thread.join()

    assert seen
    assert all(data in expected for data in seen)


def test_persist_failure_raises_persistence_error(tmp_path, sample_outcomes, finished_run):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    persister = ResultPersister(blocker)

    with pytest.raises(PersistenceError) as excinfo:
        persister.persist(aggregate_outcomes(sample_outcomes), finished_run)
    assert isinstance(excinfo.value, OSError)



def test_failed_rename_restores_previous_files(tmp_path, sample_outcomes, monkeypatch):
    persister = ResultPersister(tmp_path)
    first_run = CrawlRun(base_url="http://example.test/")
    first_run.finish()
    persister.persist(aggregate_outcomes(sample_outcomes), first_run)
    before = {p.name: p.read_bytes() for p in tmp_path.iterdir()}

    real_replace = atomic.os.replace
    calls = []

    def replace_failing_on_csv(src, dst):
        calls.append(dst)
        if len(calls) == 2:
            raise OSError(28, "No space left on device")
        return real_replace(src, dst)

    monkeypatch.setattr(atomic.os, "replace", replace_failing_on_csv)
    second_run = CrawlRun(base_url="http://other.test/")
    second_run.finish()

    with pytest.raises(PersistenceError):
        persister.persist(aggregate_outcomes(sample_outcomes[:2]), second_run)

    after = {p.name: p.read_bytes() for p in tmp_path.iterdir()}
    assert after == before
    assert persister.load_run().base_url == "http://example.test/"


def test_failed_first_persist_leaves_nothing_behind(tmp_path, sample_outcomes, finished_run, monkeypatch):
    persister = ResultPersister(tmp_path)
    real_replace = atomic.os.replace
    calls = []

    def replace_failing_on_run(src, dst):
        calls.append(dst)
        if len(calls) == 3:
            raise OSError("read-only file system")
        return real_replace(src, dst)

    monkeypatch.setattr(atomic.os, "replace", replace_failing_on_run)

    with pytest.raises(PersistenceError):
        persister.persist(aggregate_outcomes(sample_outcomes), finished_run)

    assert list(tmp_path.iterdir()) == []
    assert persister.load_report() == EMPTY_REPORT
