"""Tests for WorkspaceObserver batching and coalescing."""

import asyncio

import pytest

from conftest import make_report
from testcases import WorkspaceChange, WorkspaceObserver


@pytest.fixture
def batches():
    return []


@pytest.fixture
def observer(batches):
    return WorkspaceObserver(batches.append, debounce=0.01)


def test_flush_delivers_one_batch(observer, batches):
    observer.file_created("/p/a.ts")
    observer.file_changed("/p/b.ts")
    observer.file_deleted("/p/c.ts")

    observer.flush()

    assert batches == [WorkspaceChange(created={"/p/a.ts"}, changed={"/p/b.ts"}, deleted={"/p/c.ts"})]
    assert observer.pending.is_empty()


def test_empty_batch_is_not_delivered(observer, batches):
    observer.flush()

    assert batches == []


def test_delete_cancels_create_and_change(observer, batches):
    observer.file_created("/p/a.ts")
    observer.file_changed("/p/b.ts")
    observer.file_deleted("/p/a.ts")
    observer.file_deleted("/p/b.ts")

    observer.flush()

    assert batches[0].created == set()
    assert batches[0].changed == set()
    assert batches[0].deleted == {"/p/a.ts", "/p/b.ts"}


def test_create_cancels_delete(observer, batches):
    observer.file_deleted("/p/a.ts")
    observer.file_created("/p/a.ts")

    observer.flush()

    assert batches[0].created == {"/p/a.ts"}
    assert batches[0].deleted == set()


def test_change_after_create_is_dropped(observer, batches):
    observer.file_created("/p/a.ts")
    observer.file_changed("/p/a.ts")

    observer.flush()

    assert batches[0].changed == set()


@pytest.mark.asyncio
async def test_debounce_coalesces_burst(observer, batches):
    observer.file_changed("/p/a.ts")
    observer.file_changed("/p/b.ts")
    await asyncio.sleep(0.005)
    observer.file_changed("/p/c.ts")

    await asyncio.sleep(0.05)

    assert len(batches) == 1
    assert batches[0].changed == {"/p/a.ts", "/p/b.ts", "/p/c.ts"}


@pytest.mark.asyncio
async def test_dispose_cancels_pending_delivery(observer, batches):
    observer.file_changed("/p/a.ts")
    observer.dispose()

    await asyncio.sleep(0.05)

    assert batches == []


@pytest.mark.asyncio
async def test_feeds_model(model, runner, notifications):
    runner.report = make_report(("chromium", "/proj/tests", ["/proj/tests/a.spec.ts"]))
    model.list_files()
    observer = WorkspaceObserver(model.workspace_changed, debounce=0.01)
    runner.report = make_report(
        ("chromium", "/proj/tests", ["/proj/tests/a.spec.ts", "/proj/tests/b.spec.ts"])
    )

    observer.file_created("/proj/tests/b.spec.ts")
    await asyncio.sleep(0.05)

    assert model.all_files == {"/proj/tests/a.spec.ts", "/proj/tests/b.spec.ts"}
    assert len(notifications) == 2
