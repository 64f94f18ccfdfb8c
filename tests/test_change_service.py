"""Test module for change detection and the save flow."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping

import pytest

from language_improver_py.core.change_service import (
    SaveFlowService,
    compute_changes,
    run_save,
    run_save_async,
)
from language_improver_py.core.session import (
    EditingSession,
    SaveInProgressError,
    SessionState,
    open_session,
)
from language_improver_py.core.store import LayeredStore
from language_improver_py.core.values import ConditionSet, PlainText, TranslationValue


def _session(store: LayeredStore) -> EditingSession:
    session = open_session(store, default_language="en", target_language="vi")
    assert session is not None
    return session


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, TranslationValue]]] = []

    def __call__(self, code: str, changes: Mapping[str, TranslationValue]) -> None:
        self.calls.append((code, dict(changes)))


def test_compute_changes_is_empty_for_untouched_session(store: LayeredStore) -> None:
    """Verify an unedited session has no changes."""
    assert compute_changes(_session(store)) == {}


def test_compute_changes_ignores_edits_reverted_to_original(
    store: LayeredStore,
) -> None:
    """Verify values set back to their original do not count as changes."""
    session = _session(store)
    session.set_value("hello", PlainText("A"))
    session.set_value("hello", PlainText("Chao ban"))
    session.set_value(
        "apples",
        ConditionSet("count", {"_": "@{count} qua tao", "0": "Khong co tao"}),
    )
    assert compute_changes(session) == {}


def test_compute_changes_counts_variant_change(store: LayeredStore) -> None:
    """Verify text converted to conditions counts as changed."""
    session = _session(store)
    session.set_value("hello", ConditionSet("count", {"_": "Chao ban"}))
    assert compute_changes(session) == {
        "hello": ConditionSet("count", {"_": "Chao ban"})
    }


def test_compute_changes_returns_only_changed_entries(store: LayeredStore) -> None:
    """Verify only differing entries are returned, as detached copies."""
    session = _session(store)
    entry = session.entries["apples"]
    assert isinstance(entry.current, ConditionSet)
    entry.current.conditions["1"] = "Mot qua tao"
    changes = compute_changes(session)
    assert set(changes) == {"apples"}
    assert changes["apples"] is not entry.current


def test_run_save_reports_no_changes_without_calling_persist(
    store: LayeredStore,
) -> None:
    """Verify persist is not invoked when nothing changed."""
    session = _session(store)
    persist = _Recorder()
    outcome = run_save(session, persist)
    assert outcome.status == "no_changes"
    assert outcome.message == "No changes to save"
    assert persist.calls == []
    assert session.state is SessionState.EDITING


def test_run_save_persists_diff_once_and_commits(store: LayeredStore) -> None:
    """Verify persist receives the target language and exactly the diff."""
    session = _session(store)
    session.set_value("hello", PlainText("Xin chao"))
    persist = _Recorder()
    outcome = run_save(session, persist)
    assert persist.calls == [("vi", {"hello": PlainText("Xin chao")})]
    assert outcome.status == "saved"
    assert outcome.count == 1
    assert outcome.message == "1 translation saved successfully"
    assert session.state is SessionState.COMMITTED


def test_run_save_failure_keeps_edits(store: LayeredStore) -> None:
    """Verify a failing persist propagates and leaves the session editable."""
    session = _session(store)
    session.set_value("hello", PlainText("Xin chao"))

    def _persist(code: str, changes: Mapping[str, TranslationValue]) -> None:
        raise OSError("disk full")

    with pytest.raises(OSError, match="disk full"):
        run_save(session, _persist)
    assert session.state is SessionState.EDITING
    assert compute_changes(session) == {"hello": PlainText("Xin chao")}

    persist = _Recorder()
    assert run_save(session, persist).status == "saved"
    assert len(persist.calls) == 1


def test_run_save_rejects_async_persist(store: LayeredStore) -> None:
    """Verify coroutine callbacks must go through the async flow."""
    session = _session(store)
    session.set_value("hello", PlainText("Xin chao"))

    async def _persist(code: str, changes: Mapping[str, TranslationValue]) -> None:
        return None

    with pytest.raises(TypeError):
        run_save(session, _persist)
    assert session.state is SessionState.EDITING


def test_run_save_async_awaits_persist(store: LayeredStore) -> None:
    """Verify the session commits only after the awaited callback completes."""
    session = _session(store)
    session.set_value("hello", PlainText("Xin chao"))
    seen: list[SessionState] = []

    async def _persist(code: str, changes: Mapping[str, TranslationValue]) -> None:
        seen.append(session.state)
        await asyncio.sleep(0)
        seen.append(session.state)

    outcome = asyncio.run(run_save_async(session, _persist))
    assert outcome.count == 1
    assert seen == [SessionState.SAVING, SessionState.SAVING]
    assert session.state is SessionState.COMMITTED


def test_run_save_async_accepts_sync_persist(store: LayeredStore) -> None:
    """Verify plain callbacks work with the async flow."""
    session = _session(store)
    session.set_value("hello", PlainText("Xin chao"))
    persist = _Recorder()
    outcome = asyncio.run(run_save_async(session, persist))
    assert outcome.status == "saved"
    assert persist.calls == [("vi", {"hello": PlainText("Xin chao")})]


def test_second_save_while_outstanding_is_rejected(store: LayeredStore) -> None:
    """Verify re-entrant saves fail while persist is running."""
    session = _session(store)
    session.set_value("hello", PlainText("Xin chao"))
    errors: list[Exception] = []

    def _persist(code: str, changes: Mapping[str, TranslationValue]) -> None:
        try:
            run_save(session, _Recorder())
        except SaveInProgressError as exc:
            errors.append(exc)

    run_save(session, _persist)
    assert len(errors) == 1
    assert session.state is SessionState.COMMITTED


def test_save_flow_service_applies_to_store(store: LayeredStore) -> None:
    """Verify the service facade can persist straight into a layered store."""
    session = _session(store)
    session.set_value("apples", ConditionSet("count", {"_": "nhieu tao"}))
    session.set_value("extra", PlainText("Them nua"))
    outcome = SaveFlowService().run_save(session, store.apply)
    assert outcome.message == "2 translations saved successfully"
    assert store.lookup("vi", "apples") == {
        "param": "count",
        "conditions": {"_": "nhieu tao"},
    }
    assert store.lookup("vi", "extra") == "Them nua"
    assert store.lookup("vi", "hello") == "Chao ban"


def test_run_save_async_cancelled_persist_keeps_session_editable(
    store: LayeredStore,
) -> None:
    """Verify cancelling an outstanding save returns the session to editing."""
    session = _session(store)
    session.set_value("hello", PlainText("Xin chao"))

    async def _cancel_midway() -> None:
        started = asyncio.Event()

        async def _persist(code: str, changes: Mapping[str, TranslationValue]) -> None:
            started.set()
            await asyncio.sleep(10)

        task = asyncio.create_task(run_save_async(session, _persist))
        await started.wait()
        assert session.state is SessionState.SAVING
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(_cancel_midway())
    assert session.state is SessionState.EDITING
    assert compute_changes(session) == {"hello": PlainText("Xin chao")}

    persist = _Recorder()
    assert run_save(session, persist).status == "saved"
    assert persist.calls == [("vi", {"hello": PlainText("Xin chao")})]


class _Abort(BaseException):
    pass


def test_run_save_base_exception_keeps_session_editable(store: LayeredStore) -> None:
    """Verify non-Exception interrupts from persist still release the session."""
    session = _session(store)
    session.set_value("hello", PlainText("Xin chao"))

    def _persist(code: str, changes: Mapping[str, TranslationValue]) -> None:
        raise _Abort()

    with pytest.raises(_Abort):
        run_save(session, _persist)
    assert session.state is SessionState.EDITING
    session.set_value("hello", PlainText("Xin chao ban"))
    assert compute_changes(session) == {"hello": PlainText("Xin chao ban")}
