"""Change detection and the save flow handing diffs to the host."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Literal

from .session import EditingSession
from .values import TranslationValue, copy_value

_LOG = logging.getLogger(__name__)

Persist = Callable[[str, Mapping[str, TranslationValue]], Awaitable[None] | None]
BeforePersist = Callable[[EditingSession, Mapping[str, TranslationValue]], None]


@dataclass(frozen=True, slots=True)
class SaveOutcome:
    status: Literal["no_changes", "saved"]
    language: str
    changes: dict[str, TranslationValue]

    @property
    def count(self) -> int:
        return len(self.changes)

    @property
    def message(self) -> str:
        if self.status == "no_changes":
            return "No changes to save"
        plural = "" if self.count == 1 else "s"
        return f"{self.count} translation{plural} saved successfully"


def compute_changes(session: EditingSession) -> dict[str, TranslationValue]:
    """Return working values of entries that differ from their snapshot."""
    return {
        key: copy_value(entry.current)
        for key, entry in session.entries.items()
        if entry.changed
    }


def _prepare(
    session: EditingSession, before_persist: BeforePersist | None
) -> SaveOutcome:
    session.ensure_editing()
    changes = compute_changes(session)
    language = session.target_language
    if not changes:
        _LOG.info("No changes to save for %s", language)
        return SaveOutcome(status="no_changes", language=language, changes={})
    if before_persist is not None:
        before_persist(session, changes)
    return SaveOutcome(status="saved", language=language, changes=changes)


def run_save(
    session: EditingSession,
    persist: Persist,
    *,
    before_persist: BeforePersist | None = None,
) -> SaveOutcome:
    """Persist the session diff once; a failing ``persist`` leaves edits intact."""
    outcome = _prepare(session, before_persist)
    if outcome.status == "no_changes":
        return outcome
    session.begin_save()
    committed = False
    try:
        result = persist(outcome.language, outcome.changes)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise TypeError("Asynchronous persist callbacks need run_save_async().")
        committed = True
    except Exception as exc:
        _LOG.warning("Saving %s failed: %s", outcome.language, exc)
        raise
    finally:
        session.end_save(committed=committed)
    _LOG.info("Saved %d change(s) for %s", outcome.count, outcome.language)
    return outcome


async def run_save_async(
    session: EditingSession,
    persist: Persist,
    *,
    before_persist: BeforePersist | None = None,
) -> SaveOutcome:
    outcome = _prepare(session, before_persist)
    if outcome.status == "no_changes":
        return outcome
    session.begin_save()
    committed = False
    try:
        result = persist(outcome.language, outcome.changes)
        if inspect.isawaitable(result):
            await result
        committed = True
    except Exception as exc:
        _LOG.warning("Saving %s failed: %s", outcome.language, exc)
        raise
    finally:
        session.end_save(committed=committed)
    _LOG.info("Saved %d change(s) for %s", outcome.count, outcome.language)
    return outcome


@dataclass(frozen=True, slots=True)
class SaveFlowService:
    before_persist: BeforePersist | None = None

    def compute_changes(self, session: EditingSession) -> dict[str, TranslationValue]:
        return compute_changes(session)

    def run_save(self, session: EditingSession, persist: Persist) -> SaveOutcome:
        return run_save(session, persist, before_persist=self.before_persist)

    async def run_save_async(
        self, session: EditingSession, persist: Persist
    ) -> SaveOutcome:
        return await run_save_async(
            session, persist, before_persist=self.before_persist
        )
