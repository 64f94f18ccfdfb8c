"""Editing session: original snapshot and working copy per translation key."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from PySide6.QtGui import QUndoStack

from .app_config import AppConfig
from .commands import SetValueCommand
from .condition_editor import (
    CommitResult,
    ConditionEditor,
    EditResult,
    TextConversion,
    to_plain_text,
)
from .store import TranslationStore, choose_languages, collect_keys
from .values import (
    ConditionSet,
    PlainText,
    TranslationValue,
    copy_value,
    from_raw,
    is_equivalent,
)

_LOG = logging.getLogger(__name__)

Lookup = Callable[[str, str], Any]


class LanguageImproverError(RuntimeError):
    """Base class for lifecycle errors raised by the editing core."""


class SessionStateError(LanguageImproverError):
    pass


class SaveInProgressError(SessionStateError):
    pass


class UnknownKeyError(LanguageImproverError, KeyError):
    pass


class SessionState(enum.Enum):
    EDITING = "editing"
    SAVING = "saving"
    COMMITTED = "committed"
    DISCARDED = "discarded"


@dataclass(slots=True)
class EditableEntry:
    key: str
    original: TranslationValue
    current: TranslationValue

    @property
    def changed(self) -> bool:
        return not is_equivalent(self.original, self.current)


class EditingSession:
    """Edits of one target language against one reference language.

    Only keys that already have a target value get an :class:`EditableEntry`;
    ``keys`` lists every key known to the store.
    """

    def __init__(
        self,
        default_language: str,
        target_language: str,
        lookup: Lookup,
        keys: Iterable[str],
    ) -> None:
        self.default_language = default_language
        self.target_language = target_language
        self.keys = list(keys)
        self.entries: dict[str, EditableEntry] = {}
        self.state = SessionState.EDITING
        self.undo_stack = QUndoStack()
        self._lookup = lookup
        for key in self.keys:
            value = from_raw(lookup(target_language, key))
            if value is None:
                continue
            self.entries[key] = EditableEntry(key, copy_value(value), value)
        _LOG.debug(
            "Opened session %s -> %s with %d/%d editable keys",
            default_language,
            target_language,
            len(self.entries),
            len(self.keys),
        )

    # read-only helpers
    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def reference_value(self, key: str) -> TranslationValue | None:
        return from_raw(self._lookup(self.default_language, key))

    def target_value(self, key: str) -> TranslationValue | None:
        entry = self.entries.get(key)
        if entry is not None:
            return entry.current
        return from_raw(self._lookup(self.target_language, key))

    def stored_value(self, key: str) -> TranslationValue | None:
        """Return the store's target value as it is now, ignoring edits."""
        return from_raw(self._lookup(self.target_language, key))

    @property
    def is_dirty(self) -> bool:
        return any(entry.changed for entry in self.entries.values())

    # ---- editing ------------------------------------------------------
    def ensure_editing(self) -> None:
        if self.state is SessionState.SAVING:
            raise SaveInProgressError("A save is already in progress.")
        if self.state is not SessionState.EDITING:
            raise SessionStateError(f"Session is {self.state.value}.")

    def set_value(self, key: str, value: TranslationValue) -> None:
        self.ensure_editing()
        if key not in self.entries:
            raise UnknownKeyError(key)
        self.undo_stack.push(SetValueCommand(self, key, value))
        _LOG.debug("Pushed edit for %s", key)

    def undo(self) -> None:
        self.ensure_editing()
        self.undo_stack.undo()

    def redo(self) -> None:
        self.ensure_editing()
        self.undo_stack.redo()

    def _replace_current(self, key: str, value: TranslationValue) -> None:
        self.entries[key].current = copy_value(value)

    # ---- condition sets -----------------------------------------------
    def edit_conditions(
        self,
        key: str,
        *,
        param: str | None = None,
        config: AppConfig | None = None,
    ) -> tuple[ConditionEditor | None, EditResult]:
        """Open an editor on ``key``, converting plain text to its fallback branch."""
        self.ensure_editing()
        entry = self.entries.get(key)
        if entry is None:
            raise UnknownKeyError(key)
        reference = self.reference_value(key)
        if not isinstance(reference, ConditionSet):
            reference = None
        if isinstance(entry.current, ConditionSet):
            editor = ConditionEditor(entry.current, reference=reference, config=config)
            return editor, EditResult()
        return ConditionEditor.from_text(
            entry.current.text, param=param, reference=reference, config=config
        )

    def commit_conditions(self, key: str, editor: ConditionEditor) -> CommitResult:
        result = editor.commit()
        if result.value is not None:
            self.set_value(key, result.value)
        return result

    def convert_to_text(
        self, key: str, condition_key: str | None = None
    ) -> TextConversion:
        self.ensure_editing()
        entry = self.entries.get(key)
        if entry is None:
            raise UnknownKeyError(key)
        if isinstance(entry.current, PlainText):
            return TextConversion(value=entry.current)
        result = to_plain_text(entry.current, condition_key)
        if result.value is not None:
            self.set_value(key, result.value)
        return result

    # ---- lifecycle ----------------------------------------------------
    def begin_save(self) -> None:
        self.ensure_editing()
        self.state = SessionState.SAVING

    def end_save(self, *, committed: bool) -> None:
        self.state = SessionState.COMMITTED if committed else SessionState.EDITING

    def discard(self) -> None:
        """Drop all edits; the session cannot be edited afterwards."""
        self.ensure_editing()
        for entry in self.entries.values():
            entry.current = copy_value(entry.original)
        self.undo_stack.clear()
        self.state = SessionState.DISCARDED
        _LOG.debug("Discarded session for %s", self.target_language)

    def retarget(self, target_language: str) -> EditingSession:
        """Discard this session and open a fresh one for another target."""
        self.discard()
        return EditingSession(
            self.default_language, target_language, self._lookup, self.keys
        )


def open_session(
    store: TranslationStore,
    *,
    default_language: str | None = None,
    target_language: str | None = None,
    current_language: str | None = None,
) -> EditingSession | None:
    codes = list(store.codes)
    default, target = choose_languages(
        codes,
        initial_default=default_language,
        initial_target=target_language,
        current=current_language,
    )
    if default is None or target is None:
        _LOG.debug("Store has no languages; no session opened")
        return None
    return EditingSession(default, target, store.lookup, collect_keys(store, codes))
