from __future__ import annotations

import logging
from collections.abc import Mapping

from .session import EditingSession, LanguageImproverError
from .values import TranslationValue, has_value_changed

_LOG = logging.getLogger(__name__)


class ConflictError(LanguageImproverError):
    """Store values changed underneath an open session."""

    def __init__(self, keys: tuple[str, ...]) -> None:
        super().__init__(f"Translations changed in the store: {', '.join(keys)}")
        self.keys = keys


def find_conflicts(
    session: EditingSession, keys: Mapping[str, TranslationValue] | None = None
) -> tuple[str, ...]:
    """Return keys whose stored target value no longer matches the snapshot.

    Only ``keys`` are checked when given (typically the pending changes).
    """
    candidates = session.entries if keys is None else keys
    out: list[str] = []
    for key in candidates:
        entry = session.entries.get(key)
        if entry is None:
            continue
        if has_value_changed(entry.original, session.stored_value(key)):
            out.append(key)
    return tuple(out)


def guard_conflicts(
    session: EditingSession, changes: Mapping[str, TranslationValue]
) -> None:
    """Save hook refusing to persist over values that moved in the store."""
    conflicts = find_conflicts(session, changes)
    if conflicts:
        _LOG.warning(
            "Refusing to save %s: %d conflicting key(s)",
            session.target_language,
            len(conflicts),
        )
        raise ConflictError(conflicts)
