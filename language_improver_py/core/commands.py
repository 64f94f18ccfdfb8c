from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtGui import QUndoCommand

from .values import TranslationValue, copy_value

if TYPE_CHECKING:
    from .session import EditingSession


class SetValueCommand(QUndoCommand):
    """Undo-able replacement of one entry's working value."""

    def __init__(
        self,
        session: EditingSession,
        key: str,
        new_value: TranslationValue,
    ) -> None:
        super().__init__(f"Edit “{key}”")
        self._session, self._key = session, key
        # snapshots, so later in-place edits of `current` cannot leak into undo
        self._old = copy_value(session.entries[key].current)
        self._new = copy_value(new_value)

    # ---- QUndoCommand -------------------------------------------------
    def undo(self) -> None:  # noqa: D401
        self._session._replace_current(self._key, self._old)

    def redo(self) -> None:  # noqa: D401
        self._session._replace_current(self._key, self._new)
