"""Backend-core public surface – re-export runtime API."""

from __future__ import annotations

from .change_service import SaveFlowService, SaveOutcome, compute_changes
from .condition_editor import (
    ConditionEditor,
    EditErrorKind,
    add_condition,
    remove_condition,
    validate_for_save,
)
from .session import EditableEntry, EditingSession, open_session
from .store import LayeredStore
from .values import (
    ConditionSet,
    PlainText,
    TranslationValue,
    describe_for_search,
    from_raw,
    is_equivalent,
    sort_condition_keys,
    to_raw,
)

__all__ = [
    "ConditionEditor",
    "ConditionSet",
    "EditErrorKind",
    "EditableEntry",
    "EditingSession",
    "LayeredStore",
    "PlainText",
    "SaveFlowService",
    "SaveOutcome",
    "TranslationValue",
    "add_condition",
    "compute_changes",
    "describe_for_search",
    "from_raw",
    "is_equivalent",
    "open_session",
    "remove_condition",
    "sort_condition_keys",
    "to_raw",
    "validate_for_save",
]
