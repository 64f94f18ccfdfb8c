"""Editing rules for condition sets.

Mutation is unconstrained while the user types; :func:`validate_for_save`
is the single gate run when the edit is committed.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .app_config import AppConfig
from .app_config import load as _load_app_config
from .values import (
    FALLBACK_KEYS,
    ConditionSet,
    PlainText,
    fallback_key,
    sort_condition_keys,
)


class EditErrorKind(enum.Enum):
    EMPTY_KEY = "empty_key"
    DUPLICATE_KEY = "duplicate_key"
    EMPTY_PARAM = "empty_param"
    NO_CONDITIONS = "no_conditions"
    EMPTY_VALUE = "empty_value"
    AMBIGUOUS_FALLBACK = "ambiguous_fallback"


_MESSAGES = {
    EditErrorKind.EMPTY_KEY: "Condition key cannot be empty",
    EditErrorKind.DUPLICATE_KEY: 'Condition key "{key}" already exists',
    EditErrorKind.EMPTY_PARAM: "Parameter name cannot be empty",
    EditErrorKind.NO_CONDITIONS: "At least one condition is required",
    EditErrorKind.EMPTY_VALUE: 'Condition "{key}" cannot be empty',
    EditErrorKind.AMBIGUOUS_FALLBACK: 'Use either "_" or "default", not both',
}


@dataclass(frozen=True, slots=True)
class EditError:
    kind: EditErrorKind
    key: str | None = None

    @property
    def message(self) -> str:
        return _MESSAGES[self.kind].format(key=self.key or "")


@dataclass(frozen=True, slots=True)
class EditResult:
    error: EditError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class CommitResult:
    value: ConditionSet | None = None
    error: EditError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class TextConversion:
    value: PlainText | None = None
    key: str | None = None
    error: EditError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


OK = EditResult()


def _fail(kind: EditErrorKind, key: str | None = None) -> EditResult:
    return EditResult(EditError(kind, key))


def _reorder(cs: ConditionSet) -> None:
    ordered = [(key, cs.conditions[key]) for key in sort_condition_keys(cs.conditions)]
    cs.conditions.clear()
    cs.conditions.update(ordered)


def add_condition(cs: ConditionSet, key: str, value: str = "") -> EditResult:
    key = key.strip()
    if not key:
        return _fail(EditErrorKind.EMPTY_KEY)
    if key in cs.conditions:
        return _fail(EditErrorKind.DUPLICATE_KEY, key)
    cs.conditions[key] = value
    _reorder(cs)
    return OK


def remove_condition(cs: ConditionSet, key: str) -> EditResult:
    cs.conditions.pop(key, None)
    return OK


def set_param(cs: ConditionSet, param: str) -> None:
    cs.param = param


def set_condition_value(cs: ConditionSet, key: str, value: str) -> None:
    cs.conditions[key] = value


def validate_for_save(
    cs: ConditionSet, *, allow_mixed_fallbacks: bool = False
) -> EditResult:
    if not cs.param.strip():
        return _fail(EditErrorKind.EMPTY_PARAM)
    if not cs.conditions:
        return _fail(EditErrorKind.NO_CONDITIONS)
    for key in sort_condition_keys(cs.conditions):
        if not cs.conditions[key].strip():
            return _fail(EditErrorKind.EMPTY_VALUE, key)
    if not allow_mixed_fallbacks and all(key in cs.conditions for key in FALLBACK_KEYS):
        return _fail(EditErrorKind.AMBIGUOUS_FALLBACK)
    return OK


def commit(cs: ConditionSet, *, allow_mixed_fallbacks: bool = False) -> CommitResult:
    """Validate ``cs`` and return a trimmed, canonically ordered copy."""
    result = validate_for_save(cs, allow_mixed_fallbacks=allow_mixed_fallbacks)
    if not result.ok:
        return CommitResult(error=result.error)
    conditions = {
        key: cs.conditions[key].strip() for key in sort_condition_keys(cs.conditions)
    }
    return CommitResult(value=ConditionSet(cs.param.strip(), conditions))


def to_condition_set(
    text: str, param: str, *, fallback: str = "_"
) -> tuple[ConditionSet | None, EditResult]:
    """Wrap ``text`` as the fallback branch of a new condition set."""
    param = param.strip()
    if not param:
        return None, _fail(EditErrorKind.EMPTY_PARAM)
    return ConditionSet(param, {fallback: text}), OK


def to_plain_text(cs: ConditionSet, key: str | None = None) -> TextConversion:
    """Collapse ``cs`` to one branch, the fallback branch unless ``key`` is given."""
    if not cs.conditions:
        return TextConversion(error=EditError(EditErrorKind.NO_CONDITIONS))
    chosen = key if key is not None else fallback_key(cs)
    value = cs.conditions.get(chosen or "")
    if not value:
        return TextConversion(error=EditError(EditErrorKind.EMPTY_VALUE, chosen))
    return TextConversion(value=PlainText(value), key=chosen)


class ConditionEditor:
    """Working copy of one condition set, as edited in a dialog.

    ``reference`` is the reference-language set shown alongside, if any.
    """

    def __init__(
        self,
        initial: ConditionSet,
        *,
        reference: ConditionSet | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self._config = config or _load_app_config()
        self._working = initial.copy()
        _reorder(self._working)
        self.reference = reference

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        param: str | None = None,
        reference: ConditionSet | None = None,
        config: AppConfig | None = None,
    ) -> tuple[ConditionEditor | None, EditResult]:
        cfg = config or _load_app_config()
        cs, result = to_condition_set(
            text,
            cfg.default_param if param is None else param,
            fallback=cfg.fallback_key,
        )
        if cs is None:
            return None, result
        return cls(cs, reference=reference, config=cfg), result

    @property
    def param(self) -> str:
        return self._working.param

    @property
    def keys(self) -> list[str]:
        return sort_condition_keys(self._working.conditions)

    def value(self, key: str) -> str:
        return self._working.conditions.get(key, "")

    def reference_value(self, key: str) -> str | None:
        if self.reference is None:
            return None
        return self.reference.conditions.get(key)

    def set_param(self, param: str) -> None:
        set_param(self._working, param)

    def set_value(self, key: str, value: str) -> None:
        set_condition_value(self._working, key, value)

    def add(self, key: str, value: str = "") -> EditResult:
        return add_condition(self._working, key, value)

    def remove(self, key: str) -> EditResult:
        return remove_condition(self._working, key)

    def validate(self) -> EditResult:
        return validate_for_save(
            self._working, allow_mixed_fallbacks=self._config.allow_mixed_fallbacks
        )

    def commit(self) -> CommitResult:
        return commit(
            self._working, allow_mixed_fallbacks=self._config.allow_mixed_fallbacks
        )
