"""Translation value model: plain text vs. parameterised condition sets."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

FALLBACK_KEYS = ("_", "default")

_NUMERIC_KEY_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True, slots=True)
class PlainText:
    text: str


@dataclass(slots=True)
class ConditionSet:
    """Value selected at runtime by ``param`` among ``conditions``.

    Keys are integer literals (``"0"``, ``"1"``) or a fallback sentinel
    (``"_"`` / ``"default"``). Instances are edited in place during a session,
    so snapshots must go through :meth:`copy`.
    """

    param: str
    conditions: dict[str, str] = field(default_factory=dict)

    def copy(self) -> ConditionSet:
        return ConditionSet(self.param, dict(self.conditions))


TranslationValue: TypeAlias = PlainText | ConditionSet


def copy_value(value: TranslationValue) -> TranslationValue:
    if isinstance(value, ConditionSet):
        return value.copy()
    return value


def from_raw(raw: Any) -> TranslationValue | None:
    """Build a tagged value from an untyped store entry."""
    if raw is None:
        return None
    if isinstance(raw, str):
        return PlainText(raw)
    if isinstance(raw, (PlainText, ConditionSet)):
        return copy_value(raw)
    if isinstance(raw, Mapping) and "param" in raw and "conditions" in raw:
        conditions = raw.get("conditions") or {}
        if not isinstance(conditions, Mapping):
            return PlainText(str(raw))
        return ConditionSet(
            param=str(raw.get("param") or ""),
            conditions={
                str(key): "" if value is None else str(value)
                for key, value in conditions.items()
            },
        )
    return PlainText(str(raw))


def to_raw(value: TranslationValue) -> str | dict[str, Any]:
    if isinstance(value, PlainText):
        return value.text
    return {"param": value.param, "conditions": dict(value.conditions)}


def is_equivalent(a: TranslationValue, b: TranslationValue) -> bool:
    """Return whether two values would persist identically.

    A variant change (text <-> conditions) is never equivalent, and text is
    compared exactly, without trimming or normalisation.
    """
    if isinstance(a, PlainText):
        return isinstance(b, PlainText) and a.text == b.text
    if not isinstance(b, ConditionSet):
        return False
    if a.param != b.param:
        return False
    if len(a.conditions) != len(b.conditions):
        return False
    for key, value in a.conditions.items():
        if key not in b.conditions or b.conditions[key] != value:
            return False
    return all(key in a.conditions for key in b.conditions)


def has_value_changed(
    original: TranslationValue | None, current: TranslationValue | None
) -> bool:
    if original is None and current is None:
        return False
    if original is None or current is None:
        return True
    return not is_equivalent(original, current)


def _condition_sort_key(key: str) -> tuple[int, int, str]:
    if _NUMERIC_KEY_RE.fullmatch(key):
        return (0, int(key), key)
    if key in FALLBACK_KEYS:
        return (2, 0, key)
    return (1, 0, key)


def sort_condition_keys(keys: Iterable[str]) -> list[str]:
    """Order condition keys for display: numbers, named keys, then fallbacks."""
    return sorted(keys, key=_condition_sort_key)


def describe_for_search(value: TranslationValue | None) -> str:
    if value is None:
        return ""
    if isinstance(value, PlainText):
        return value.text
    return f"LanguageConditions ({', '.join(value.conditions)})"


def fallback_key(value: ConditionSet) -> str | None:
    for key in FALLBACK_KEYS:
        if key in value.conditions:
            return key
    return next(iter(value.conditions), None)
