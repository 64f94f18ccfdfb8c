"""Host translation store boundary."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from .values import TranslationValue, to_raw


class TranslationStore(Protocol):
    @property
    def codes(self) -> Sequence[str]: ...

    def lookup(self, code: str, key: str) -> Any: ...

    def keys(self, code: str) -> Iterable[str]: ...


class LayeredStore:
    """In-memory store where per-language overrides shadow the base data."""

    def __init__(
        self,
        data: Mapping[str, Mapping[str, Any]],
        overrides: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        self.data = {code: dict(rows) for code, rows in data.items()}
        self.overrides = {code: dict(rows) for code, rows in (overrides or {}).items()}

    @property
    def codes(self) -> list[str]:
        out = list(self.data)
        out.extend(code for code in self.overrides if code not in self.data)
        return out

    def lookup(self, code: str, key: str) -> Any:
        value = self.overrides.get(code, {}).get(key)
        if value is not None:
            return value
        return self.data.get(code, {}).get(key)

    def keys(self, code: str) -> list[str]:
        out = list(self.data.get(code, {}))
        seen = set(out)
        out.extend(key for key in self.overrides.get(code, {}) if key not in seen)
        return out

    def apply(self, code: str, changes: Mapping[str, TranslationValue]) -> None:
        rows = self.overrides.setdefault(code, {})
        for key, value in changes.items():
            rows[key] = to_raw(value)


def collect_keys(store: TranslationStore, codes: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for code in codes:
        for key in store.keys(code):
            if key in seen:
                continue
            seen.add(key)
            out.append(key)
    return out


def choose_languages(
    codes: Sequence[str],
    *,
    initial_default: str | None = None,
    initial_target: str | None = None,
    current: str | None = None,
) -> tuple[str | None, str | None]:
    """Pick the reference and target languages for a new session.

    The target falls back to the first language other than the reference,
    or to the reference itself when only one language exists.
    """
    if not codes:
        return None, None
    default = initial_default if initial_default in codes else codes[0]
    target = initial_target if initial_target is not None else current
    if target not in codes or target == default:
        target = next((code for code in codes if code != default), codes[0])
    return default, target
