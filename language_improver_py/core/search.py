from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .app_config import AppConfig
from .app_config import load as _load_app_config
from .session import EditingSession
from .values import describe_for_search


def _matches(text: str, query: str, *, case_sensitive: bool) -> bool:
    if case_sensitive:
        return query in text
    return query in text.lower()


def filter_keys(
    session: EditingSession, query: str, *, case_sensitive: bool = False
) -> list[str]:
    """Return session keys whose key, reference text or target text match.

    Target text reflects unsaved edits; condition sets are matched by their
    condition keys.
    """
    if not query:
        return list(session.keys)
    needle = query if case_sensitive else query.lower()
    out: list[str] = []
    for key in session.keys:
        if (
            _matches(key, needle, case_sensitive=case_sensitive)
            or _matches(
                describe_for_search(session.reference_value(key)),
                needle,
                case_sensitive=case_sensitive,
            )
            or _matches(
                describe_for_search(session.target_value(key)),
                needle,
                case_sensitive=case_sensitive,
            )
        ):
            out.append(key)
    return out


def locate_key(keys: Sequence[str], key: str) -> int | None:
    try:
        return keys.index(key)
    except ValueError:
        return None


def search_for_target(
    session: EditingSession, key: str | None, *, auto_search: bool = True
) -> str:
    """Return the initial search query used to bring ``key`` into view."""
    if not key or not auto_search or key not in session.keys:
        return ""
    return key


@dataclass(frozen=True, slots=True)
class SessionSearchService:
    case_sensitive: bool = False
    auto_search: bool = True

    @classmethod
    def from_config(
        cls, cfg: AppConfig | None = None, *, auto_search: bool = True
    ) -> SessionSearchService:
        cfg = cfg or _load_app_config()
        return cls(case_sensitive=cfg.search_case_sensitive, auto_search=auto_search)

    def filter_keys(self, session: EditingSession, query: str) -> list[str]:
        return filter_keys(session, query, case_sensitive=self.case_sensitive)

    def initial_query(self, session: EditingSession, key: str | None) -> str:
        return search_for_target(session, key, auto_search=self.auto_search)

    def scroll_index(
        self, session: EditingSession, query: str, key: str
    ) -> int | None:
        return locate_key(self.filter_keys(session, query), key)
