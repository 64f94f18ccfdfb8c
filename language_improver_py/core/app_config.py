"""Editor configuration loading from repository-local `config/app.toml`."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Any

from .values import FALLBACK_KEYS

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Store editor defaults shared by the condition editor and search."""

    default_param: str = "count"
    fallback_key: str = "_"
    allow_mixed_fallbacks: bool = False
    search_case_sensitive: bool = False


def _candidate_roots(root: Path | None) -> list[Path]:
    roots = [Path.cwd()]
    if root is not None:
        roots.append(root)
    seen: set[Path] = set()
    out: list[Path] = []
    for entry in roots:
        entry = entry.resolve()
        if entry in seen:
            continue
        seen.add(entry)
        out.append(entry)
    return out


def _load_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        _LOG.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _normalize_param(value: Any, *, default: str) -> str:
    if not isinstance(value, str):
        return default
    param = value.strip()
    return param or default


def _normalize_fallback_key(value: Any, *, default: str) -> str:
    if isinstance(value, str) and value.strip() in FALLBACK_KEYS:
        return value.strip()
    return default


def _normalize_bool(value: Any, *, default: bool) -> bool:
    return value if isinstance(value, bool) else default


@lru_cache(maxsize=8)
def load(root: Path | None = None) -> AppConfig:
    """Load and merge editor configuration from `config/app.toml` candidates."""
    cfg = AppConfig()
    for base in _candidate_roots(root):
        data = _load_toml(base / "config" / "app.toml")
        editor = data.get("editor", {})
        if isinstance(editor, dict):
            cfg = replace(
                cfg,
                default_param=_normalize_param(
                    editor.get("default_param"), default=cfg.default_param
                ),
                fallback_key=_normalize_fallback_key(
                    editor.get("fallback_key"), default=cfg.fallback_key
                ),
                allow_mixed_fallbacks=_normalize_bool(
                    editor.get("allow_mixed_fallbacks"),
                    default=cfg.allow_mixed_fallbacks,
                ),
            )
        search = data.get("search", {})
        if isinstance(search, dict):
            cfg = replace(
                cfg,
                search_case_sensitive=_normalize_bool(
                    search.get("case_sensitive"), default=cfg.search_case_sensitive
                ),
            )
    return cfg
