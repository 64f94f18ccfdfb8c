import os

import pytest

# Ensure Qt runs headless in CI/CLI environments without a display server.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from language_improver_py.core.store import LayeredStore  # noqa: E402
from language_improver_py.core.values import ConditionSet  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _qt_app(qapp):  # type: ignore[no-untyped-def]
    """Undo stacks are QObjects; keep one application alive for the run."""
    return qapp


@pytest.fixture()
def store() -> LayeredStore:
    return LayeredStore(
        {
            "en": {
                "hello": "Hello",
                "apples": {
                    "param": "count",
                    "conditions": {"0": "No apples", "1": "One apple", "_": "@{count} apples"},
                },
                "bye": "Goodbye",
            },
            "vi": {
                "hello": "Xin chao",
                "apples": {
                    "param": "count",
                    "conditions": {"0": "Khong co tao", "_": "@{count} qua tao"},
                },
            },
            "fr": {"hello": "Bonjour"},
        },
        overrides={"vi": {"hello": "Chao ban", "extra": "Them"}},
    )


@pytest.fixture()
def apples() -> ConditionSet:
    return ConditionSet("count", {"0": "none", "1": "one", "_": "many"})
