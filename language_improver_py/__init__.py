"""Language Improver – all public symbols are re-exported from .core."""

import logging
from importlib import metadata

from .core import (  # noqa: F401 – re-exports
    ConditionEditor,
    ConditionSet,
    EditingSession,
    LayeredStore,
    PlainText,
    SaveFlowService,
    compute_changes,
    is_equivalent,
    open_session,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

try:
    __version__ = metadata.version("language-improver-py")
except metadata.PackageNotFoundError:  # editable install before first build
    __version__ = "0.0.0"
