"""Git integration: process invocation, blame parsing and cache keys.

Importing this package sets ``GIT_PYTHON_REFRESH=quiet`` in the process
environment unless it is already set, so GitPython imports even when no git
executable is installed. Queries then fail and read as "no attribution".
"""

import os

os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from .blame import AttributionRecord, parse_porcelain  # noqa: E402
from .invoker import (  # noqa: E402
    BlameQuery,
    GitInvoker,
    GitQuery,
    OutputLimitExceeded,
    RemoteUrlQuery,
    RevisionQuery,
    RootQuery,
)
from .repo import CacheKey, RepoIdentity, RepoState, derive_repo_state, volatility_token  # noqa: E402

__all__ = [
    "AttributionRecord",
    "parse_porcelain",
    "BlameQuery",
    "GitInvoker",
    "GitQuery",
    "OutputLimitExceeded",
    "RemoteUrlQuery",
    "RevisionQuery",
    "RootQuery",
    "CacheKey",
    "RepoIdentity",
    "RepoState",
    "derive_repo_state",
    "volatility_token",
]
