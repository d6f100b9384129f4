"""Turn git remote URLs into commit-pinned web links."""

from __future__ import annotations

import os
import re
from typing import Optional
from urllib.parse import quote

_HTTP_RE = re.compile(r"^https?://[^/\s]+", re.IGNORECASE)
# user@host:org/repo
_SCP_RE = re.compile(r"^[^@/\s]+@([^:/\s]+):/*(.+)$")
# ssh://[user@]host[:port]/org/repo
_SSH_RE = re.compile(r"^ssh://(?:[^@/\s]+@)?([^:/\s]+)(?::\d+)?/+(.+)$", re.IGNORECASE)

# Characters JavaScript's encodeURIComponent leaves alone beyond quote's defaults.
_COMPONENT_SAFE = "!*'()"


def _strip_suffixes(url: str) -> str:
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url.rstrip("/")


def normalize_remote(raw: str) -> Optional[str]:
    """Convert a remote URL into the HTTPS base URL of its web page.

    Parameters
    ----------
    raw:
        URL as printed by ``git remote get-url``.

    Returns
    -------
    Base URL without ``.git`` or a trailing slash, or None when the dialect is
    not supported.

    Examples
    --------
    >>> normalize_remote("git@github.com:org/repo.git")
    'https://github.com/org/repo'
    """
    url = _strip_suffixes(raw)

    if _HTTP_RE.match(url):
        return url

    match = _SCP_RE.match(url) or _SSH_RE.match(url)
    if match:
        host, path = match.groups()
        return f"https://{host}/{path}"

    return None


def encode_component(value: str) -> str:
    return quote(value, safe=_COMPONENT_SAFE)


def build_permalink(base_url: str, relative_path: str, commit_id: str, line: int) -> str:
    """Link to ``line`` of ``relative_path`` as of ``commit_id``.

    The ``/blob/<commit>/<path>#L<line>`` layout is understood by GitHub,
    GitLab and Bitbucket alike.
    """

    base = base_url.rstrip("/")
    segments = relative_path.replace(os.sep, "/").split("/")
    encoded_path = "/".join(encode_component(segment) for segment in segments)
    return f"{base}/blob/{encode_component(commit_id)}/{encoded_path}#L{line}"
