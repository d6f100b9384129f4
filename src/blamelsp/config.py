"""Configuration for the blame language server."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_CACHE_CAPACITY = 800
DEFAULT_MAX_OUTPUT_BYTES = 5 * 1024 * 1024


@dataclass(slots=True)
class BlameConfig:
    """Runtime configuration for a single server process.

    Attributes
    ----------
    base_dir:
        Directory holding the optional ``config.json``. Defaults to
        ``~/.blamelsp``.
    cache_capacity:
        Maximum number of line attributions kept in memory. The bound is
        fixed and independent of repository size.
    max_output_bytes:
        Upper bound on the stdout a single git query may produce before it is
        killed and treated as a failure.
    remote_name:
        Remote whose URL is used to build permalinks.
    git_executable:
        Explicit path to ``git``. When unset the executable resolved by
        GitPython is used.
    log_level:
        Name of the logging level used by the CLI.
    log_file:
        Optional log destination. Logs go to stderr when unset because stdout
        carries the protocol stream.
    """

    base_dir: Path = field(default_factory=lambda: Path.home() / ".blamelsp")
    cache_capacity: int = DEFAULT_CACHE_CAPACITY
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    remote_name: str = "origin"
    git_executable: str | None = None
    log_level: str = "INFO"
    log_file: Path | None = None

    def __post_init__(self) -> None:
        if self.cache_capacity < 1:
            raise ValueError(f"cache_capacity must be positive, got {self.cache_capacity}")
        if self.max_output_bytes < 1:
            raise ValueError(
                f"max_output_bytes must be positive, got {self.max_output_bytes}"
            )
        if not self.remote_name:
            raise ValueError("remote_name must not be empty")

    def config_path(self) -> Path:
        """Return the path of the JSON configuration file."""
        return self.base_dir / "config.json"


def _coerce(name: str, value: Any) -> Any:
    if name in ("base_dir", "log_file") and value is not None:
        return Path(value).expanduser()
    return value


def load_config(path: Path | None = None) -> BlameConfig:
    """Load configuration from a JSON file.

    Parameters
    ----------
    path:
        File to read. Defaults to ``~/.blamelsp/config.json``.

    Returns
    -------
    BlameConfig built from the file. Unknown keys are ignored and a missing
    or unreadable file yields the defaults.
    """
    target = path or BlameConfig().config_path()
    if not target.exists():
        return BlameConfig()

    try:
        with open(target, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", target, e)
        return BlameConfig()

    if not isinstance(raw, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", target)
        return BlameConfig()

    known = {f.name for f in fields(BlameConfig)}
    values: Dict[str, Any] = {
        name: _coerce(name, value) for name, value in raw.items() if name in known
    }
    return BlameConfig(**values)


DEFAULT_CONFIG = BlameConfig()
