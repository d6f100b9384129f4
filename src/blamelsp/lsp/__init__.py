"""Language-server adapter and the services behind it."""

from .contracts import (
    OPEN_REMOTE_COMMAND,
    ActionOffer,
    OpenUrl,
    PermalinkOutcome,
    ShowWarning,
    WarningReason,
)
from .service import BlameService

__all__ = [
    "OPEN_REMOTE_COMMAND",
    "ActionOffer",
    "OpenUrl",
    "PermalinkOutcome",
    "ShowWarning",
    "WarningReason",
    "BlameService",
]
