"""Dataclasses describing what the service hands to the protocol layer."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple, Union

OPEN_REMOTE_COMMAND = "blame-lsp.openRemoteForLine"


class WarningReason(enum.Enum):
    NOT_IN_REPOSITORY = "Not in a git repo (or git not available)."
    NO_REMOTE = "No '{detail}' remote found."
    NO_ATTRIBUTION = "No blame info for that line."
    UNSUPPORTED_REMOTE = "Unsupported remote URL: {detail}"


@dataclass(frozen=True, slots=True)
class ActionOffer:
    title: str
    command: str = OPEN_REMOTE_COMMAND
    arguments: Tuple[object, ...] = ()


@dataclass(frozen=True, slots=True)
class OpenUrl:
    url: str


@dataclass(frozen=True, slots=True)
class ShowWarning:
    reason: WarningReason
    detail: Optional[str] = None

    @property
    def message(self) -> str:
        return self.reason.value.format(detail=self.detail or "")


PermalinkOutcome = Union[OpenUrl, ShowWarning]
