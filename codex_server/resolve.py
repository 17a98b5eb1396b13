import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .prompts import RECENT_CHANGES_KEYWORDS, file_block


def normalize_path(value: str, workspace: Optional[Path] = None) -> str:
    path = os.path.normpath(value)
    if workspace is not None and not os.path.isabs(path):
        path = os.path.join(str(workspace), path)
    return path


def is_regular_file(value: str, workspace: Optional[Path] = None) -> bool:
    """True if `value` names an existing file that is not a directory."""
    if not value:
        return False
    # os.path.isfile swallows OSError/ValueError (too long, NUL bytes, ...)
    return os.path.isfile(normalize_path(value, workspace))


def read_file(path: str) -> str:
    # undecodable bytes survive as surrogates and are restored by os.fsencode
    # when the text becomes a subprocess argument
    return Path(path).read_text(encoding="utf-8", errors="surrogateescape")


def resolve_context(value: str, workspace: Optional[Path] = None) -> str:
    """
    Expand `value` to a labelled file block when it is a readable file,
    otherwise return it unchanged. Never raises.
    """
    if not is_regular_file(value, workspace):
        return value

    path = normalize_path(value, workspace)
    try:
        return file_block(path, read_file(path))
    except (OSError, ValueError):
        return value


class TargetKind(str, Enum):
    RECENT_CHANGES = "recent_changes"
    FILE_PATH = "file_path"
    LITERAL_TEXT = "literal_text"


@dataclass(frozen=True)
class ReviewTarget:
    """What a codex_review call points at, resolved once per call."""
    kind: TargetKind
    value: str  # normalized path for FILE_PATH, original text otherwise

    @classmethod
    def classify(cls, target: str, workspace: Optional[Path] = None) -> "ReviewTarget":
        # precedence: keywords, then existing file, then literal snippet
        if target.strip().lower() in RECENT_CHANGES_KEYWORDS:
            return cls(TargetKind.RECENT_CHANGES, target)
        if is_regular_file(target, workspace):
            return cls(TargetKind.FILE_PATH, normalize_path(target, workspace))
        return cls(TargetKind.LITERAL_TEXT, target)
