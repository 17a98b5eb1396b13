import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MODEL = "gpt-5-codex"
DEFAULT_TIMEOUT = 600.0
GIT_TIMEOUT = 60.0


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return DEFAULT_TIMEOUT
    if not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"CODEX_TIMEOUT must be a number of seconds, got {raw!r}")
    if value < 0:
        raise ValueError("CODEX_TIMEOUT cannot be negative")
    return value or None


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read from the environment (and .env)."""
    codex_bin: str = "codex"
    default_model: str = DEFAULT_MODEL
    review_model: str = DEFAULT_MODEL
    timeout: Optional[float] = DEFAULT_TIMEOUT  # None disables it
    git_bin: str = "git"
    workspace: Optional[Path] = None
    log_level: str = "ERROR"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        workspace = None
        if env.get("CODEX_WORKSPACE"):
            workspace = Path(env["CODEX_WORKSPACE"]).expanduser().resolve()
            if not workspace.is_dir():
                raise ValueError(f"CODEX_WORKSPACE is not a directory: {workspace}")

        return cls(
            codex_bin=env.get("CODEX_BIN") or "codex",
            default_model=env.get("CODEX_MODEL") or DEFAULT_MODEL,
            review_model=env.get("CODEX_REVIEW_MODEL") or DEFAULT_MODEL,
            timeout=_parse_timeout(env.get("CODEX_TIMEOUT")),
            git_bin=env.get("GIT_BIN") or "git",
            workspace=workspace,
            log_level=(env.get("CODEX_LOG_LEVEL") or "ERROR").upper(),
        )

    @property
    def cwd(self) -> Optional[str]:
        return str(self.workspace) if self.workspace else None
