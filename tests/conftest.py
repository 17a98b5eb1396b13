from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from codex_server import server
from codex_server.config import Settings
from codex_server.runner import CommandError


class FakeContext:
    """Stands in for FastMCP's Context and records log messages."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    async def info(self, message: str) -> None:
        self.messages.append(("info", message))

    async def warning(self, message: str) -> None:
        self.messages.append(("warning", message))


@dataclass
class FakeCodex:
    output: str = "looks good\n"
    error: CommandError | None = None
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def __call__(self, prompt, model, settings):
        self.calls.append((prompt, model))
        if self.error is not None:
            raise self.error
        return self.output


@dataclass
class FakeGit:
    unstaged: str = ""
    staged: str = ""
    error: CommandError | None = None
    calls: list[tuple[str, ...]] = field(default_factory=list)

    async def __call__(self, *args, settings):
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        return self.staged if "--staged" in args else self.unstaged


@pytest.fixture
def ctx():
    return FakeContext()


@pytest.fixture(autouse=True)
def settings(monkeypatch):
    value = Settings()
    monkeypatch.setattr(server, "settings", value)
    return value


@pytest.fixture
def codex(monkeypatch):
    fake = FakeCodex()
    monkeypatch.setattr(server, "run_codex", fake)
    return fake


@pytest.fixture
def git(monkeypatch):
    fake = FakeGit()
    monkeypatch.setattr(server, "git_diff", fake)
    return fake
