import asyncio
import subprocess
from dataclasses import dataclass
from typing import Optional

from .config import GIT_TIMEOUT, Settings


class CommandError(Exception):
    """A subprocess could not be run or exited with a failure."""

    def __init__(self, detail: str, output: str = ""):
        super().__init__(detail)
        self.detail = detail
        self.output = output


class CommandTimeoutError(CommandError):
    pass


class CodexUnavailableError(Exception):
    pass


@dataclass
class CommandResult:
    returncode: int
    output: str  # stdout and stderr, interleaved

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(
    *args: str,
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CommandResult:
    """
    Run `args` and capture the combined output.

    The child never outlives the call: it is killed if the awaiting task
    is cancelled, times out or fails for any other reason.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            # our own stdin is the MCP transport
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            cwd=cwd,
        )
    except (OSError, ValueError) as e:
        raise CommandError(f"failed to start {args[0]}: {e}")

    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        raise CommandTimeoutError(f"{args[0]} timed out after {timeout:g}s")
    finally:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass

    return CommandResult(
        returncode=proc.returncode,
        output=stdout.decode("utf-8", errors="replace"),
    )


async def run_codex(prompt: str, model: str, settings: Settings) -> str:
    """Run `codex exec` non-interactively and return its output."""
    result = await run_command(
        settings.codex_bin, "exec",
        "--model", model,
        "--",
        prompt,
        cwd=settings.cwd,
        timeout=settings.timeout,
    )
    if not result.ok:
        raise CommandError(f"exit status {result.returncode}", result.output)
    return result.output


async def git_diff(*args: str, settings: Settings) -> str:
    result = await run_command(
        settings.git_bin, "diff", *args,
        cwd=settings.cwd,
        timeout=GIT_TIMEOUT,
    )
    if not result.ok:
        raise CommandError(f"exit status {result.returncode}", result.output)
    return result.output


def check_codex_cli(binary: str = "codex") -> None:
    """Fail unless `<binary> --version` runs and exits 0."""
    try:
        subprocess.run(
            [binary, "--version"],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=True,
            timeout=30,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise CodexUnavailableError(
            f"{binary} command not found or not executable: {e}"
        ) from e
