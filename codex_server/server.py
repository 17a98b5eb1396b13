import sys
from typing import Optional

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import BaseModel, Field, ValidationError, field_validator

from .config import Settings
from .prompts import (
    SERVER_INSTRUCTIONS,
    build_ask_prompt,
    build_review_prompt,
    file_block,
)
from .resolve import ReviewTarget, TargetKind, read_file, resolve_context
from .runner import (
    CodexUnavailableError,
    CommandError,
    check_codex_cli,
    git_diff,
    run_codex,
)

settings = Settings.from_env()
mcp = FastMCP(
    "Codex Consultant",
    instructions=SERVER_INSTRUCTIONS,
    log_level=settings.log_level,
)


class AskRequest(BaseModel):
    prompt: str
    context: Optional[str] = None
    model: Optional[str] = None

    @field_validator("prompt", mode="before")
    @classmethod
    def _prompt_required(cls, v):
        if not v:
            raise ValueError("prompt is required")
        return v


class ReviewRequest(BaseModel):
    target: str
    focus: Optional[str] = None

    @field_validator("target", mode="before")
    @classmethod
    def _target_required(cls, v):
        if not v:
            raise ValueError("target is required")
        return v


def _validation_message(err: ValidationError) -> str:
    messages = []
    for e in err.errors():
        cause = (e.get("ctx") or {}).get("error")
        if cause is not None:
            messages.append(str(cause))
        else:
            messages.append(e["msg"])
    return "; ".join(messages)


def _build(request_cls, **fields):
    try:
        return request_cls(**fields)
    except ValidationError as e:
        raise ToolError(_validation_message(e))


def _failure(prefix: str, err: CommandError) -> ToolError:
    return ToolError(f"{prefix}: {err.detail}\nOutput: {err.output}")


async def collect_recent_changes(ctx: Context) -> str:
    """Unstaged diff against HEAD, falling back to the staged diff."""
    try:
        diff = await git_diff("HEAD", settings=settings)
    except CommandError as e:
        raise ToolError(f"Failed to get git diff: {e.detail}\n{e.output}".rstrip())

    if not diff:
        await ctx.info("No unstaged changes, trying staged changes")
        try:
            diff = await git_diff("--staged", settings=settings)
        except CommandError as e:
            raise ToolError(f"Failed to get staged git diff: {e.detail}\n{e.output}".rstrip())

    if not diff:
        raise ToolError("No git changes found to review")
    return diff


async def review_content(target: ReviewTarget, ctx: Context) -> str:
    if target.kind is TargetKind.RECENT_CHANGES:
        return await collect_recent_changes(ctx)

    if target.kind is TargetKind.FILE_PATH:
        try:
            return file_block(target.value, read_file(target.value))
        except (OSError, ValueError) as e:
            raise ToolError(f"Failed to read file {target.value}: {e}")

    return target.value


@mcp.tool(
    name="ask_codex",
    description="Get a second opinion from OpenAI Codex on code, plans, or implementations"
)
async def ask_codex(
    prompt: Optional[str] = Field(
        default=None,
        description="The question or code to ask Codex about"
    ),
    context: Optional[str] = Field(
        default=None,
        description="Additional context or files to include"
    ),
    model: Optional[str] = Field(
        default=None,
        description="Model to use (e.g., gpt-5-codex, gpt-5). Default: gpt-5-codex"
    ),
    ctx: Context = None
) -> str:

    request = _build(AskRequest, prompt=prompt, context=context, model=model)
    model = request.model or settings.default_model

    context_block = None
    if request.context:
        context_block = resolve_context(request.context, settings.workspace)
        if context_block != request.context:
            await ctx.info("Attached context file")

    instruction = build_ask_prompt(request.prompt, context_block)
    await ctx.info(f"Asking Codex ({model})")

    try:
        output = await run_codex(instruction, model, settings)
    except CommandError as e:
        await ctx.warning(f"Codex execution failed: {e.detail}")
        raise _failure("Codex execution failed", e)

    await ctx.info(f"Codex returned {len(output)} characters")
    return output


@mcp.tool(
    name="codex_review",
    description="Have OpenAI Codex review code changes or implementation plans"
)
async def codex_review(
    target: Optional[str] = Field(
        default=None,
        description="What to review (file path, code snippet, or 'current changes')"
    ),
    focus: Optional[str] = Field(
        default=None,
        description="Specific areas to focus on (security, performance, bugs, etc.)"
    ),
    ctx: Context = None
) -> str:

    request = _build(ReviewRequest, target=target, focus=focus)
    resolved = ReviewTarget.classify(request.target, settings.workspace)
    await ctx.info(f"Review target resolved as {resolved.kind.value}")

    content = await review_content(resolved, ctx)
    instruction = build_review_prompt(content, request.focus)

    try:
        output = await run_codex(instruction, settings.review_model, settings)
    except CommandError as e:
        await ctx.warning(f"Codex review failed: {e.detail}")
        raise _failure("Codex review failed", e)

    await ctx.info(f"Codex returned {len(output)} characters")
    return output


def _mark_required(tool_name: str, *fields: str) -> None:
    # arguments default to None so a missing one reaches the request validators
    tool = mcp._tool_manager.get_tool(tool_name)
    tool.parameters["required"] = list(fields)


_mark_required("ask_codex", "prompt")
_mark_required("codex_review", "target")


def main() -> None:
    try:
        check_codex_cli(settings.codex_bin)
    except CodexUnavailableError as e:
        print(f"Codex CLI validation failed: {e}", file=sys.stderr)
        print(
            f"Please ensure the '{settings.codex_bin}' command is installed and available in PATH",
            file=sys.stderr,
        )
        sys.exit(1)

    try:
        mcp.run(transport="stdio")
    except Exception as e:
        print(f"Server error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
