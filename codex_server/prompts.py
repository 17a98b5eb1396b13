SERVER_INSTRUCTIONS = """
Codex Consultant gives you a second opinion from the OpenAI Codex CLI.

Use ask_codex for questions about code, plans or implementations.
The optional context argument may be a file path (its contents are attached)
or free text.

Use codex_review to have Codex review something. The target may be:
- "current changes" or "git diff" to review the working tree (staged changes
  are used when there are no unstaged ones)
- a path to a file
- a literal code snippet

Both tools return Codex's output as-is.
"""

DEFAULT_FOCUS = "code quality, bugs, and best practices"

RECENT_CHANGES_KEYWORDS = frozenset({"current changes", "git diff"})

FILE_BLOCK = "File: {path}\n\n{content}"

ASK_TEMPLATE = "Context: {context}\n\nQuestion: {prompt}"

REVIEW_TEMPLATE = (
    "Please review the following code with focus on: {focus}. "
    "Provide specific, actionable feedback.\n\n{content}"
)


def file_block(path: str, content: str) -> str:
    return FILE_BLOCK.format(path=path, content=content)


def build_ask_prompt(prompt: str, context: str | None = None) -> str:
    """Instruction for ask_codex. `context` must already be resolved."""
    if not context:
        return prompt
    return ASK_TEMPLATE.format(context=context, prompt=prompt)


def build_review_prompt(content: str, focus: str | None = None) -> str:
    """Blank or missing focus falls back to DEFAULT_FOCUS."""
    if not focus or not focus.strip():
        focus = DEFAULT_FOCUS
    return REVIEW_TEMPLATE.format(focus=focus, content=content)
