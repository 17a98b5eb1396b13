import argparse
import asyncio
import sys

from codex_client.client import CodexClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codex-consult",
        description="Ask the Codex Consultant MCP server for a second opinion"
    )

    subparser = parser.add_subparsers(dest="command", required=True)

    ask = subparser.add_parser("ask", help="Ask Codex a question")
    ask.add_argument("prompt", nargs="+", help="Question or code to ask about")
    ask.add_argument("--context", help="File path or text to attach as context")
    ask.add_argument("--model", help="Model to use (default: server's CODEX_MODEL)")

    review = subparser.add_parser("review", help="Have Codex review code")
    review.add_argument(
        "target",
        help="File path, code snippet, or 'current changes'"
    )
    review.add_argument("--focus", help="Areas to focus on (security, performance, ...)")

    subparser.add_parser("tools", help="List the tools the server exposes")

    return parser


async def run(args) -> int:
    async with CodexClient() as client:
        if args.command == "tools":
            for tool in await client.list_tools():
                print(f"{tool.name}: {tool.description}")
            return 0

        if args.command == "ask":
            is_error, text = await client.ask(
                " ".join(args.prompt), context=args.context, model=args.model
            )
        else:
            is_error, text = await client.review(args.target, focus=args.focus)

    print(text, file=sys.stderr if is_error else sys.stdout)
    return 1 if is_error else 0


def main():
    args = build_parser().parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
