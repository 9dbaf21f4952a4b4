from __future__ import annotations

import argparse
import json
import sys

from .dispatcher import TOOL_SCHEMAS
from .mcp_server import main as mcp_main


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gemini-mcp",
        description="MCP server exposing Google Gemini chat and media analysis over stdio.",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser(
        "serve",
        help=(
            "Run the MCP (Model Context Protocol) server over stdio (default). "
            "Requires GEMINI_API_KEY."
        ),
    )
    subparsers.add_parser("tools", help="Print the advertised tool schemas as JSON")

    return parser


def tools_command() -> int:
    print(json.dumps(TOOL_SCHEMAS, indent=2))
    return 0


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    if not args.command or args.command == "serve":
        mcp_main()
        return
    if args.command == "tools":
        sys.exit(tools_command())
    parser.print_help()
    sys.exit(2)


if __name__ == "__main__":
    main()
