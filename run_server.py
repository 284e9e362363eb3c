#!/usr/bin/env python3
"""CLI for the documentation chat API: serve over HTTP, or ask one question."""

import argparse
import logging
import sys

from core.config import settings
from core.logging_setup import setup_logging


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the HTTP server."""
    import uvicorn

    from api.app import create_app

    app = create_app()
    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )


def cmd_ask(args: argparse.Namespace) -> None:
    """Stream one answer to stdout as event-stream frames."""
    from api.streaming import SSESession
    from core.clients import ClientRegistry

    registry = ClientRegistry(settings)
    registry.initialize()

    session = SSESession(request_id="cli")
    session.open()
    try:
        for frame in session.run(registry.agent.stream(args.question)):
            sys.stdout.write(frame)
            sys.stdout.flush()
    finally:
        registry.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Documentation chat API")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # serve
    p_serve = subparsers.add_parser("serve", help="Run the HTTP server")
    p_serve.add_argument("--host", help=f"Bind address (default {settings.host})")
    p_serve.add_argument("--port", type=int, help=f"Port (default {settings.port})")

    # ask
    p_ask = subparsers.add_parser("ask", help="Ask a question and stream the answer")
    p_ask.add_argument("question", help="Question to ask")

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else settings.log_level, settings.log_dir)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "serve": cmd_serve,
        "ask": cmd_ask,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
