#!/usr/bin/env python3
"""
VoxMail Command Line Interface

Main entry point for the `voxmail` command.

Usage:
    voxmail serve                         # Start the API server
    voxmail interpret --page compose go to subject
    voxmail commands --page inbox         # List voice commands for a page
    voxmail console                       # Drive the client by typed "speech"
    voxmail seed --to jane@example.com    # Add sample emails to a mailbox
    voxmail --version                     # Show version
"""

import argparse
import asyncio
import json
import sys

from voxmail import __version__
from voxmail.voice.models import FocusContext, PageName

SAMPLE_EMAILS = (
    (
        "alex.morgan@example.com",
        "Team lunch on Friday",
        "Hi, we're getting lunch on Friday at noon. Let me know if you can make it.",
    ),
    (
        "billing@example.com",
        "Your invoice for March",
        "Your invoice for March is ready. The total is 42 dollars.",
    ),
    (
        "sam.lee@example.com",
        "Project update",
        "The first draft is done. Could you review it before Wednesday?",
    ),
)


def cmd_serve(args):
    """Handle serve subcommand."""
    from voxmail.server.main import run, server_config

    host = args.host or server_config.get("host", "127.0.0.1")
    port = args.port or int(server_config.get("port", 5000))

    print(f"Starting VoxMail API at http://{host}:{port}")
    print("Press Ctrl+C to stop")

    run(host=host, port=port, reload=args.reload)


def cmd_interpret(args):
    """Interpret one transcript and print the intent as JSON."""
    from voxmail.voice.parser import build_table, interpret

    page = PageName(args.page)
    focus = FocusContext(args.focus) if args.focus else page.focus
    transcript = " ".join(args.transcript)

    intent = interpret(transcript, focus, build_table(page))
    print(json.dumps(intent.to_dict(), indent=2))
    return 0


def cmd_commands(args):
    """List documented voice commands."""
    from voxmail.voice.parser import build_table

    pages = [PageName(args.page)] if args.page else list(PageName)
    for page in pages:
        print(f"{page.value}:")
        for command in build_table(page).commands():
            example = f'  "{command["example"]}"' if command["example"] else ""
            print(f"  {command['command']:<32}{example}")
        print()
    return 0


def cmd_seed(args):
    """Insert sample received emails for a mailbox."""
    from voxmail.models import EmailStatus
    from voxmail.server import database

    for sender, subject, body in SAMPLE_EMAILS[: args.count]:
        email = database.insert_email(
            sender=sender,
            recipient=args.to,
            subject=subject,
            body=body,
            status=EmailStatus.RECEIVED,
        )
        print(f"Added {email.id}: {subject}")
    return 0


def cmd_console(args):
    """Run the client in the terminal. Typed lines are treated as speech."""
    try:
        return asyncio.run(_console(args))
    except KeyboardInterrupt:
        print()
        return 0


async def _console(args) -> int:
    from voxmail.client.app import VoxmailApp
    from voxmail.client.errors import VoxmailError
    from voxmail.logging_config import setup_logging
    from voxmail.voice.recognition.console import ConsoleSpeech

    setup_logging(level="WARNING")

    speech = ConsoleSpeech()
    overrides = {"speech_input": speech, "speech_output": speech}
    if args.api_url:
        app = VoxmailApp(args.api_url, **overrides)
    else:
        app = VoxmailApp.from_config(**overrides)

    async with app:
        try:
            await app.start(args.route)
            if args.email and args.password and not app.auth.authenticated:
                await app.auth.login(args.email, args.password)
                await app.navigator.navigate(args.route)
        except VoxmailError as e:
            print(f"Error: {e}")
            return 1

        print('Type what you would say. ":voice" toggles listening, ":quit" exits.')
        loop = asyncio.get_running_loop()
        while True:
            page = app.page
            try:
                line = await loop.run_in_executor(None, input, f"{app.route}> ")
            except EOFError:
                break
            line = line.strip()
            if not line:
                continue
            if line in (":q", ":quit", ":exit"):
                break
            if page is None:
                continue
            if line == ":voice":
                page.voice.toggle()
                continue
            if not page.voice.listening and not page.voice.activate():
                print("Speech recognition unavailable")
                continue
            await speech.feed(line)
            if app.page is not None and app.page.error:
                print(f"[error] {app.page.error}")
    return 0


def cmd_version(args):
    """Show version information."""
    print(f"VoxMail version {__version__}")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="voxmail",
        description="VoxMail - webmail with voice commands",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=None, help="Host to bind to (default: config)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to bind to (default: config)")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )
    serve_parser.set_defaults(func=cmd_serve)

    # Interpret subcommand
    interpret_parser = subparsers.add_parser(
        "interpret", help="Interpret a transcript and print the intent"
    )
    interpret_parser.add_argument(
        "--page", choices=[p.value for p in PageName], default=PageName.INBOX.value
    )
    interpret_parser.add_argument(
        "--focus", choices=[f.value for f in FocusContext], default=None,
        help="Focused field (default: the page itself)",
    )
    interpret_parser.add_argument("transcript", nargs="+", help="What was said")
    interpret_parser.set_defaults(func=cmd_interpret)

    # Commands subcommand
    commands_parser = subparsers.add_parser("commands", help="List voice commands")
    commands_parser.add_argument("--page", choices=[p.value for p in PageName], default=None)
    commands_parser.set_defaults(func=cmd_commands)

    # Console subcommand
    console_parser = subparsers.add_parser(
        "console", help="Use the client from the terminal with typed speech"
    )
    console_parser.add_argument("--api-url", default=None, help="API base URL (default: config)")
    console_parser.add_argument("--route", default="/", help="Route to open first")
    console_parser.add_argument("--email", default=None, help="Sign in with this email")
    console_parser.add_argument("--password", default=None, help="Password for --email")
    console_parser.set_defaults(func=cmd_console)

    # Seed subcommand
    seed_parser = subparsers.add_parser("seed", help="Add sample emails to a mailbox")
    seed_parser.add_argument("--to", required=True, help="Recipient mailbox")
    seed_parser.add_argument(
        "--count", type=int, default=len(SAMPLE_EMAILS), help="How many samples to add"
    )
    seed_parser.set_defaults(func=cmd_seed)

    args = parser.parse_args(argv)

    # Handle --version at top level
    if args.version:
        cmd_version(args)
        return

    # If no command given, show help
    if not args.command:
        parser.print_help()
        return

    # Execute command
    result = args.func(args)

    # Commands may return an exit code
    if isinstance(result, int) and result != 0:
        sys.exit(result)


if __name__ == "__main__":
    main()
