"""
Command Line Interface for TaskTrack
====================================

Usage:
------
    # Run the API server
    tasktrack serve --host 0.0.0.0 --port 8000

    # Register a user against the configured store
    tasktrack create-user alice

Configuration comes from TASKTRACK_* environment variables (or .env);
see config.py. Exit codes: 0 success, 1 handled error, 2 usage error.
"""

import argparse
import asyncio
import getpass
import sys
from typing import Optional

from pydantic import ValidationError

from config import Settings, configure_logging, get_settings
from core.credential_store import create_credential_store
from core.redis_client import create_redis_client
from core.security import MAX_PASSWORD_BYTES, PasswordHasher
from exceptions import TaskTrackError


# ANSI colors for terminal output
class Colors:
    """ANSI color codes for pretty terminal output."""
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'


def colorize(text: str, color: str) -> str:
    """Add color to text if terminal supports it."""
    if sys.stdout.isatty():
        return f"{color}{text}{Colors.ENDC}"
    return text


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    This defines all CLI options and their help text.
    """
    parser = argparse.ArgumentParser(
        prog="tasktrack",
        description="TaskTrack task-tracking API",
        epilog="Example: tasktrack serve --port 8080"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", type=str, help="Bind address (default: TASKTRACK_API_HOST)")
    serve.add_argument("--port", type=int, help="Bind port (default: TASKTRACK_API_PORT)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")

    create_user = subparsers.add_parser("create-user", help="Register a user")
    create_user.add_argument("username", help="Case-sensitive username")
    create_user.add_argument(
        "--password", "-p",
        type=str,
        help="Password (prompted for when omitted)"
    )

    return parser


def run_server(settings: Settings, host: Optional[str], port: Optional[int], reload: bool) -> int:
    """Start uvicorn on the app factory."""
    import uvicorn

    host = host or settings.api_host
    port = port or settings.api_port

    print(colorize(f"TaskTrack API on http://{host}:{port}", Colors.GREEN))
    print(f"Docs available at http://{host}:{port}/api/docs")

    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower()
    )
    return 0


async def register_user(settings: Settings, username: str, password: str) -> str:
    """
    Register a user directly against the configured credential store.

    Returns:
        The new user id
    """
    redis_client = None
    if settings.storage_backend == "redis":
        redis_client = create_redis_client(settings)

    store = create_credential_store(
        PasswordHasher(rounds=settings.bcrypt_rounds),
        client=redis_client,
        key_prefix=settings.redis_key_prefix
    )

    try:
        identity = await store.create(username, password)
    finally:
        if redis_client is not None:
            await redis_client.aclose()

    return identity.id


def main(args: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    try:
        settings = get_settings()
        configure_logging(settings)

        if parsed_args.command == "serve":
            return run_server(settings, parsed_args.host, parsed_args.port, parsed_args.reload)

        if settings.storage_backend == "memory":
            print(colorize("Warning: memory storage - this user disappears on exit", Colors.YELLOW))

        password = parsed_args.password or getpass.getpass("Password: ")
        if not password:
            parser.error("password must not be empty")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            parser.error(f"password must be at most {MAX_PASSWORD_BYTES} bytes in UTF-8")

        user_id = asyncio.run(register_user(settings, parsed_args.username, password))
        print(colorize(f"Created user '{parsed_args.username}' ({user_id})", Colors.GREEN))
        return 0

    except ValidationError as e:
        print(colorize(f"Configuration error:\n{e}", Colors.RED), file=sys.stderr)
        return 1
    except TaskTrackError as e:
        print(colorize(f"Error: {e.message}", Colors.RED), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
