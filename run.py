"""Gatehunt command line.

    python run.py server [--host H] [--port P] [--db URI] [--debug]
    python run.py init-db [--db URI]
    python run.py purge-gates [--db URI]

With no subcommand the server starts. Flags win over environment variables;
``--env-file`` (or a ``.env`` in the working directory) is loaded first.
"""

import argparse
import os
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

__version__ = "0.1.0"

_color_init()
# Plain text when piped or captured
_COLOR_ENABLED = sys.stdout.isatty()

_ENV_HELP = dedent(
    """
    Environment variables:
      HOST                 bind address (default 0.0.0.0)
      PORT                 listen port (default 5000)
      DATABASE_URL         SQLAlchemy URI (default sqlite:///instance/gatehunt.db)
      SECRET_KEY           session signing key
      GATEHUNT_LOG_LEVEL   debug | info | warn | error (default info)
      GATEHUNT_LOG_JSON    1 for JSON event lines
    """
)


def _paint(color: str, text) -> str:
    return f"{color}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else str(text)


def parse_args(argv: list[str]) -> argparse.Namespace:
    db_flag = argparse.ArgumentParser(add_help=False)
    db_flag.add_argument(
        "--db", dest="db_uri", default=None, help="Database URI (default: env DATABASE_URL or instance SQLite file)"
    )

    parser = argparse.ArgumentParser(
        prog="Gatehunt",
        description="Gatehunt game server and maintenance commands.",
        epilog=_ENV_HELP,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--env-file", dest="env_file", help="Load this .env file instead of ./.env")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["debug", "info", "warn", "error"],
        default=None,
        help="Event log threshold (default: env GATEHUNT_LOG_LEVEL or info)",
    )
    parser.add_argument("--version", action="version", version=f"Gatehunt Server {__version__}")

    commands = parser.add_subparsers(dest="command")
    server = commands.add_parser("server", parents=[db_flag], help="Run the HTTP + Socket.IO server")
    server.add_argument("--host", default=None, help="Bind address (default: env HOST or 0.0.0.0)")
    server.add_argument("--port", type=int, default=None, help="Listen port (default: env PORT or 5000)")
    server.add_argument("--debug", action="store_true", help="Flask debug mode")
    commands.add_parser("init-db", parents=[db_flag], help="Create tables and seed the item catalog")
    commands.add_parser("purge-gates", parents=[db_flag], help="Delete expired gate rows")

    return parser.parse_args(argv or ["server"])


def _print_banner(host: str, port: int, db_label: str):
    rule = _paint(Fore.MAGENTA, "=" * 40)
    rows = [("Host:", host), ("Port:", port), ("Database:", db_label), ("WebSockets:", "enabled")]
    print(rule)
    print("  " + _paint(Fore.CYAN + Style.BRIGHT, "Gatehunt Server Bootup"))
    print(rule)
    for name, val in rows:
        print(f"  {_paint(Fore.YELLOW, name):12} {_paint(Fore.GREEN, val)}")
    print(rule)
    print()


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if args.env_file:
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    # Must be in the environment before gatehunt is first imported
    if getattr(args, "db_uri", None):
        os.environ["DATABASE_URL"] = args.db_uri
    db_label = os.getenv("DATABASE_URL") or "auto (instance/gatehunt.db)"

    from gatehunt import server
    from gatehunt.logging_utils import configure, log

    if args.log_level:
        configure(level=args.log_level)

    if args.command == "init-db":
        added = server.init_db()
        print(f"{_paint(Fore.YELLOW, 'Database:')} {_paint(Fore.GREEN, db_label)}")
        print(f"{_paint(Fore.YELLOW, 'Items seeded:')} {_paint(Fore.GREEN, added)}")
        return 0
    if args.command == "purge-gates":
        removed = server.purge_gates()
        print(f"{_paint(Fore.YELLOW, 'Expired gates removed:')} {_paint(Fore.GREEN, removed)}")
        return 0

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))

    def _on_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, _on_sigint)
    _print_banner(host, port, db_label)
    log.info(event="startup", host=host, port=port, db=db_label)
    server.start_server(host=host, port=port, debug=getattr(args, "debug", False))
    return 0


def cli():
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()
