"""Autoreload CLI — autoreload watch / autoreload script.

Entry point for the ``autoreload`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the autoreload CLI."""
    parser = argparse.ArgumentParser(
        prog="autoreload",
        description="Reload connected browsers when watched files change.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # autoreload watch
    watch_parser = subparsers.add_parser(
        "watch",
        help="Watch paths and push reloads over WebSocket",
    )
    watch_parser.add_argument("paths", nargs="*", help="Paths to watch")
    watch_parser.add_argument("--port", type=int, default=None, help="WebSocket port")
    watch_parser.add_argument("--host", default=None, help="WebSocket bind address")
    watch_parser.add_argument(
        "--events",
        default="change",
        help="Comma-separated event kinds for the given paths (change,add,addDir)",
    )
    watch_parser.add_argument(
        "--config-root",
        default=".",
        help="Directory holding autoreload.yaml / autoreload.toml",
    )
    watch_parser.add_argument(
        "--log-file", action="store_true", help="Log which file triggered each reload",
    )
    watch_parser.add_argument(
        "--no-log-reload", action="store_true", help="Don't log reload notices",
    )
    watch_parser.add_argument(
        "--no-log-listen", action="store_true", help="Don't log the listening address",
    )

    # autoreload script
    script_parser = subparsers.add_parser(
        "script",
        help="Print the client script with the port filled in",
    )
    script_parser.add_argument("--port", type=int, default=None, help="WebSocket port")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from autoreload import __version__

    return __version__


def _watch_overrides(args: argparse.Namespace) -> dict[str, object]:
    """Translate parsed ``watch`` arguments into AutoreloadConfig overrides."""
    from autoreload.config import LogSettings, WatchTarget

    overrides: dict[str, object] = {"port": args.port, "host": args.host}

    if args.paths:
        events = tuple(e.strip() for e in args.events.split(",") if e.strip())
        overrides["paths"] = tuple(
            WatchTarget(path=Path(p), events=events) for p in args.paths  # type: ignore[arg-type]
        )

    if args.log_file or args.no_log_reload or args.no_log_listen:
        overrides["log"] = LogSettings(
            listen=not args.no_log_listen,
            reload=not args.no_log_reload,
            file=args.log_file,
        )

    return overrides


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from autoreload._errors import AutoreloadError

    try:
        if args.command == "watch":
            from autoreload.app import watch
            from autoreload.config_loader import load_config

            config = load_config(Path(args.config_root), **_watch_overrides(args))
            if not config.paths:
                parser.error("nothing to watch: pass paths or set 'paths' in autoreload.yaml")
            watch(config)
        elif args.command == "script":
            from autoreload.config import DEFAULT_PORT
            from autoreload.serve.asset import load_client_script

            port = args.port if args.port is not None else DEFAULT_PORT
            sys.stdout.write(load_client_script(port))
    except AutoreloadError as exc:
        print(f"autoreload: error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
