"""
Command line interface for putioarr.
"""
import argparse
import sys
from typing import List, Optional

from putioarr import __version__
from putioarr.background import start_putioarr
from putioarr.config import default_config_path, generate_config, load_config
from putioarr.errors import PutioarrError
from putioarr.utils.logger import get_logger, setup_logging
from putioarr.utils.token import get_token

logger = get_logger("main")


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--config",
        dest="config_path",
        default=default_config_path(),
        help="Path to config.toml (env: APP_CONFIG_PATH)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="putioarr", description="put.io to sonarr/radarr proxy")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run the proxy")
    _add_config_argument(run_parser)

    subparsers.add_parser("get-token", help="Generate a put.io API token")

    generate_parser = subparsers.add_parser("generate-config", help="Generate config")
    _add_config_argument(generate_parser)

    return parser


def run_command(config_path: str) -> int:
    try:
        config = load_config(config_path)
    except PutioarrError as e:
        setup_logging()
        logger.error(str(e))
        return 1

    setup_logging(config.loglevel)
    try:
        start_putioarr(config)
    except PutioarrError as e:
        logger.error(str(e))
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "run":
        return run_command(args.config_path)
    if args.command == "get-token":
        get_token()
        return 0
    if args.command == "generate-config":
        generate_config(args.config_path, get_token())
        return 0
    return 2


def entrypoint() -> None:
    sys.exit(main())
