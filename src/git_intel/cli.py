import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .config import CONFIG_FILE_PATH, load_config, write_skeleton
from .errors import GitIntelError
from .fetch import fetch
from .logging_config import setup_logging
from .resolve import resolve_references

logger = logging.getLogger(__name__)


def _github_token() -> Optional[str]:
    token = os.environ.get("GITHUB_TOKEN")
    if not token:
        logger.info("GITHUB_TOKEN not set, using the GitHub API unauthenticated")
        return None
    return token


def fetch_cmd(args: argparse.Namespace) -> None:
    """Fetch github repos, clone them to the configured directories.

    Repositories are given by URL or by organization in the config file,
    organizations are expanded to all of their repositories.
    """
    config = load_config(args.config)
    fetch(config, _github_token(), dry_run=args.dry_run, select=args.select)


def config_gen_cmd(args: argparse.Namespace) -> None:
    """Generate a skeleton TOML configuration file."""
    write_skeleton(args.output, force=args.force)


def resolve_cmd(args: argparse.Namespace) -> None:
    """Print the repositories each GitHub URL stands for."""
    resolved = resolve_references(args.url, _github_token(), load_config(args.config).listing)
    for url, repos in zip(args.url, resolved):
        print(url)
        for repo in repos:
            print(f"  {repo}")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="git-intel",
        description="extracts information from a github org's private and public git repositories",
    )
    parser.add_argument("--version", action="version", version=f"git-intel {__version__}")
    parser.add_argument("-c", "--config", type=Path, metavar="FILE", help="config file")
    parser.add_argument("--debug", action="store_true", help="Set log level as DEBUG")

    sub = parser.add_subparsers(dest="command", metavar="<command>")

    cmd = sub.add_parser(
        "fetch",
        help="Fetch github repos, clone them to specified directories",
        description=fetch_cmd.__doc__,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    cmd.add_argument("--dry-run", action="store_true", help="Only print what would be cloned")
    cmd.add_argument("--select", action="store_true", help="Pick the repos to clone")
    cmd.set_defaults(handler=fetch_cmd)

    cmd = sub.add_parser("config-gen", help=config_gen_cmd.__doc__)
    cmd.add_argument(
        "-o", "--output", type=Path, default=CONFIG_FILE_PATH, metavar="FILE",
        help=f"Where to write the config (default: {CONFIG_FILE_PATH})",
    )
    cmd.add_argument("--force", action="store_true", help="Overwrite an existing file")
    cmd.set_defaults(handler=config_gen_cmd)

    cmd = sub.add_parser("resolve", help=resolve_cmd.__doc__)
    cmd.add_argument("url", nargs="+", help="GitHub repository or organization URL")
    cmd.set_defaults(handler=resolve_cmd)

    args = parser.parse_args(argv)
    args.parser = parser
    return args


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    if not args.command:
        args.parser.print_help()
        sys.exit(0)

    setup_logging(args.debug)
    logger.debug(f"{args=}")

    try:
        args.handler(args)
    except GitIntelError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
