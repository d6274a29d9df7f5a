"""
CLI commands for resolving and caching XML resources.
"""

import argparse
import logging
import sys

from .config import ResolverSettings
from .downloader import DownloadError
from .resolver import ResourceKind, UnsupportedResourceError, obtain_type_from_url
from .retrievers import RetrieveError


def setup_logging(verbose: bool = False, level_name: str = "INFO"):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def build_settings(args) -> ResolverSettings:
    """Merge command line overrides into environment settings."""
    settings = ResolverSettings.from_env()
    if args.local_path is not None:
        settings.local_path = args.local_path
    if args.timeout is not None:
        settings.timeout = args.timeout
    return settings


def cmd_resolve(args):
    """Resolve a resource to a local path, downloading it if needed."""
    settings = build_settings(args)
    setup_logging(args.verbose, settings.log_level)

    resolver = settings.create_resolver()
    try:
        local = resolver.resolve(args.resource, args.type)
    except (UnsupportedResourceError, DownloadError, RetrieveError, ValueError) as e:
        print(f"✗ {e}")
        return 1
    print(local)
    return 0


def cmd_path(args):
    """Show where a resource is cached without downloading it."""
    settings = build_settings(args)
    setup_logging(args.verbose, settings.log_level)

    resolver = settings.create_resolver()
    try:
        print(resolver.build_path(args.resource, args.type))
    except (UnsupportedResourceError, ValueError) as e:
        print(f"✗ {e}")
        return 1
    return 0


def cmd_kind(args):
    """Print the kind detected from the resource extension."""
    kind = obtain_type_from_url(args.resource)
    if kind is ResourceKind.UNKNOWN:
        print("UNKNOWN")
        return 1
    print(kind.value)
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Resolve remote XSD/XSLT resources to a local cache",
        prog="xml-resolver"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--local-path",
        default=None,
        help="Cache directory (empty string disables caching)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Download timeout in seconds"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve a resource, downloading it on first use"
    )
    resolve_parser.add_argument("resource", help="Resource URL")
    resolve_parser.add_argument(
        "--type",
        default="",
        help="Resource kind (XSD or XSLT); detected from the extension when omitted"
    )
    resolve_parser.set_defaults(func=cmd_resolve)

    path_parser = subparsers.add_parser(
        "path",
        help="Show the local path of a resource without downloading"
    )
    path_parser.add_argument("resource", help="Resource URL")
    path_parser.add_argument("--type", default="", help="Resource kind (XSD or XSLT)")
    path_parser.set_defaults(func=cmd_path)

    kind_parser = subparsers.add_parser(
        "kind",
        help="Detect the resource kind from its extension"
    )
    kind_parser.add_argument("resource", help="Resource URL")
    kind_parser.set_defaults(func=cmd_kind)

    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
