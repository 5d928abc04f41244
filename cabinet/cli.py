"""
Command line entry point.

Prints the resolved path of one dependency (or an empty line):

    cabinet --directory src --filename src/app.js ./util
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import find_config_file, load_config
from .dispatcher import resolve


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cabinet",
        usage="%(prog)s [options] <path>",
        description="Resolve a dependency specifier to the file it refers to",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cabinet -d src -f src/app.js ./util
  cabinet -d src -f src/main.js -c src/require.config.json jquery
  cabinet -d . -f src/index.ts -t tsconfig.json @app/models
        """
    )

    parser.add_argument("dependency", nargs="?", help="Dependency specifier to resolve")
    parser.add_argument("-d", "--directory", help="Root of all files")
    parser.add_argument("-c", "--config", help="Location of a RequireJS config file for AMD")
    parser.add_argument("-w", "--webpack-config", help="Location of a webpack config file")
    parser.add_argument("-t", "--ts-config", help="Location of a tsconfig file")
    parser.add_argument("-f", "--filename", help="File containing the dependency")
    parser.add_argument("--entry", help="package.json field to use instead of \"main\"")
    parser.add_argument(
        "--no-type-definitions",
        action="store_true",
        default=None,
        help="Prefer compiled .js files over .d.ts files"
    )
    parser.add_argument("--project-config", help="Path to a cabinet YAML config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log resolution traces to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.filename:
        parser.error("--filename is required")

    config_path = args.project_config or find_config_file(args.filename)
    config = load_config(config_path)

    level = logging.DEBUG if args.verbose else getattr(logging, str(config.log_level).upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(name)s: %(message)s", stream=sys.stderr)
    if config_path:
        logging.getLogger(__name__).debug(f"Using config: {config_path}")

    no_type_definitions = args.no_type_definitions
    if no_type_definitions is None:
        no_type_definitions = config.no_type_definitions

    entry = args.entry or config.node_modules_entry

    result = resolve(
        args.dependency,
        args.filename,
        args.directory or config.directory or "",
        config=args.config or config.amd_config,
        webpack_config=args.webpack_config or config.webpack_config,
        ts_config=args.ts_config or config.ts_config,
        node_modules_config={"entry": entry} if entry else None,
        no_type_definitions=no_type_definitions,
    )

    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
