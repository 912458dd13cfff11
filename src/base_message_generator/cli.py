"""Command-line interface for generating message types from declaration files.

Notes:
    - Python declaration files are matched by `*_messages.py`, capnp schemas by `*.capnp`.
    - The generated modules import the shared interface from `base_message_generator.messages`.
"""

from __future__ import annotations

import argparse
import logging
import os.path
from collections.abc import Sequence

from base_message_generator.declaration import DerivationError
from base_message_generator.run import run

logger = logging.getLogger(__name__)


def _add_recursive_argument(parser: argparse.ArgumentParser):
    """Add a recursive argument to a parser.

    Args:
        parser (argparse.ArgumentParser): The parser to add the argument to.
    """
    parser.add_argument(
        "-r",
        "--recursive",
        dest="recursive",
        default=False,
        action="store_true",
        help="recursively search for declaration files with a given glob expression.",
    )


def setup_parser() -> argparse.ArgumentParser:
    """Setup for the parser.

    Returns:
        argparse.ArgumentParser: The parser after setup.
    """
    parser = argparse.ArgumentParser(description="Generate BaseMessage implementations for message declarations.")

    parser.add_argument(
        "-c",
        "--clean",
        type=str,
        nargs="+",
        default=[],
        help="path or glob expressions that match files to clean up before generation.",
    )

    parser.add_argument(
        "-p",
        "--paths",
        type=str,
        nargs="+",
        default=["**/*_messages.py", "**/*.capnp"],
        help="path or glob expressions that match declaration files (*_messages.py, *.capnp).",
    )

    parser.add_argument(
        "-e",
        "--excludes",
        type=str,
        nargs="+",
        default=[],
        help="path or glob expressions to exclude from path matches.",
    )

    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        default="",
        help="directory to write all generated modules; defaults to alongside each declaration file if omitted.",
    )

    parser.add_argument(
        "-I",
        "--import-path",
        dest="import_paths",
        type=str,
        nargs="+",
        default=[],
        help="additional import paths for resolving absolute imports in capnp schemas (e.g., /capnp/c++.capnp).",
    )

    parser.add_argument(
        "--no-pyright",
        dest="skip_pyright",
        default=False,
        action="store_true",
        help="skip pyright validation of generated modules.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        default=False,
        action="store_true",
        help="log debug output.",
    )

    _add_recursive_argument(parser)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the message generator.

    Args:
        argv (Sequence[str] | None, optional): Run arguments. Defaults to None.

    Returns:
        int: Error code.
    """
    parser = setup_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    root_directory = os.getcwd()
    logging.info("Working from root directory: %s", root_directory)

    try:
        run(args, root_directory)
    except DerivationError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    return 0
