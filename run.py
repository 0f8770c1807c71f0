# -*- coding: utf-8 -*-

"""
Main entry point for converting a Figma document into QML files.
"""

import argparse
import logging
import sys

from figmaqml_toolkit.core.exceptions import FigmaQmlError
from figmaqml_toolkit.core.models import Flags
from figmaqml_toolkit.core.services import ConversionService
from figmaqml_toolkit.logging_config import setup_logging
from figmaqml_toolkit.version import get_app_version


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="figmaqml",
        description="Generate QML files from a Figma file JSON document.",
    )
    parser.add_argument("document", help="Figma file JSON document")
    parser.add_argument("output_dir", help="Directory receiving the .qml files")
    parser.add_argument(
        "--assets",
        help="Folder holding images/, renders/ and components/ for the document",
    )
    parser.add_argument(
        "--flag",
        action="append",
        dest="flags",
        metavar="NAME",
        help="Generation flag (repeatable), e.g. break_booleans. Replaces the configured defaults",
    )
    parser.add_argument(
        "--canvas",
        action="append",
        dest="canvases",
        metavar="NAME",
        help="Only convert this canvas (repeatable)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_app_version()}")
    return parser


def main(argv=None) -> int:
    """
    Configure logging, parse arguments and run the conversion.
    """
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        flags = Flags.from_names(args.flags) if args.flags else None
    except ValueError as e:
        logging.error("%s", e)
        return 2

    service = ConversionService(assets_dir=args.assets, flags=flags)
    try:
        written = service.convert_and_write(args.document, args.output_dir, args.canvases)
    except FigmaQmlError as e:
        logging.error("Conversion failed: %s", e)
        return 1
    except (OSError, ValueError) as e:
        logging.error("%s", e)
        return 1

    for path in written:
        print(path)
    return 0


if __name__ == '__main__':
    code = main()
    logging.info("===== Conversion terminated =====")
    sys.exit(code)
