#!/usr/bin/env python3

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from asesheet import commands, config, logging_setup
from asesheet.errors import SheetError


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return value


def _tag_list(text: str) -> List[str]:
    names = text.split(",")
    if not all(names):
        raise argparse.ArgumentTypeError(f"empty tag name in {text!r}")
    return names


def _add_tags(parser: argparse.ArgumentParser):
    parser.add_argument(
        "-t",
        "--tags",
        type=_tag_list,
        action="extend",
        required=True,
        help="Tag names, comma separated and/or repeated",
    )


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asesheet",
        description="Extract frames from Aseprite files as PNG images",
    )
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    verbs = parser.add_subparsers(dest="verb", required=True)

    convert = verbs.add_parser(
        "convert", help="Convert a single-frame Aseprite file to PNG"
    )
    convert.add_argument("input_file", type=Path, help="Aseprite file to read")
    convert.add_argument("output_file", type=Path, help="PNG file to write")

    assemble = verbs.add_parser(
        "assemble", help="Lay out frames from tags as a sprite sheet PNG"
    )
    assemble.add_argument("input_file", type=Path, help="Aseprite file to read")
    assemble.add_argument("output_file", type=Path, help="PNG file to write")
    _add_tags(assemble)
    assemble.add_argument(
        "-n",
        "--number-of-frames-from-each",
        type=_positive_int,
        default=1,
        help="Frames to take from the start of each tag",
    )
    assemble.add_argument(
        "-c",
        "--columns",
        type=_positive_int,
        help="Sheet width in cells (default: all in one row)",
    )

    separate = verbs.add_parser(
        "separate", help="Write the first frame of each tag as <tag>.png"
    )
    separate.add_argument("input_file", type=Path, help="Aseprite file to read")
    separate.add_argument(
        "output_directory", type=Path, help="Existing directory for PNGs"
    )
    _add_tags(separate)

    info = verbs.add_parser("info", help="Show canvas size, frames and tags")
    info.add_argument("input_file", type=Path, help="Aseprite file to read")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = make_parser().parse_args(argv)
    if args.debug:
        logging_setup.enable_debug()

    try:
        if args.verb == "convert":
            commands.convert(
                config.ConvertJob(
                    input_path=args.input_file, output_path=args.output_file
                )
            )
        elif args.verb == "assemble":
            commands.assemble(
                config.AssembleJob(
                    input_path=args.input_file,
                    output_path=args.output_file,
                    tags=args.tags,
                    frames_per_tag=args.number_of_frames_from_each,
                    columns=args.columns,
                )
            )
        elif args.verb == "separate":
            commands.separate(
                config.SeparateJob(
                    input_path=args.input_file,
                    output_dir=args.output_directory,
                    tags=args.tags,
                )
            )
        elif args.verb == "info":
            print(commands.info(config.InfoJob(input_path=args.input_file)))
    except SheetError as exc:
        logging.error(f"{args.verb} failed: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
