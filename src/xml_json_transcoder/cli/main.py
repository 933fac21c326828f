"""Main CLI entry point for the xml-json-transcoder command-line tool.

Converts one or more XML files to JSON, either to stdout, to a single output
file, or to ``.json`` files in an output directory.
"""

import argparse
import sys
import xml.sax
from pathlib import Path
from typing import Iterator, List, Optional

from lxml import etree

from xml_json_transcoder import __version__
from xml_json_transcoder.api.parser import XMLJSONTranscoder
from xml_json_transcoder.shared.config import (
    SUPPORTED_PARSERS,
    ConfigError,
    TranscoderConfig,
)
from xml_json_transcoder.shared.errors import TranscoderError
from xml_json_transcoder.shared.logging import configure_logging, get_logger

_CONVERSION_ERRORS = (
    TranscoderError,
    xml.sax.SAXException,
    etree.LxmlError,
    OSError,
    UnicodeError,
)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-json-transcoder",
        description="Convert XML documents to JSON",
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    convert_parser = subparsers.add_parser("convert", help="Convert XML files to JSON")
    convert_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files or directories to convert"
    )
    convert_parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Recursively process directories"
    )
    layout = convert_parser.add_mutually_exclusive_group()
    layout.add_argument(
        "--indent", "-i",
        type=int,
        metavar="N",
        help="Indent output by N spaces per level"
    )
    layout.add_argument(
        "--compact",
        action="store_true",
        help="Compact output without whitespace (default)"
    )
    destination = convert_parser.add_mutually_exclusive_group()
    destination.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file for a single input (default: stdout)"
    )
    destination.add_argument(
        "--output-dir", "-d",
        type=Path,
        help="Directory receiving one .json file per input"
    )
    convert_parser.add_argument(
        "--parser", "-p",
        choices=SUPPORTED_PARSERS,
        help="XML parser backend (default: sax)"
    )
    convert_parser.add_argument(
        "--encoding", "-e",
        help="Output encoding (default: utf-8)"
    )
    convert_parser.add_argument(
        "--text-key",
        help="JSON member name for element text (default: content)"
    )
    convert_parser.add_argument(
        "--keep-whitespace",
        action="store_true",
        help="Keep whitespace-only text between elements"
    )
    convert_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path (JSON)"
    )

    return parser


def build_config(args: argparse.Namespace) -> TranscoderConfig:
    """Load the configuration file, if any, and apply command-line overrides."""
    config = TranscoderConfig.from_file(args.config) if args.config else TranscoderConfig()

    overrides = {}
    if args.indent is not None:
        overrides["compact"] = False
        overrides["indent_width"] = args.indent
    elif args.compact:
        overrides["compact"] = True
    if args.parser:
        overrides["parser"] = args.parser
    if args.encoding:
        overrides["encoding"] = args.encoding
    if args.text_key:
        overrides["text_key"] = args.text_key
    if args.keep_whitespace:
        overrides["skip_whitespace_text"] = False

    return config.override(**overrides) if overrides else config


def find_xml_files(path: Path, recursive: bool = False) -> Iterator[Path]:
    """Yield XML files under ``path`` (or ``path`` itself if it is a file)."""
    if path.is_file():
        yield path
    elif path.is_dir():
        pattern = "**/*.xml" if recursive else "*.xml"
        yield from sorted(path.glob(pattern))


def cmd_convert(args: argparse.Namespace) -> int:
    """Handle convert command."""
    logger = get_logger(__name__, None, "cli")

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    files: List[Path] = []
    for path in args.paths:
        if not path.exists():
            print(f"File not found: {path}", file=sys.stderr)
            return 1
        files.extend(find_xml_files(path, args.recursive))

    if not files:
        print("No XML files found", file=sys.stderr)
        return 1
    if len(files) > 1 and not args.output_dir:
        print("Multiple inputs require --output-dir", file=sys.stderr)
        return 1

    try:
        transcoder = XMLJSONTranscoder(config)
    except TranscoderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output_dir:
        args.output_dir.mkdir(parents=True, exist_ok=True)

    failures = 0
    for path in files:
        try:
            if args.output_dir:
                output_path = args.output_dir / path.with_suffix(".json").name
                metrics = transcoder.transcode_file(path, output_path)
            elif args.output:
                metrics = transcoder.transcode_file(path, args.output)
            else:
                metrics = transcoder.transcode(path, sys.stdout.buffer)
                sys.stdout.buffer.write(b"\n")
                sys.stdout.buffer.flush()
        except _CONVERSION_ERRORS as e:
            failures += 1
            print(f"Error converting {path}: {e}", file=sys.stderr)
            continue

        logger.debug(
            "Converted file",
            extra={"file": str(path), **metrics.to_dict()},
        )

    return 0 if failures == 0 else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        if args.command == "convert":
            return cmd_convert(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
