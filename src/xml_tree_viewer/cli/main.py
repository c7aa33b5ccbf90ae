"""Main CLI entry point for the xml-tree-viewer command-line tool.

Renders an XML or DTD file into one of the viewer's representations and
writes it to stdout or a file.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Tuple, Union

from xml_tree_viewer import __version__
from xml_tree_viewer.api import RenderResult, XMLTreeViewer
from xml_tree_viewer.dtd import build_skeleton
from xml_tree_viewer.parsing import decode_document
from xml_tree_viewer.shared import (
    ConfigError,
    ViewerConfig,
    XMLTreeError,
    configure_logging,
    get_logger,
)

STDIN_PATH = "-"
PRESETS = ("default", "legacy", "compact")

logger = get_logger(__name__, component="cli")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-tree-viewer",
        description="Render XML documents as outlines, JSON and Mermaid diagrams, "
                    "and generate skeleton documents from DTDs"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    commands = (
        ("outline", "Print the connector-annotated text outline"),
        ("json", "Print the object view as JSON"),
        ("mermaid", "Print Mermaid flowchart markup"),
        ("skeleton", "Generate a skeleton XML document from a DTD"),
        ("render", "Print every representation as one JSON document"),
    )
    for name, help_text in commands:
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument(
            "path",
            help="Input file, or - to read standard input"
        )
        command_parser.add_argument(
            "--output", "-o",
            type=Path,
            help="Output file (default: stdout)"
        )
        command_parser.add_argument(
            "--file-name",
            help="Name for standard input, used to detect DTD input"
        )

    # Global options
    parser.add_argument(
        "--preset",
        choices=PRESETS,
        default="default",
        help="Configuration preset (default: default)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="ViewerConfig JSON file, overrides --preset"
    )
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

    return parser


def load_config(args: argparse.Namespace) -> ViewerConfig:
    """Build the viewer configuration from command-line options.

    Raises:
        ConfigError: If the configuration file is invalid
        OSError: If the configuration file cannot be read
    """
    if args.config:
        try:
            return ViewerConfig.from_json(args.config.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration file {args.config}: {e}") from e
    return getattr(ViewerConfig, args.preset)()


def read_input(path: str, file_name: Optional[str]) -> Tuple[Union[str, bytes], str]:
    """Read the input document.

    Args:
        path: File path or ``-`` for standard input
        file_name: Optional name overriding the one derived from the path

    Returns:
        Tuple of the content and the file name used for rendering. Files
        are read as bytes so their declared encoding applies; standard input
        is already text
    """
    if path == STDIN_PATH:
        return sys.stdin.read(), file_name or "stdin.xml"
    path_obj = Path(path)
    return path_obj.read_bytes(), file_name or path_obj.name


def write_output(text: str, output: Optional[Path]) -> None:
    """Write command output to a file or stdout."""
    if not text.endswith("\n"):
        text += "\n"
    if output:
        output.write_text(text, encoding="utf-8")
        print(f"Output written to {output}", file=sys.stderr)
    else:
        sys.stdout.write(text)


def format_result(command: str, result: RenderResult) -> str:
    """Select the representation a command prints."""
    if command == "outline":
        return result.outline
    if command == "json":
        return result.json_text
    if command == "mermaid":
        return result.diagram
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)


def cmd_skeleton(args: argparse.Namespace, config: ViewerConfig) -> int:
    """Handle skeleton command."""
    content, _ = read_input(args.path, args.file_name)
    try:
        skeleton = build_skeleton(decode_document(content), config.skeleton)
    except XMLTreeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    write_output(skeleton, args.output)
    return 0


def cmd_render(args: argparse.Namespace, config: ViewerConfig) -> int:
    """Handle outline, json, mermaid and render commands."""
    content, file_name = read_input(args.path, args.file_name)
    result = XMLTreeViewer(config).render(content, file_name=file_name)

    if not result.success:
        print(f"Error: {result.error_message}", file=sys.stderr)
        return 1

    write_output(format_result(args.command, result), args.output)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args)
    except (ConfigError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Set up logging verbosity
    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")
    else:
        configure_logging(config.global_.logging_level)

    logger.debug("CLI command started", extra={"command": args.command, "path": args.path})

    try:
        if args.command == "skeleton":
            return cmd_skeleton(args, config)
        return cmd_render(args, config)

    except OSError as e:
        logger.error("File access failed", extra={"command": args.command, "error": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
