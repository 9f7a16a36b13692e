"""
CLI — Command interface

    projmerge <input project file> <output project file>

Merges the input project and every project it references into the output
project. Paths may be relative or absolute. Fewer than two paths, or a
help flag, prints usage.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigManager
from .core.merger import ItemStatus, merge_file
from .core.xmldoc import get_include, local_name
from .errors import ProjMergeError
from .presentation.symbols import SymbolSet, get_symbols, safe_print
from . import __version__


PROG = "projmerge"
HELP_FLAGS = ("-h", "--help", "-?", "/?", "/h", "/help")
VERSION_FLAGS = ("-V", "--version")

DESCRIPTION = "Merge an MSBuild project and its referenced projects into a single project."
EPILOG = f"""Examples:

    {PROG} c:\\myproj1\\myproject1.csproj c:\\myproj2\\myproject2.csproj

    Merges myproject1 and its references into myproject2.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('input', help='Input .csproj/.vbproj file path')
    parser.add_argument('output', help='Output project file path')
    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Only print the summary'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Also print skipped and duplicate items'
    )
    parser.add_argument(
        '--remove-strong-name',
        action='store_true',
        help='Drop assembly signing from the merged project'
    )
    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'{PROG} {__version__}'
    )
    return parser


def help_requested(argv: List[str]) -> bool:
    """Help flag given, or fewer than two paths (version flags excepted)."""
    if any(arg.lower() in HELP_FLAGS for arg in argv):
        return True
    if any(arg in VERSION_FLAGS for arg in argv):
        return False
    positionals = [arg for arg in argv if not arg.startswith('-')]
    return len(positionals) < 2


class ProgressPrinter:
    """Prints merge progress lines for ProjectMerger callbacks."""

    SKIP_REASONS = {
        ItemStatus.DUPLICATE: "already present",
        ItemStatus.IDENTITY_METADATA: "assembly identity metadata",
        ItemStatus.FRAMEWORK: "framework library",
    }

    def __init__(self, symbols: SymbolSet, quiet: bool = False, verbose: bool = False):
        self.symbols = symbols
        self.quiet = quiet
        self.verbose = verbose

    def on_project(self, project) -> None:
        if self.quiet:
            return
        safe_print(f"{self.symbols.bullet} {project.file_path}")

    def on_item(self, element, origin, status: ItemStatus) -> None:
        if self.quiet:
            return
        line = f"{local_name(element)}: {get_include(element)}"
        if status in (ItemStatus.REBASED, ItemStatus.ADDED):
            safe_print(line)
        elif self.verbose:
            safe_print(f"  {self.symbols.skipped} {line} ({self.SKIP_REASONS[status]})")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for projmerge.

    Returns:
        Process exit code (0 on success, 1 on a fatal error)
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()

    safe_print(f"{PROG} {__version__} -- {DESCRIPTION}")
    safe_print("")

    if help_requested(argv):
        parser.print_help()
        return 0

    args = parser.parse_args(argv)

    input_path = os.path.abspath(args.input)
    output_path = os.path.abspath(args.output)

    safe_print(f"Input       : {input_path}")
    safe_print(f"Output      : {output_path}")
    safe_print("")

    config = ConfigManager(Path(input_path).parent).load()
    if args.remove_strong_name:
        config.merge.remove_strong_name = True
    if args.quiet:
        config.display.quiet = True

    symbols = get_symbols(config.display.symbols)

    error = config.validate()
    if error:
        safe_print(f"{symbols.check_fail} Error: {error}", file=sys.stderr)
        return 1

    printer = ProgressPrinter(symbols, quiet=config.display.quiet, verbose=args.verbose)

    try:
        result = merge_file(
            input_path,
            output_path,
            config=config.merge,
            on_item=printer.on_item,
            on_project=printer.on_project,
        )
    except (ProjMergeError, OSError) as e:
        safe_print(f"{symbols.check_fail} Error: {e}", file=sys.stderr)
        return 1

    safe_print("")
    safe_print(f"{symbols.check_pass} {result.summary}")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
