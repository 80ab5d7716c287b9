"""
Main Entry Point for the destructure CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in ``destructure.cli.commands``.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from destructure.cli import commands
from destructure.utils.console import configure_logging
from destructure import __version__


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="destructure: companion types and scoped mutation for record classes")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output from the generator")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: EXPAND ---
  cmd_exp = subparsers.add_parser("expand", help="Write the generated code into a Python file or directory")
  cmd_exp.add_argument("path", type=Path, help="Input source file or directory")
  cmd_exp.add_argument("--out", type=Path, help="Output destination (file or dir). Prints to stdout if omitted.")
  cmd_exp.add_argument("--prefix", default=None, help="Companion type prefix (default: from toml, else 'Destruct')")
  cmd_exp.add_argument(
    "--no-imports",
    action="store_true",
    help="Do not add 'import dataclasses' / 'import typing' to expanded modules",
  )

  # --- Command: CHECK ---
  cmd_check = subparsers.add_parser("check", help="Report diagnostics for annotated classes without writing")
  cmd_check.add_argument("path", type=Path, help="Input source file or directory")
  cmd_check.add_argument("--prefix", default=None, help="Companion type prefix (default: from toml)")

  # --- Command: INSPECT ---
  cmd_insp = subparsers.add_parser("inspect", help="Show the record models extracted from annotated classes")
  cmd_insp.add_argument("path", type=Path, help="Input source file")
  cmd_insp.add_argument("--json", action="store_true", help="Print models as JSON")

  args = parser.parse_args(argv)
  configure_logging(args.verbose)

  if args.command == "expand":
    return commands.handle_expand(args.path, args.out, args.prefix, False if args.no_imports else None)

  elif args.command == "check":
    return commands.handle_check(args.path, args.prefix)

  elif args.command == "inspect":
    return commands.handle_inspect(args.path, args.json)

  return 0


if __name__ == "__main__":
  sys.exit(main())
