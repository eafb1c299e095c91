"""
Command-line interface.

Usage:
    mdcontext                              Build src/ into book.tex
    mdcontext mybook/src out/mybook.tex    Build a given book into a given file
    mdcontext src book.tex --pdf           Also run ConTeXt on the result
    mdcontext src --strict                 Fail on broken nesting / ragged tables
    mdcontext check src                    Report problems without writing anything

Exit status is 0 on success and 1 on any failure.
"""

import argparse
import os
import sys
import traceback

from mdcontext.builders import BUILDERS, DEFAULT_FORMATS
from mdcontext.check import BookChecker
from mdcontext.config import BookConfig
from mdcontext.errors import ConfigError


DEFAULT_DIRECTORY = "src"
DEFAULT_OUT_FILE = "book.tex"


# ── Resolve book ───────────────────────────────────────────────────────


def resolve_book(directory):
    """Check the book directory and load its config. Returns (None, None) on failure."""
    if not os.path.isdir(directory):
        print(f"Error: book directory '{directory}' not found", file=sys.stderr)
        return None, None

    try:
        config = BookConfig.load(directory)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None, None

    return directory, config


# ── Build command ──────────────────────────────────────────────────────


def cmd_build(args):
    """Build the ConTeXt file, and the PDF if asked."""
    book_dir, config = resolve_book(args.directory)
    if config is None:
        return 1

    config.override(
        strict=True if args.strict else None,
        footnotes=False if args.no_footnotes else None,
    )

    formats = list(DEFAULT_FORMATS)
    if args.pdf:
        formats.append("pdf")

    config.print_summary()
    print(f"  Output:  {args.out_file}")

    results = {}
    for fmt in formats:
        builder = BUILDERS[fmt](
            config=config,
            book_dir=book_dir,
            tex_file=args.out_file,
            verbose=args.verbose,
        )
        results[fmt] = builder.build()
        # later formats are built from the earlier ones
        if not results[fmt]:
            break

    # Summary
    print(f"\n{'─' * 60}")
    failed = [fmt for fmt, ok in results.items() if not ok]
    if failed:
        print(f"  Done with errors: {', '.join(failed)} failed", file=sys.stderr)
        return 1

    print(f"  Done. {len(results)} format(s) built successfully.")
    return 0


# ── Check command ──────────────────────────────────────────────────────


def cmd_check(args):
    """Check the manifest and every document without writing output."""
    book_dir, config = resolve_book(args.directory)
    if config is None:
        return 1

    color = not args.no_color and sys.stdout.isatty()

    print(f"\n  Checking: {book_dir}")
    print(f"  Summary:  {config.summary}")
    print()

    checker = BookChecker(book_dir, config, verbose=args.verbose, color=color)
    return 0 if checker.run() else 1


# ── Argument Parser ────────────────────────────────────────────────────


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mdcontext",
        description="Convert a Markdown book into a single ConTeXt document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s                            Build src/ into book.tex
  %(prog)s guide/src guide.tex        Build another book
  %(prog)s src book.tex --pdf         Build book.tex, then book.pdf
  %(prog)s check src                  Check for problems
        """,
    )

    sub = parser.add_subparsers(dest="command")

    # ── build (default when no subcommand) ─────────────────
    build_p = sub.add_parser("build", help="Build the ConTeXt document (default)")
    _add_directory_arg(build_p)
    build_p.add_argument(
        "out_file",
        nargs="?",
        default=DEFAULT_OUT_FILE,
        help=f"The output ConTeXt file (default: {DEFAULT_OUT_FILE})",
    )
    _add_build_args(build_p)

    # ── check ──────────────────────────────────────────────
    check_p = sub.add_parser("check", help="Check the book without building it")
    _add_directory_arg(check_p)
    check_p.add_argument("--verbose", "-v", action="store_true")
    check_p.add_argument("--no-color", action="store_true", help="Plain output")

    return parser


def _add_directory_arg(parser):
    parser.add_argument(
        "directory",
        nargs="?",
        default=DEFAULT_DIRECTORY,
        help=f"The directory from which to load the book (default: {DEFAULT_DIRECTORY})",
    )


def _add_build_args(parser):
    """Add format flags and build options to a parser."""
    fmt = parser.add_argument_group("output formats")
    fmt.add_argument("--pdf", action="store_true", help="Also build a PDF (requires ConTeXt)")

    opts = parser.add_argument_group("options")
    opts.add_argument(
        "--strict",
        action="store_true",
        help="Fail on broken construct nesting and ragged tables",
    )
    opts.add_argument(
        "--no-footnotes",
        action="store_true",
        help="Treat footnote syntax as plain text",
    )
    opts.add_argument("--verbose", "-v", action="store_true")


# ── Main ───────────────────────────────────────────────────────────────


KNOWN_COMMANDS = {"build", "check"}


def main(argv=None):
    """Parse arguments and run a command. Returns the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()

    # Allow bare "mdcontext src book.tex" without the "build" subcommand:
    # if the first argument isn't a known subcommand or a help flag,
    # prepend "build" so argparse sees "build src book.tex".
    if not argv or (argv[0] not in KNOWN_COMMANDS and argv[0] not in ("-h", "--help")):
        argv = ["build"] + list(argv)

    args = parser.parse_args(argv)

    dispatch = {
        "build": cmd_build,
        "check": cmd_check,
    }
    return dispatch[args.command](args)


def run():
    """Console entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        log_path = "mdcontext_error.log"
        with open(log_path, "w") as f:
            traceback.print_exc(file=f)
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        print(f"Full traceback written to {log_path}", file=sys.stderr)
        sys.exit(1)
