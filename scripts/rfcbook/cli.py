"""
Command-line entry point for mdbook-rfc.

Without a subcommand mdbook-rfc acts as an mdbook preprocessor: it reads
the [context, book] handshake on stdin and writes the book to stdout.

Usage:
    mdbook-rfc                          Preprocess (called by mdbook)
    mdbook-rfc supports html            Exit 0 if the renderer is supported
    mdbook-rfc init                     mdbook init + install
    mdbook-rfc install                  Install mdbook and preprocessors, create folders
    mdbook-rfc build                    mdbook build
    mdbook-rfc populate                 Copy text/ into src/ and rewrite SUMMARY.md
    mdbook-rfc new my-rfc -t rfc        New page from template/rfc.md
    mdbook-rfc clean -f path/to/book    mdbook clean + remove public/
    mdbook-rfc watch | serve            mdbook watch / serve

Requires: mdbook and cargo on PATH for the project subcommands.
"""

import argparse
import os
import sys
import traceback

from rfcbook import __version__
from rfcbook.errors import RfcBookError, format_chain
from rfcbook.preprocessor import (
    DEFAULT_PREPROCESSOR,
    PREPROCESSORS,
    handle_preprocessing,
    handle_supports,
)
from rfcbook.project import Project


ERROR_LOG = "mdbook_rfc_error.log"


# ── Command handlers ───────────────────────────────────────────────────


def cmd_supports(args, pre):
    renderer = args.renderer_option or args.renderer
    if renderer is None:
        print("Error: supports needs a renderer name", file=sys.stderr)
        return 2
    return handle_supports(pre, renderer)


def cmd_new(args, pre):
    _project(args).new(args.name, template=args.template)


def _project(args):
    folder = args.folder or os.getcwd()
    return Project(folder, verbose=args.verbose)


def _delegate(method):
    def handler(args, pre):
        getattr(_project(args), method)()
    handler.__name__ = f"cmd_{method}"
    return handler


DISPATCH = {
    "supports": cmd_supports,
    "init": _delegate("init"),
    "install": _delegate("install"),
    "build": _delegate("build"),
    "populate": _delegate("populate"),
    "clean": _delegate("clean"),
    "watch": _delegate("watch"),
    "new": cmd_new,
    "serve": _delegate("serve"),
}


# ── Argument Parser ────────────────────────────────────────────────────


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mdbook-rfc",
        description="mdbook preprocessor and project helper for RFC books",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Run without a subcommand to act as an mdbook preprocessor
(reads [context, book] JSON on stdin, writes the book to stdout).
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_common_args(parser, default=None)

    sub = parser.add_subparsers(dest="command")

    sup_p = sub.add_parser(
        "supports", help="Check whether a renderer is supported by this preprocessor"
    )
    sup_p.add_argument("renderer", nargs="?", help="Renderer name, e.g. html")
    sup_p.add_argument(
        "--renderer", "-r", dest="renderer_option", help="Renderer name (alternative form)"
    )

    simple = [
        ("init", "Initialize RFC book project"),
        ("install", "Install prerequisites and create project folders"),
        ("build", "Build book"),
        ("populate", "Populate source folder and update summary"),
        ("clean", "Clean project"),
        ("watch", "Watch for file modification and build"),
        ("serve", "Serve book"),
    ]
    for name, help_text in simple:
        p = sub.add_parser(name, help=help_text)
        _add_common_args(p, default=argparse.SUPPRESS)

    new_p = sub.add_parser("new", help="Create a new page from template")
    new_p.add_argument("name", help="Page name (file name in the text folder)")
    new_p.add_argument("--template", "-t", default=None, help="Template name (default: page)")
    _add_common_args(new_p, default=argparse.SUPPRESS)

    return parser


def _add_common_args(parser, default):
    """--folder and --verbose, accepted before or after the subcommand."""
    parser.add_argument(
        "--folder", "-f", default=default, help="Book root (default: current directory)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        default=False if default is None else default,
    )


# ── Main ───────────────────────────────────────────────────────────────


def run(argv=None, stdin=None, stdout=None):
    """Parse arguments and dispatch. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    pre = PREPROCESSORS[DEFAULT_PREPROCESSOR]()

    if args.command is None:
        # Raw bytes: the handshake is UTF-8 whatever the locale says
        if stdin is None:
            stdin = getattr(sys.stdin, "buffer", sys.stdin)
        if stdout is None:
            stdout = getattr(sys.stdout, "buffer", sys.stdout)
        handle_preprocessing(pre, stdin=stdin, stdout=stdout)
        return 0

    code = DISPATCH[args.command](args, pre)
    return 0 if code is None else code


def main(argv=None):
    try:
        code = run(argv)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        code = 1
    except RfcBookError as e:
        print("The process could not be completed. Quitting.", file=sys.stderr)
        print(format_chain(e), file=sys.stderr)
        code = 1
    except Exception as e:
        with open(ERROR_LOG, "w") as f:
            traceback.print_exc(file=f)
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        print(f"Full traceback written to {ERROR_LOG}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
