"""
Preprocessors and the preprocessing run.

Subclasses of Preprocessor set `name` and `renderers` and implement
`run()`. handle_preprocessing() drives one handshake:
read → version check → run → write.
"""

import sys
from abc import ABC, abstractmethod

from rfcbook import MDBOOK_VERSION
from rfcbook.errors import (
    DecodeError,
    EncodeError,
    PreprocessorError,
    VersionParseError,
)
from rfcbook.handshake import parse_input, write_output
from rfcbook.version import check_compatibility


class Preprocessor(ABC):
    """
    Abstract base for preprocessors.

    Subclasses must define:
        name:       str   — the [preprocessor.<name>] table it reads
        renderers:  tuple — renderer names it supports (exact match)
        run():      method — transform and return the book
    """

    name = None       # Override in subclass
    renderers = ()    # Override in subclass

    def options(self, context):
        """This preprocessor's table from the book config, if any."""
        return context.config.get_preprocessor(self.name)

    def supports_renderer(self, renderer):
        return renderer in self.renderers

    @abstractmethod
    def run(self, context, book):
        """
        Transform the book. Returns the new book; raises
        PreprocessorError to abort the build.
        """
        ...


class RfcPreprocessor(Preprocessor):
    """Leaves the book untouched."""

    name = "rfc"
    renderers = ("rfc",)

    def run(self, context, book):
        # Setting `blow-up` in [preprocessor.rfc] forces a failure so
        # mdbook's handling of a failing preprocessor can be exercised.
        options = self.options(context)
        if options is not None and "blow-up" in options:
            raise PreprocessorError("Boom!!1!")

        return book


PREPROCESSORS = {
    "rfc": RfcPreprocessor,
}

DEFAULT_PREPROCESSOR = "rfc"


# ── Handshake run ──────────────────────────────────────────────────────


def handle_preprocessing(pre, stdin=None, stdout=None, stderr=None):
    """
    Run one preprocessor handshake.

    Nothing reaches stdout unless every step before the write succeeded.
    """
    if stdin is None:
        stdin = sys.stdin
    if stdout is None:
        stdout = sys.stdout
    if stderr is None:
        stderr = sys.stderr

    try:
        context, book = parse_input(stdin)
    except DecodeError as e:
        raise DecodeError("Could not parse command input.") from e

    try:
        check_compatibility(
            MDBOOK_VERSION,
            context.mdbook_version,
            pre.name,
            warn=lambda msg: print(msg, file=stderr, flush=True),
        )
    except VersionParseError as e:
        raise VersionParseError("Could not parse book version.") from e

    try:
        processed = pre.run(context, book)
    except PreprocessorError as e:
        raise PreprocessorError("Could not preprocess book.") from e

    try:
        write_output(processed, stdout)
    except EncodeError as e:
        raise EncodeError("Could not write preprocessed book.") from e

    return processed


def handle_supports(pre, renderer):
    """Exit status for `supports`: 0 if the renderer is supported, else 1."""
    return 0 if pre.supports_renderer(renderer) else 1
