"""
Error types raised by mdbook-rfc.

Every failure surfaces as an RfcBookError subclass. The CLI prints the
error together with the chain of underlying causes and exits non-zero.
"""


class RfcBookError(Exception):
    """Base class for all mdbook-rfc failures."""
    pass


class DecodeError(RfcBookError):
    """Raised when the handshake input is not valid JSON or breaks the schema."""
    pass


class VersionParseError(RfcBookError):
    """Raised when a version or version requirement cannot be parsed."""
    pass


class EncodeError(RfcBookError):
    """Raised when the processed book cannot be written out."""
    pass


class PreprocessorError(RfcBookError):
    """Raised by a preprocessor that fails while transforming a book."""
    pass


class ConfigError(RfcBookError):
    """Raised when book.toml is missing or invalid."""
    pass


class FilesystemError(RfcBookError):
    """Raised when a scaffolding or cleanup operation on disk fails."""
    pass


class DelegatedProcessError(RfcBookError):
    """Raised when a child process cannot start or exits non-zero."""

    def __init__(self, message, command=None, folder=None, returncode=None):
        super().__init__(message)
        self.command = list(command or [])
        self.folder = folder
        self.returncode = returncode

    def __str__(self):
        msg = self.args[0]
        if self.command:
            msg += f" (command: {' '.join(self.command)}"
            if self.folder:
                msg += f", in {self.folder}"
            if self.returncode is not None:
                msg += f", exit {self.returncode}"
            msg += ")"
        return msg


def format_chain(err):
    """
    Render an exception and its causes, outermost first.

    Each line holds one error; causes are followed through __cause__.
    """
    lines = []
    current = err
    seen = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current) or type(current).__name__
        prefix = "  " if lines else ""
        if lines:
            text = f"caused by: {type(current).__name__}: {text}"
        lines.append(prefix + text)
        current = current.__cause__
    return "\n".join(lines)
