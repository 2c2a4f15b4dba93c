"""
The preprocessor handshake.

mdbook runs a preprocessor with a JSON array on stdin:

    [
        {"root": "...", "config": {...}, "renderer": "html",
         "mdbook_version": "0.4.21"},
        {"sections": [...], "__non_exhaustive": null}
    ]

and reads the processed book back from stdout as a single JSON value.
"""

import json
from dataclasses import dataclass, field

from rfcbook.book import Book
from rfcbook.config import Config
from rfcbook.errors import ConfigError, DecodeError, EncodeError


CONTEXT_FIELDS = ("root", "config", "renderer", "mdbook_version")


@dataclass(frozen=True)
class Context:
    """What mdbook tells a preprocessor about the current build."""

    root: str
    config: Config = field(hash=False)
    renderer: str
    mdbook_version: str
    extra: dict = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data, where="context"):
        if not isinstance(data, dict):
            raise DecodeError(f"{where}: expected an object")

        for key in CONTEXT_FIELDS:
            if key not in data:
                raise DecodeError(f"{where}: missing required field '{key}'")

        for key in ("root", "renderer", "mdbook_version"):
            if not isinstance(data[key], str):
                raise DecodeError(f"{where}.{key}: expected a string")

        try:
            config = Config.from_dict(data["config"])
        except ConfigError as e:
            raise DecodeError(f"{where}.config: expected an object") from e

        return cls(
            root=data["root"],
            config=config,
            renderer=data["renderer"],
            mdbook_version=data["mdbook_version"],
            extra={k: v for k, v in data.items() if k not in CONTEXT_FIELDS},
        )

    def to_dict(self):
        data = {
            "root": self.root,
            "config": self.config.to_dict(),
            "renderer": self.renderer,
            "mdbook_version": self.mdbook_version,
        }
        data.update(self.extra)
        return data


# ── Reader ─────────────────────────────────────────────────────────────


def parse_input(stream):
    """
    Read the whole handshake from a stream.

    Args:
        stream: Text or binary file object (stdin)

    Returns:
        (Context, Book)

    Raises:
        DecodeError if the input is not a two element JSON array of a
        valid context and book.
    """
    raw = stream.read()
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("Handshake input is not valid UTF-8") from e

    return parse_payload(raw)


def parse_payload(text):
    """Decode a handshake JSON document already held in memory."""
    try:
        payload = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Handshake input is not valid JSON: {e}") from e

    if not isinstance(payload, list):
        raise DecodeError("Handshake input must be a JSON array [context, book]")
    if len(payload) != 2:
        raise DecodeError(
            f"Handshake input must hold exactly 2 elements, got {len(payload)}"
        )

    context = Context.from_dict(payload[0], "[0]")
    book = Book.from_dict(payload[1], "[1]")
    return context, book


def _reject_constant(name):
    # NaN, Infinity and -Infinity are accepted by json but are not JSON
    raise DecodeError(f"Handshake input is not valid JSON: unexpected '{name}'")


# ── Writer ─────────────────────────────────────────────────────────────


def encode_book(book):
    """Serialize a book to the JSON text mdbook expects."""
    try:
        return json.dumps(book.to_dict(), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Could not serialize book: {e}") from e


def write_output(book, stream):
    """
    Write the processed book to a stream as one JSON value.

    The book is serialized completely before anything is written.

    Raises:
        EncodeError if serialization or the write fails.
    """
    text = encode_book(book)
    try:
        if _is_binary(stream):
            stream.write(text.encode("utf-8"))
        else:
            stream.write(text)
        stream.flush()
    except (OSError, ValueError) as e:
        # ValueError: I/O operation on closed file
        raise EncodeError(f"Could not write book: {e}") from e


def _is_binary(stream):
    mode = getattr(stream, "mode", "")
    if isinstance(mode, str) and "b" in mode:
        return True
    return not hasattr(stream, "encoding") and hasattr(stream, "getbuffer")
