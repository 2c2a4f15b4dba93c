"""
The book tree exchanged with mdbook.

A Book is an ordered list of items. Each item is a Chapter, a Separator,
or a PartTitle, serialized the way mdbook serializes its BookItem enum:

    {"Chapter": {"name": ..., "content": ..., ...}}
    "Separator"
    {"PartTitle": "Part One"}

mdbook owns the schema and re-parses our output, so decoding keeps
everything it does not understand and encoding writes it back untouched.
Optional chapter fields missing from the input stay missing (ABSENT)
instead of turning into null.
"""

from dataclasses import dataclass, field

from rfcbook.errors import DecodeError


class _Absent:
    """Marker for an optional field that was not present in the input."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "ABSENT"

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


ABSENT = _Absent()

CHAPTER_OPTIONAL = ("number", "path", "source_path")
CHAPTER_KNOWN = ("name", "content", "sub_items", "parent_names") + CHAPTER_OPTIONAL


# ── Items ──────────────────────────────────────────────────────────────


@dataclass
class Chapter:
    name: str
    content: str
    number: object = ABSENT
    sub_items: list = field(default_factory=list)
    path: object = ABSENT
    source_path: object = ABSENT
    parent_names: list = field(default_factory=list)
    extra: dict = field(default_factory=dict)

    def to_dict(self):
        data = {
            "name": self.name,
            "content": self.content,
        }
        if self.number is not ABSENT:
            data["number"] = None if self.number is None else list(self.number)
        data["sub_items"] = [item_to_dict(item) for item in self.sub_items]
        for key in ("path", "source_path"):
            value = getattr(self, key)
            if value is not ABSENT:
                data[key] = value
        data["parent_names"] = list(self.parent_names)
        data.update(self.extra)
        return {"Chapter": data}

    @classmethod
    def from_dict(cls, data, where="chapter"):
        if not isinstance(data, dict):
            raise DecodeError(f"{where}: expected an object, got {_json_type(data)}")

        name = _require(data, "name", str, where)
        content = _require(data, "content", str, where)
        sub_items_raw = _require(data, "sub_items", list, where)
        parent_names = _require(data, "parent_names", list, where)

        for i, parent in enumerate(parent_names):
            if not isinstance(parent, str):
                raise DecodeError(
                    f"{where}.parent_names[{i}]: expected a string, got {_json_type(parent)}"
                )

        number = data.get("number", ABSENT)
        if number is not ABSENT and number is not None:
            if not isinstance(number, list) or not all(
                isinstance(n, int) and not isinstance(n, bool) and n >= 0 for n in number
            ):
                raise DecodeError(f"{where}.number: expected a list of section numbers or null")

        optional_paths = {}
        for key in ("path", "source_path"):
            value = data.get(key, ABSENT)
            if value is not ABSENT and value is not None and not isinstance(value, str):
                raise DecodeError(f"{where}.{key}: expected a string or null, got {_json_type(value)}")
            optional_paths[key] = value

        sub_items = [
            item_from_dict(raw, f"{where}.sub_items[{i}]")
            for i, raw in enumerate(sub_items_raw)
        ]

        extra = {k: v for k, v in data.items() if k not in CHAPTER_KNOWN}

        return cls(
            name=name,
            content=content,
            number=number if number is ABSENT or number is None else list(number),
            sub_items=sub_items,
            path=optional_paths["path"],
            source_path=optional_paths["source_path"],
            parent_names=list(parent_names),
            extra=extra,
        )


@dataclass
class Separator:

    def to_dict(self):
        return "Separator"


@dataclass
class PartTitle:
    title: str

    def to_dict(self):
        return {"PartTitle": self.title}


ITEM_TYPES = ("Chapter", "Separator", "PartTitle")


def item_from_dict(raw, where="item"):
    """Decode one tagged BookItem."""
    if raw == "Separator":
        return Separator()

    if not isinstance(raw, dict) or len(raw) != 1:
        raise DecodeError(
            f"{where}: expected one of {', '.join(ITEM_TYPES)}, got {_describe(raw)}"
        )

    (tag, body), = raw.items()

    if tag == "Chapter":
        return Chapter.from_dict(body, f"{where}.Chapter")
    if tag == "Separator":
        # unit variant written in its externally tagged long form
        if body is not None:
            raise DecodeError(f"{where}.Separator: expected null, got {_json_type(body)}")
        return Separator()
    if tag == "PartTitle":
        if not isinstance(body, str):
            raise DecodeError(f"{where}.PartTitle: expected a string, got {_json_type(body)}")
        return PartTitle(body)

    raise DecodeError(f"{where}: unknown item type '{tag}'")


def item_to_dict(item):
    if isinstance(item, (Chapter, Separator, PartTitle)):
        return item.to_dict()
    raise TypeError(f"Not a book item: {item!r}")


# ── Book ───────────────────────────────────────────────────────────────


@dataclass
class Book:
    sections: list = field(default_factory=list)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data, where="book"):
        if not isinstance(data, dict):
            raise DecodeError(f"{where}: expected an object, got {_json_type(data)}")
        sections_raw = _require(data, "sections", list, where)
        sections = [
            item_from_dict(raw, f"{where}.sections[{i}]")
            for i, raw in enumerate(sections_raw)
        ]
        extra = {k: v for k, v in data.items() if k != "sections"}
        return cls(sections=sections, extra=extra)

    def to_dict(self):
        data = {"sections": [item_to_dict(item) for item in self.sections]}
        data.update(self.extra)
        return data

    def iter_chapters(self):
        """Yield every chapter, depth first, in reading order."""
        stack = list(reversed(self.sections))
        while stack:
            item = stack.pop()
            if isinstance(item, Chapter):
                yield item
                stack.extend(reversed(item.sub_items))


# ── Helpers ────────────────────────────────────────────────────────────


def _require(data, key, kind, where):
    if key not in data:
        raise DecodeError(f"{where}: missing required field '{key}'")
    value = data[key]
    if not isinstance(value, kind):
        raise DecodeError(
            f"{where}.{key}: expected {_KIND_NAMES[kind]}, got {_json_type(value)}"
        )
    return value


_KIND_NAMES = {
    str: "a string",
    list: "an array",
    dict: "an object",
}


def _json_type(value):
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "a boolean"
    if isinstance(value, (int, float)):
        return "a number"
    if isinstance(value, str):
        return "a string"
    if isinstance(value, list):
        return "an array"
    if isinstance(value, dict):
        return "an object"
    return type(value).__name__


def _describe(value):
    if isinstance(value, str):
        return f"string '{value}'"
    if isinstance(value, dict):
        return f"object with keys {sorted(value)}"
    return _json_type(value)
