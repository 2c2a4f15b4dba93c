import pytest

from rfcbook.book import (
    ABSENT,
    Book,
    Chapter,
    PartTitle,
    Separator,
    item_from_dict,
)
from rfcbook.errors import DecodeError


def test_book_decodes_all_item_kinds(book_data) -> None:
    book = Book.from_dict(book_data)

    first, sep, part, draft = book.sections
    assert isinstance(first, Chapter)
    assert first.name == "Chapter 1"
    assert first.number == [1]
    assert first.sub_items[0].parent_names == ["Chapter 1"]
    assert sep == Separator()
    assert part == PartTitle("Appendix")
    assert draft.path is None
    assert draft.number is None
    assert book.extra == {"__non_exhaustive": None}


def test_book_round_trips(book_data) -> None:
    assert Book.from_dict(book_data).to_dict() == book_data


def test_absent_optional_fields_stay_absent() -> None:
    raw = {
        "Chapter": {
            "name": "Intro",
            "content": "hello",
            "sub_items": [],
            "parent_names": [],
        }
    }
    chapter = item_from_dict(raw)
    assert chapter.number is ABSENT
    assert chapter.path is ABSENT
    assert chapter.source_path is ABSENT
    assert chapter.to_dict() == raw


def test_unknown_chapter_fields_are_preserved() -> None:
    raw = {
        "Chapter": {
            "name": "Intro",
            "content": "hello",
            "sub_items": [],
            "parent_names": [],
            "path": "intro.md",
            "slug": "intro",
        }
    }
    chapter = item_from_dict(raw)
    assert chapter.extra == {"slug": "intro"}
    assert chapter.to_dict() == raw


def test_separator_long_form_is_accepted() -> None:
    assert item_from_dict({"Separator": None}) == Separator()


def test_missing_chapter_field_reports_path() -> None:
    raw = {"sections": [{"Chapter": {"name": "x", "sub_items": [], "parent_names": []}}]}
    with pytest.raises(DecodeError, match=r"sections\[0\]\.Chapter.*'content'"):
        Book.from_dict(raw)


@pytest.mark.parametrize(
    "raw",
    [
        "Chapter",
        {"Appendix": "x"},
        {"PartTitle": 3},
        {"Chapter": {}, "Separator": None},
        {"Chapter": {"name": "x", "content": "", "sub_items": [], "parent_names": [], "number": ["1"]}},
        {"Chapter": {"name": "x", "content": "", "sub_items": [], "parent_names": [], "path": 1}},
        {"Chapter": {"name": 3, "content": "", "sub_items": [], "parent_names": []}},
    ],
)
def test_invalid_items_are_rejected(raw) -> None:
    with pytest.raises(DecodeError):
        item_from_dict(raw)


def test_book_requires_sections() -> None:
    with pytest.raises(DecodeError, match="sections"):
        Book.from_dict({"__non_exhaustive": None})


def test_iter_chapters_is_depth_first(book_data) -> None:
    book = Book.from_dict(book_data)
    names = [chapter.name for chapter in book.iter_chapters()]
    assert names == ["Chapter 1", "Section 1.1", "Draft"]
