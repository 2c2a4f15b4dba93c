"""Expose the scripts/ tree on `sys.path` and share handshake fixtures."""

import copy
import json
import sys
from pathlib import Path

import pytest

SCRIPTS_DIR = Path(__file__).resolve().parent.parent / "scripts"
sys.path.insert(0, str(SCRIPTS_DIR))


CONTEXT = {
    "root": "/path/to/book",
    "config": {
        "book": {
            "authors": ["AUTHOR"],
            "language": "en",
            "multilingual": False,
            "src": "src",
            "title": "TITLE",
        },
        "preprocessor": {
            "rfc": {},
        },
    },
    "renderer": "html",
    "mdbook_version": "0.4.21",
}

BOOK = {
    "sections": [
        {
            "Chapter": {
                "name": "Chapter 1",
                "content": "# Chapter 1\n",
                "number": [1],
                "sub_items": [
                    {
                        "Chapter": {
                            "name": "Section 1.1",
                            "content": "## Section 1.1\n",
                            "number": [1, 1],
                            "sub_items": [],
                            "path": "chapter_1/section_1.md",
                            "source_path": "chapter_1/section_1.md",
                            "parent_names": ["Chapter 1"],
                        }
                    }
                ],
                "path": "chapter_1.md",
                "source_path": "chapter_1.md",
                "parent_names": [],
            }
        },
        "Separator",
        {"PartTitle": "Appendix"},
        {
            "Chapter": {
                "name": "Draft",
                "content": "",
                "number": None,
                "sub_items": [],
                "path": None,
                "source_path": None,
                "parent_names": [],
            }
        },
    ],
    "__non_exhaustive": None,
}


@pytest.fixture
def context_data():
    return copy.deepcopy(CONTEXT)


@pytest.fixture
def book_data():
    return copy.deepcopy(BOOK)


@pytest.fixture
def payload(context_data, book_data):
    return [context_data, book_data]


@pytest.fixture
def payload_json(payload):
    return json.dumps(payload)


@pytest.fixture
def book_root(tmp_path):
    """A minimal mdbook project with two preprocessors configured."""
    (tmp_path / "book.toml").write_text(
        """
[book]
title = "RFCs"
authors = ["Someone"]
src = "src"

[preprocessor.rfc]
command = "mdbook-rfc"

[preprocessor.toc]
marker = "<!-- toc -->"
""".lstrip(),
        encoding="utf-8",
    )
    return tmp_path
