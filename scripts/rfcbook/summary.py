"""
Page discovery and SUMMARY.md generation for `populate`.

Pages are the Markdown files of the text folder. Titles come from YAML
front matter, the first level-one heading, or the file name, in that
order. Subdirectories become nested chapters under their README.md or
index.md, or under a draft chapter when they have neither.
"""

import os
import re

import yaml


SUMMARY_FILE = "SUMMARY.md"
INDEX_FILES = ("README.md", "index.md")

FRONTMATTER_RE = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)
HEADING_RE = re.compile(r"^#[ \t]+(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)
FENCE_RE = re.compile(r"^(`{3,}|~{3,}).*?(?:^\1[^\n]*$|\Z)", re.MULTILINE | re.DOTALL)


def natural_sort_key(s):
    """Sort strings with embedded numbers naturally (2.md before 10.md)."""
    return [
        int(text) if text.isdigit() else text.lower()
        for text in re.split(r"(\d+)", s)
    ]


class Page:
    """One SUMMARY.md entry. `link` is None for draft chapters."""

    def __init__(self, title, link=None, children=None):
        self.title = title
        self.link = link
        self.children = children or []

    def __repr__(self):
        return f"Page({self.title!r}, {self.link!r}, {self.children!r})"


# ── Titles ─────────────────────────────────────────────────────────────


def read_title(path):
    """Title of a Markdown page: front matter, first heading, or file stem."""
    with open(path, encoding="utf-8") as f:
        text = f.read()

    match = FRONTMATTER_RE.match(text)
    if match:
        try:
            meta = yaml.safe_load(match.group(1))
        except yaml.YAMLError:
            meta = None
        if isinstance(meta, dict) and meta.get("title"):
            return str(meta["title"]).strip()
        text = text[match.end():]

    # Headings inside fenced code blocks are not page titles
    heading = HEADING_RE.search(FENCE_RE.sub("", text))
    if heading:
        return heading.group(1)

    return title_from_name(os.path.basename(path))


def title_from_name(name):
    """'02_getting-started.md' → 'Getting started'."""
    stem = os.path.splitext(name)[0]
    stem = re.sub(r"^\d+[_\-. ]*", "", stem) or stem
    words = re.sub(r"[_\-]+", " ", stem).strip()
    return words[:1].upper() + words[1:]


# ── Discovery ──────────────────────────────────────────────────────────


def gather_pages(text_dir, rel_dir=""):
    """
    Build the page tree for a text folder.

    Returns: list of Page, in natural order, files before subdirectories
    at each level.
    """
    current = os.path.join(text_dir, rel_dir) if rel_dir else text_dir
    entries = sorted(os.listdir(current), key=natural_sort_key)

    pages = []
    subdirs = []
    for entry in entries:
        full = os.path.join(current, entry)
        if os.path.isdir(full):
            if not entry.startswith("."):
                subdirs.append(entry)
            continue
        if not entry.lower().endswith(".md") or entry == SUMMARY_FILE:
            continue
        if rel_dir and entry in INDEX_FILES:
            continue
        link = _link(rel_dir, entry)
        pages.append(Page(read_title(full), link))

    for entry in subdirs:
        sub_rel = os.path.join(rel_dir, entry) if rel_dir else entry
        children = gather_pages(text_dir, sub_rel)
        index = _find_index(os.path.join(text_dir, sub_rel))
        if index:
            parent = Page(
                read_title(os.path.join(text_dir, sub_rel, index)),
                _link(sub_rel, index),
                children,
            )
        elif children:
            parent = Page(title_from_name(entry), None, children)
        else:
            continue
        pages.append(parent)

    return pages


def _find_index(directory):
    for name in INDEX_FILES:
        if os.path.isfile(os.path.join(directory, name)):
            return name
    return None


def _link(rel_dir, name):
    rel = os.path.join(rel_dir, name) if rel_dir else name
    return rel.replace(os.sep, "/")


# ── Rendering ──────────────────────────────────────────────────────────


def render_summary(pages, heading="Summary"):
    """Render a page tree as mdbook SUMMARY.md text."""
    lines = [f"# {heading}", ""]
    _render(pages, 0, lines)
    return "\n".join(lines) + "\n"


def _render(pages, depth, lines):
    for page in pages:
        title = page.title.replace("[", r"\[").replace("]", r"\]")
        target = page.link.replace(" ", "%20") if page.link else ""
        lines.append(f"{'    ' * depth}- [{title}]({target})")
        _render(page.children, depth + 1, lines)
