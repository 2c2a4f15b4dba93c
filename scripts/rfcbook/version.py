"""
Semantic versions and Cargo-style version requirements.

mdbook passes the version it runs as in the handshake context. The plugin
compares it against the mdbook version it was built against, read as a
requirement: "0.4.21" means "^0.4.21", the way Cargo reads a bare version.

Requirement syntax:
    ^1.2.3  1.2.3       >=1.2.3, <2.0.0   (caret, also the default)
    ^0.2.3              >=0.2.3, <0.3.0
    ^0.0.3              >=0.0.3, <0.0.4
    ~1.2.3              >=1.2.3, <1.3.0
    =1.2  >1  <=1.2.3   partial versions fill in the open range
    *  1.*  1.2.x       wildcards
    >=1.2, <1.5         comma separated, all must match
"""

import re
import sys
from dataclasses import dataclass

import semver

from rfcbook.errors import VersionParseError


def parse_version(text):
    """Parse a full MAJOR.MINOR.PATCH[-pre][+build] version."""
    if not isinstance(text, str):
        raise VersionParseError(f"Version must be a string, got {type(text).__name__}")
    try:
        return semver.Version.parse(text.strip())
    except ValueError as e:
        raise VersionParseError(f"Invalid version '{text}': {e}") from e


# ── Requirements ───────────────────────────────────────────────────────

_COMPARATOR_RE = re.compile(
    r"""
    ^\s*
    (?P<op>=|>=|<=|>|<|~|\^)?
    \s*
    (?P<major>\d+|[*xX])
    (?:\.(?P<minor>\d+|[*xX]))?
    (?:\.(?P<patch>\d+|[*xX]))?
    (?:-(?P<pre>[0-9A-Za-z.-]+))?
    (?:\+[0-9A-Za-z.-]+)?
    \s*$
    """,
    re.VERBOSE,
)

_WILDCARDS = {"*", "x", "X"}


@dataclass(frozen=True)
class Comparator:
    op: str
    major: int
    minor: object = None
    patch: object = None
    pre: object = None

    def matches(self, v):
        op = self.op
        if op == "=":
            return self._matches_exact(v)
        if op == ">":
            return self._matches_greater(v)
        if op == ">=":
            return self._matches_exact(v) or self._matches_greater(v)
        if op == "<":
            return self._matches_less(v)
        if op == "<=":
            return self._matches_exact(v) or self._matches_less(v)
        if op == "~":
            return self._matches_tilde(v)
        if op == "^":
            return self._matches_caret(v)
        if op == "*":
            return True
        raise ValueError(f"unknown operator {op}")

    def _pre_version(self):
        return semver.Version(
            self.major, self.minor or 0, self.patch or 0, prerelease=self.pre
        )

    def _matches_exact(self, v):
        if v.major != self.major:
            return False
        if self.minor is None:
            return True
        if v.minor != self.minor:
            return False
        if self.patch is None:
            return True
        if v.patch != self.patch:
            return False
        return v.prerelease == self.pre

    def _matches_greater(self, v):
        if v.major != self.major:
            return v.major > self.major
        if self.minor is None:
            return False
        if v.minor != self.minor:
            return v.minor > self.minor
        if self.patch is None:
            return False
        if v.patch != self.patch:
            return v.patch > self.patch
        return _final(v) > self._pre_version()

    def _matches_less(self, v):
        if v.major != self.major:
            return v.major < self.major
        if self.minor is None:
            return False
        if v.minor != self.minor:
            return v.minor < self.minor
        if self.patch is None:
            return False
        if v.patch != self.patch:
            return v.patch < self.patch
        return _final(v) < self._pre_version()

    def _matches_tilde(self, v):
        if v.major != self.major:
            return False
        if self.minor is not None and v.minor != self.minor:
            return False
        if self.patch is not None and v.patch != self.patch:
            return v.patch > self.patch
        return self._pre_ok(v)

    def _matches_caret(self, v):
        if v.major != self.major:
            return False
        if self.minor is None:
            return True
        if self.patch is None:
            if self.major > 0:
                return v.minor >= self.minor
            return v.minor == self.minor
        if self.major > 0:
            if v.minor != self.minor:
                return v.minor > self.minor
            if v.patch != self.patch:
                return v.patch > self.patch
        elif self.minor > 0:
            if v.minor != self.minor:
                return False
            if v.patch != self.patch:
                return v.patch > self.patch
        elif v.minor != self.minor or v.patch != self.patch:
            return False
        return self._pre_ok(v)

    def _pre_ok(self, v):
        """Same major.minor.patch: compare the pre-release part."""
        if self.patch is None or v.patch != self.patch:
            return True
        return _final(v) >= self._pre_version()

    def __str__(self):
        if self.op == "*":
            return "*"
        text = str(self.major)
        if self.minor is not None:
            text += f".{self.minor}"
            if self.patch is not None:
                text += f".{self.patch}"
                if self.pre:
                    text += f"-{self.pre}"
        return f"{self.op}{text}"


class VersionReq:
    """
    A set of comparators that must all match.

    Usage:
        req = VersionReq.parse("^0.4.0")
        req.matches(parse_version("0.4.21"))   # True
        req.matches(parse_version("0.5.0"))    # False
    """

    def __init__(self, comparators, text=None):
        self.comparators = list(comparators)
        self.text = text

    @classmethod
    def parse(cls, text):
        if not isinstance(text, str):
            raise VersionParseError(
                f"Version requirement must be a string, got {type(text).__name__}"
            )
        stripped = text.strip()
        if not stripped:
            raise VersionParseError("Empty version requirement")
        if stripped == "*":
            return cls([Comparator("*", 0)], text)

        comparators = []
        for part in stripped.split(","):
            comparators.append(_parse_comparator(part, text))
        return cls(comparators, text)

    def matches(self, version):
        if isinstance(version, str):
            version = parse_version(version)
        version = _final(version)

        if not all(c.matches(version) for c in self.comparators):
            return False

        if not version.prerelease:
            return True

        # A pre-release only matches a requirement that opts into
        # pre-releases of that exact major.minor.patch.
        for c in self.comparators:
            if (
                c.pre
                and c.major == version.major
                and c.minor == version.minor
                and c.patch == version.patch
            ):
                return True
        return False

    def __str__(self):
        if self.text is not None:
            return self.text.strip()
        return ", ".join(str(c) for c in self.comparators)

    def __repr__(self):
        return f"VersionReq({str(self)!r})"


def _parse_comparator(part, full_text):
    match = _COMPARATOR_RE.match(part)
    if not match:
        raise VersionParseError(
            f"Invalid version requirement '{full_text}': cannot parse '{part.strip()}'"
        )

    op = match.group("op") or "^"
    fields = [match.group("major"), match.group("minor"), match.group("patch")]
    pre = match.group("pre")

    # Everything after a wildcard must be a wildcard or absent
    numbers = []
    wildcard = False
    for value in fields:
        if value is None:
            break
        if value in _WILDCARDS:
            wildcard = True
            continue
        if wildcard:
            raise VersionParseError(
                f"Invalid version requirement '{full_text}': "
                f"unexpected number after wildcard in '{part.strip()}'"
            )
        numbers.append(int(value))

    if wildcard:
        if match.group("op") not in (None, "="):
            raise VersionParseError(
                f"Invalid version requirement '{full_text}': "
                f"wildcard cannot be combined with '{op}'"
            )
        if pre:
            raise VersionParseError(
                f"Invalid version requirement '{full_text}': "
                "wildcard cannot carry a pre-release"
            )
        if not numbers:
            return Comparator("*", 0)
        op = "="

    if pre and len(numbers) < 3:
        raise VersionParseError(
            f"Invalid version requirement '{full_text}': "
            "pre-release requires a full version"
        )

    numbers += [None] * (3 - len(numbers))
    return Comparator(op, numbers[0], numbers[1], numbers[2], pre)


def _final(version):
    """Drop build metadata, which plays no part in precedence."""
    if version.build:
        return version.replace(build=None)
    return version


# ── Compatibility check ────────────────────────────────────────────────


def _warn_stderr(message):
    print(message, file=sys.stderr, flush=True)


def check_compatibility(built_against, declared, plugin_name, warn=None):
    """
    Compare the caller's mdbook version with the one we were built against.

    Args:
        built_against: Version the plugin was built against, read as a
                       requirement ("0.4.21" -> "^0.4.21")
        declared:      Version string mdbook sent in the context
        plugin_name:   Name used in the warning
        warn:          Callable receiving the warning line (default: stderr)

    Returns:
        True if compatible, False if a warning was emitted.

    Raises:
        VersionParseError if either string cannot be parsed.
    """
    req = VersionReq.parse(built_against)
    version = parse_version(declared)

    if req.matches(version):
        return True

    (warn or _warn_stderr)(
        f"Warning: The {plugin_name} plugin was built against version "
        f"{built_against} of mdbook, but we're being called from version {declared}"
    )
    return False
