import pytest

from rfcbook.errors import VersionParseError
from rfcbook.version import VersionReq, check_compatibility, parse_version


def test_parse_version_reads_prerelease_and_build() -> None:
    v = parse_version("0.4.21-alpha.1+build.5")
    assert (v.major, v.minor, v.patch) == (0, 4, 21)
    assert v.prerelease == "alpha.1"
    assert v.build == "build.5"


@pytest.mark.parametrize("text", ["", "0.4", "v0.4.21", "0.4.x", "latest"])
def test_parse_version_rejects_malformed(text) -> None:
    with pytest.raises(VersionParseError):
        parse_version(text)


@pytest.mark.parametrize(
    "req, version, expected",
    [
        ("^0.4.0", "0.4.21", True),
        ("^0.4.0", "0.5.0", False),
        ("0.4.21", "0.4.21", True),
        ("0.4.21", "0.4.40", True),
        ("0.4.21", "0.4.20", False),
        ("^1.2.3", "1.9.0", True),
        ("^1.2.3", "2.0.0", False),
        ("^0.0.3", "0.0.3", True),
        ("^0.0.3", "0.0.4", False),
        ("^0.2", "0.2.9", True),
        ("^0.2", "0.3.0", False),
        ("^1", "1.99.0", True),
        ("~1.2.3", "1.2.9", True),
        ("~1.2.3", "1.3.0", False),
        ("~1", "1.5.0", True),
        ("=1.2.3", "1.2.3", True),
        ("=1.2.3", "1.2.4", False),
        ("=1.2", "1.2.7", True),
        (">1.2", "1.2.9", False),
        (">1.2", "1.3.0", True),
        (">=1.2.3", "1.2.3", True),
        ("<1.2.3", "1.2.2", True),
        ("<=1.2", "1.2.9", True),
        ("<=1.2", "1.3.0", False),
        (">=1.2, <1.5", "1.4.9", True),
        (">=1.2, <1.5", "1.5.0", False),
        ("*", "7.0.0", True),
        ("1.*", "1.8.2", True),
        ("1.2.x", "1.3.0", False),
    ],
)
def test_requirement_matching(req, version, expected) -> None:
    assert VersionReq.parse(req).matches(parse_version(version)) is expected


def test_build_metadata_is_ignored() -> None:
    assert VersionReq.parse("=1.2.3").matches("1.2.3+abc")


def test_prerelease_needs_opt_in() -> None:
    assert not VersionReq.parse("^0.4.0").matches("0.4.22-beta.1")
    assert VersionReq.parse(">=0.4.22-alpha").matches("0.4.22-beta.1")
    assert not VersionReq.parse(">=0.4.22-beta").matches("0.4.22-alpha")


@pytest.mark.parametrize("text", ["", ">>1.0", "1.*.3", "^*", "1.2-beta", "abc", ">=1.0,"])
def test_requirement_rejects_malformed(text) -> None:
    with pytest.raises(VersionParseError):
        VersionReq.parse(text)


def test_compatible_version_emits_no_warning() -> None:
    warnings = []
    assert check_compatibility("0.4.0", "0.4.21", "rfc", warn=warnings.append)
    assert warnings == []


def test_incompatible_version_emits_one_warning() -> None:
    warnings = []
    assert not check_compatibility("0.4.0", "0.5.0", "rfc", warn=warnings.append)
    assert len(warnings) == 1
    assert "rfc" in warnings[0]
    assert "0.5.0" in warnings[0]


def test_default_warning_goes_to_stderr(capsys) -> None:
    check_compatibility("0.4.21", "0.5.0", "rfc")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Warning" in captured.err


def test_malformed_declared_version_raises() -> None:
    with pytest.raises(VersionParseError):
        check_compatibility("0.4.21", "zero.four", "rfc")
