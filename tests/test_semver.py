import json

import pytest

from urcf.semver import (
    CompareResult,
    DetailCompareResult,
    SemanticVersion,
    SemanticVersionError,
    parse_semver,
)

ORDERED = [
    "1.0.0-alpha",
    "1.0.0-alpha.1",
    "1.0.0-alpha.beta",
    "1.0.0-beta",
    "1.0.0-beta.2",
    "1.0.0-beta.11111",
    "1.0.0-beta.k",
    "1.0.0-rc.1",
    "1.0.0",
]


@pytest.mark.parametrize("i", range(len(ORDERED)))
@pytest.mark.parametrize("j", range(len(ORDERED)))
def test_compare_ordering(i, j):
    v1 = parse_semver(ORDERED[i])
    v2 = parse_semver(ORDERED[j])
    if i == j:
        expected = CompareResult.SAME
    elif i < j:
        expected = CompareResult.LT
    else:
        expected = CompareResult.GT
    assert v1.compare(v2) == expected


def test_parse_fields_and_string_round_trip():
    v = parse_semver("1.2.3-alpha.1+build.5")
    assert (v.major, v.minor, v.patch) == (1, 2, 3)
    assert v.pre_release == ("alpha", "1")
    assert v.build == ("build", "5")
    assert v.valid
    assert str(v) == "1.2.3-alpha.1+build.5"


@pytest.mark.parametrize("text", ["1.2", "a.b.c", "1.2.x", "1.2.3.4", "1.-2.3", "1.2. 3"])
def test_parse_errors(text):
    with pytest.raises(SemanticVersionError):
        parse_semver(text)


def test_single_component_is_invalid_and_uncomparable():
    v = parse_semver("1")
    assert v.valid is False
    with pytest.raises(SemanticVersionError):
        v.compare(parse_semver("1.0.0"))


def test_detail_compare_flags():
    a = parse_semver("1.0.0")
    b = parse_semver("2.0.0")
    assert a.detail_compare(b) == DetailCompareResult.MAJOR_LT
    assert b.detail_compare(a) == DetailCompareResult.MAJOR_GT
    assert a.detail_compare(a) == DetailCompareResult.NO_DIFFERENT


def test_build_ignored_by_compare():
    a = parse_semver("1.0.0+a")
    b = parse_semver("1.0.0+b")
    assert a.compare(b) == CompareResult.SAME
    assert a.detail_compare(b) == DetailCompareResult.BUILD_LT


def test_compatible():
    assert parse_semver("1.2.0").compatible(parse_semver("1.3.0")) is True
    assert parse_semver("1.3.0").compatible(parse_semver("1.2.0")) is False
    assert parse_semver("2.0.0").compatible(parse_semver("1.0.0")) is False
    assert parse_semver("1.0.0-rc1").compatible(parse_semver("1.0.0")) is True


def test_json_round_trip():
    v = parse_semver("1.0.0-rc1")
    encoded = v.to_json()
    assert json.loads(encoded) == "1.0.0-rc1"
    assert SemanticVersion.from_json(encoded) == v


def test_from_json_bad_version_gives_invalid():
    v = SemanticVersion.from_json('"1.x.0"')
    assert v.valid is False


def test_from_json_non_string_raises():
    with pytest.raises(SemanticVersionError):
        SemanticVersion.from_json("123")