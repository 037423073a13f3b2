"""
Tests for version parsing and range resolution.
"""

import pytest

from backend.skillregistry.models import VersionRange
from backend.skillregistry.versions import (
    Version,
    VersionRangeResolver,
    VersionVerdict,
    bound_verdict,
    is_inverted,
    parse_version,
    try_parse_version,
    versions_match,
)


class TestVersion:
    """Tests for Version parsing."""

    @pytest.mark.parametrize("text,components,precision", [
        ("19", (19, 0, 0), 1),
        ("19.2", (19, 2, 0), 2),
        ("19.2.1", (19, 2, 1), 3),
        ("v21.0.0", (21, 0, 0), 3),
        ("18.3.1-rc.1", (18, 3, 1), 3),
        (" 20 ", (20, 0, 0), 1),
    ])
    def test_parse(self, text, components, precision):
        """Test accepted version spellings."""
        version = Version.parse(text)
        assert version.components == components
        assert version.precision == precision

    def test_parse_numbers(self):
        """Test YAML numbers are accepted."""
        assert Version.parse(19).components == (19, 0, 0)
        assert Version.parse(21.1).components == (21, 1, 0)

    @pytest.mark.parametrize("text", ["", "latest", "1.2.3.4", "x.1", "1..2", True])
    def test_parse_invalid(self, text):
        """Test rejected versions."""
        with pytest.raises(ValueError):
            Version.parse(text)

    def test_str_keeps_written_precision(self):
        """Test string form shows only written components."""
        assert str(Version.parse("19")) == "19"
        assert str(Version.parse("v19.2")) == "19.2"
        assert str(Version.parse("19.2.1")) == "19.2.1"

    def test_ordering_ignores_precision(self):
        """Test that ordering compares components only."""
        assert Version.parse("19") == Version.parse("19.0.0")
        assert Version.parse("19.0.1") > Version.parse("19")
        assert Version.parse("2.10.0") > Version.parse("2.9.9")

    def test_helpers(self):
        """Test parse helpers."""
        version = Version.parse("1.2.3")
        assert parse_version(version) is version
        assert try_parse_version("nope") is None
        assert try_parse_version(None) is None
        assert try_parse_version("1.2") == Version(1, 2, 0)


class TestComparisons:
    """Tests for precision-aware comparisons."""

    def test_versions_match(self):
        """Test matching on shared components."""
        assert versions_match(Version.parse("19"), Version.parse("19.2.1"))
        assert versions_match(Version.parse("19.2"), Version.parse("19.2.7"))
        assert not versions_match(Version.parse("19.3"), Version.parse("19.2.7"))
        assert not versions_match(Version.parse("18"), Version.parse("19"))

    def test_is_inverted(self):
        """Test inverted range detection."""
        assert is_inverted(Version.parse("21.0.0"), Version.parse("16.0.0"))
        assert not is_inverted(Version.parse("16.0.0"), Version.parse("16.0.0"))
        assert not is_inverted(Version.parse("16.2.0"), Version.parse("16"))

    def test_bound_verdict(self):
        """Test placement against bounds."""
        lower, upper = Version.parse("15.2.0"), Version.parse("21.0.0")
        assert bound_verdict(Version.parse("15"), lower, upper) is VersionVerdict.IN_RANGE
        assert bound_verdict(Version.parse("15.1.9"), lower, upper) is VersionVerdict.BELOW_MIN
        assert bound_verdict(Version.parse("21.0.1"), lower, upper) is VersionVerdict.ABOVE_MAX
        assert bound_verdict(Version.parse("21"), lower, upper) is VersionVerdict.IN_RANGE


class TestVersionRangeResolver:
    """Tests for VersionRangeResolver.resolve."""

    @pytest.fixture
    def version_range(self):
        return VersionRange(min="15.0.0", max="21.0.0", supported_versions=("15", "16", "19", "21"))

    @pytest.mark.parametrize("query,expected", [
        ("19.2.1", VersionVerdict.IN_RANGE),
        ("19", VersionVerdict.IN_RANGE),
        ("21.0.0", VersionVerdict.IN_RANGE),
        ("15.0.0", VersionVerdict.IN_RANGE),
        ("14.9.9", VersionVerdict.BELOW_MIN),
        ("22", VersionVerdict.ABOVE_MAX),
        ("21.0.1", VersionVerdict.ABOVE_MAX),
        ("17.1.0", VersionVerdict.NOT_IN_SUPPORTED_LIST),
    ])
    def test_resolve(self, version_range, query, expected):
        """Test the four verdicts."""
        assert VersionRangeResolver().resolve(version_range, query) is expected

    @pytest.mark.parametrize("query,expected", [
        ("19", VersionVerdict.IN_RANGE),
        ("22", VersionVerdict.ABOVE_MAX),
        ("10", VersionVerdict.BELOW_MIN),
    ])
    def test_bare_majors_against_full_supported_list(self, query, expected):
        """Test bare majors against a range supporting every major from 15 to 21."""
        version_range = VersionRange(
            min="15.0.0",
            max="21.0.0",
            supported_versions=tuple(str(major) for major in range(15, 22)),
        )
        assert VersionRangeResolver().resolve(version_range, query) is expected

    def test_minor_compared_numerically(self):
        """Test a two-digit minor bound such as 16.10."""
        version_range = VersionRange(min="16.10", max="17.0", supported_versions=("16", "17"))
        resolver = VersionRangeResolver()
        assert resolver.resolve(version_range, "16.5") is VersionVerdict.BELOW_MIN
        assert resolver.resolve(version_range, "16.11.2") is VersionVerdict.IN_RANGE

    def test_bounds_checked_before_supported_list(self):
        """Test an out-of-bounds version listed as supported is still out of bounds."""
        version_range = VersionRange(min="16.0.0", max="18.0.0", supported_versions=("20",))
        assert VersionRangeResolver().resolve(version_range, "20") is VersionVerdict.ABOVE_MAX

    def test_unparseable_supported_entries_skipped(self):
        """Test that malformed supported entries never match."""
        version_range = VersionRange(min="1.0.0", max="3.0.0", supported_versions=("next", "2"))
        resolver = VersionRangeResolver()
        assert resolver.resolve(version_range, "2.1.0") is VersionVerdict.IN_RANGE
        assert resolver.resolve(version_range, "1.5.0") is VersionVerdict.NOT_IN_SUPPORTED_LIST

    def test_invalid_query(self, version_range):
        """Test that an unparseable query raises."""
        with pytest.raises(ValueError):
            VersionRangeResolver().resolve(version_range, "latest")

    def test_verdict_is_match(self):
        """Test only IN_RANGE counts as a match."""
        assert VersionVerdict.IN_RANGE.is_match
        assert not VersionVerdict.BELOW_MIN.is_match
        assert not VersionVerdict.NOT_IN_SUPPORTED_LIST.is_match
