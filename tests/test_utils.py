# File: tests/test_utils.py
"""Тесты нормализации URL, разбиения на батчи и мелких хелперов."""
import math

import pytest

from index_ping.errors import ConfigError
from index_ping.utils import (
    backoff_delay,
    canonicalize_url,
    is_under_origin,
    parse_https_url,
    split_into_batches,
    truncate_snippet,
    validate_and_normalize_urls,
)

SITE = "https://example.com"


class TestCanonicalizeUrl:
    def test_strips_fragment(self):
        assert canonicalize_url("https://example.com/a#frag") == "https://example.com/a"

    def test_lowercases_scheme_and_host(self):
        assert canonicalize_url("HTTPS://Example.COM/Path") == "https://example.com/Path"

    def test_drops_default_port_keeps_custom(self):
        assert canonicalize_url("https://example.com:443/a") == "https://example.com/a"
        assert canonicalize_url("https://example.com:8443/a") == "https://example.com:8443/a"

    def test_empty_path_becomes_root(self):
        assert canonicalize_url("https://example.com") == "https://example.com/"
        assert canonicalize_url("https://example.com?q=1") == "https://example.com/?q=1"

    def test_encodes_spaces(self):
        assert canonicalize_url("https://example.com/a b") == "https://example.com/a%20b"

    def test_keeps_existing_escapes(self):
        assert canonicalize_url("https://example.com/a%20b") == "https://example.com/a%20b"

    @pytest.mark.parametrize(
        "value",
        ["not a url", "/relative/path", "example.com/a", "https://", "https://bad host/", "https://example.com:99999/"],
    )
    def test_rejects_non_absolute(self, value):
        assert canonicalize_url(value) is None


class TestParseHttpsUrl:
    def test_returns_canonical(self):
        assert parse_https_url(" https://Example.com/x#y ", "SITE_URL") == "https://example.com/x"

    @pytest.mark.parametrize(
        "value,message",
        [
            (None, "SITE_URL is required"),
            ("   ", "SITE_URL is required"),
            ("nope", "SITE_URL must be a valid URL"),
            ("http://example.com", "SITE_URL must use https"),
        ],
    )
    def test_errors_name_the_field(self, value, message):
        with pytest.raises(ConfigError, match=message):
            parse_https_url(value, "SITE_URL")


def test_is_under_origin():
    assert is_under_origin(SITE, SITE)
    assert is_under_origin(f"{SITE}/a", SITE)
    assert is_under_origin(f"{SITE}?x=1", SITE)
    assert not is_under_origin("https://example.com.evil.org/a", SITE)
    assert not is_under_origin("https://example.community/a", SITE)


class TestValidateAndNormalize:
    def test_mixed_input_scenario(self):
        raw = [
            "https://example.com/a",
            "https://example.com/a#frag",
            "https://other.com/b",
            "not a url",
        ]
        result = validate_and_normalize_urls(raw, SITE)

        assert result.valid == ["https://example.com/a"]
        assert result.invalid == ["https://other.com/b", "not a url"]
        assert result.duplicates == 1

    def test_every_candidate_lands_in_exactly_one_bucket(self):
        raw = [
            "https://example.com/1",
            "http://example.com/2",
            "/relative",
            "garbage",
            None,
            42,
            "",
            "   ",
            "https://example.com/1",
            " https://example.com/3 ",
            "https://EXAMPLE.com/3",
            "ftp://example.com/4",
        ]
        result = validate_and_normalize_urls(raw, SITE)

        assert len(result.valid) + len(result.invalid) + result.duplicates == len(raw)
        assert result.valid == ["https://example.com/1", "https://example.com/3"]
        assert result.duplicates == 2

    def test_valid_has_no_duplicates_and_stays_under_origin(self):
        raw = [f"https://example.com/p{i % 7}#s{i}" for i in range(50)] + ["https://example.org/p1"]
        result = validate_and_normalize_urls(raw, SITE)

        assert len(result.valid) == len(set(result.valid)) == 7
        assert all(u.startswith(SITE + "/") for u in result.valid)

    def test_preserves_first_seen_order(self):
        raw = ["https://example.com/c", "https://example.com/a", "https://example.com/c", "https://example.com/b"]
        assert validate_and_normalize_urls(raw, SITE).valid == [
            "https://example.com/c",
            "https://example.com/a",
            "https://example.com/b",
        ]

    def test_invalid_records(self):
        result = validate_and_normalize_urls([None, 7, "  nope  ", "http://example.com/x#y"], SITE)
        assert result.invalid == ["", "7", "nope", "http://example.com/x"]

    def test_origin_root_and_query_are_valid(self):
        result = validate_and_normalize_urls([SITE, f"{SITE}?page=2"], SITE)
        assert result.valid == [f"{SITE}/", f"{SITE}/?page=2"]

    def test_origin_with_path_prefix(self):
        origin = "https://example.com/blog"
        result = validate_and_normalize_urls(
            ["https://example.com/blog/post", "https://example.com/blogger", "https://example.com/other"],
            origin,
        )
        assert result.valid == ["https://example.com/blog/post"]
        assert result.invalid == ["https://example.com/blogger", "https://example.com/other"]

    def test_lookalike_host_is_rejected(self):
        result = validate_and_normalize_urls(["https://example.com.attacker.net/a"], SITE)
        assert result.valid == []

    def test_never_raises_on_garbage(self):
        result = validate_and_normalize_urls([object(), b"bytes", ["nested"], "https://[::1"], SITE)
        assert result.valid == []
        assert len(result.invalid) == 4


class TestSplitIntoBatches:
    @pytest.mark.parametrize("n", [0, 1, 999, 1000, 1001, 2500, 3000])
    def test_batch_arithmetic(self, n):
        items = [f"https://example.com/{i}" for i in range(n)]
        batches = split_into_batches(items, 1000)

        assert len(batches) == math.ceil(n / 1000)
        if n:
            assert len(batches[-1]) == (n % 1000 or 1000)
            assert all(len(b) <= 1000 for b in batches)
        assert [u for b in batches for u in b] == items

    def test_rejects_zero_size(self):
        with pytest.raises(ValueError):
            split_into_batches(["a"], 0)


def test_truncate_snippet():
    assert truncate_snippet("short") == "short"
    assert truncate_snippet(None) == ""
    long = "x" * 1000
    cut = truncate_snippet(long)
    assert len(cut) == 300
    assert cut.endswith("...")


def test_backoff_delay():
    assert [backoff_delay(a, 0.5) for a in range(3)] == [0.5, 1.0, 2.0]


class TestDotSegments:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("https://example.com/a/../b", "https://example.com/b"),
            ("https://example.com/a/./b", "https://example.com/a/b"),
            ("https://example.com/a/b/..", "https://example.com/a/"),
            ("https://example.com/a/.", "https://example.com/a/"),
            ("https://example.com/../../x", "https://example.com/x"),
            ("https://example.com/a/%2E%2e/b?q=../z", "https://example.com/b?q=../z"),
            ("https://example.com/a//b", "https://example.com/a//b"),
        ],
    )
    def test_resolved_before_serialization(self, value, expected):
        assert canonicalize_url(value) == expected

    def test_cannot_escape_origin_path(self):
        origin = "https://example.com/blog"
        result = validate_and_normalize_urls(
            ["https://example.com/blog/../admin", "https://example.com/blog/./post"],
            origin,
        )
        assert result.valid == ["https://example.com/blog/post"]
        assert result.invalid == ["https://example.com/admin"]

    def test_equivalent_paths_are_deduplicated(self):
        result = validate_and_normalize_urls(["https://example.com/b", "https://example.com/a/../b"], SITE)
        assert result.valid == ["https://example.com/b"]
        assert result.duplicates == 1


@pytest.mark.parametrize("value", [12345, ["https://example.com"], {"url": "x"}])
def test_parse_https_url_non_string_is_not_missing(value):
    with pytest.raises(ConfigError, match="SITE_URL must be a valid URL"):
        parse_https_url(value, "SITE_URL")
