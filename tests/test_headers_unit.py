"""
Unit tests - pagination header parsing.
"""

import httpx
import pytest

from restwalk.core.http import first_header_value


class TestFirstHeaderValue:
    """restwalk.core.http.headers.first_header_value"""

    def test_absent_header_reads_as_zero(self):
        assert first_header_value(httpx.Headers(), "X-Total-Pages") == 0

    def test_empty_value_reads_as_zero(self):
        headers = httpx.Headers({"X-Next-Page": ""})
        assert first_header_value(headers, "X-Next-Page") == 0

    def test_explicit_zero_same_as_absent(self):
        headers = httpx.Headers({"X-Total-Pages": "0"})
        assert first_header_value(headers, "X-Total-Pages") == first_header_value(
            httpx.Headers(), "X-Total-Pages"
        )

    def test_integer_value(self):
        headers = httpx.Headers({"X-Total-Pages": "12"})
        assert first_header_value(headers, "X-Total-Pages") == 12

    def test_lookup_is_case_insensitive(self):
        headers = httpx.Headers({"x-total-pages": "4"})
        assert first_header_value(headers, "X-Total-Pages") == 4

    def test_first_of_repeated_values_wins(self):
        headers = httpx.Headers([("X-Next-Page", "3"), ("X-Next-Page", "9")])
        assert first_header_value(headers, "X-Next-Page") == 3

    def test_malformed_value_raises(self):
        headers = httpx.Headers({"X-Total-Pages": "many"})
        with pytest.raises(ValueError):
            first_header_value(headers, "X-Total-Pages")

    def test_other_value_types(self):
        assert first_header_value(httpx.Headers(), "X-Request-Id", str) == ""
        headers = httpx.Headers({"X-Ratio": "0.5"})
        assert first_header_value(headers, "X-Ratio", float) == 0.5
