"""Tests for correlation ID generation and context management."""

import re

from core.correlation import (
    correlation_id_var,
    generate_correlation_id,
    get_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)


class TestGenerateCorrelationId:
    def test_returns_8_lowercase_hex_characters(self) -> None:
        assert re.match(r"^[0-9a-f]{8}$", generate_correlation_id())

    def test_generates_unique_ids(self) -> None:
        ids = {generate_correlation_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestCorrelationIdContext:
    def test_set_and_get_correlation_id(self) -> None:
        set_correlation_id("abc12345")
        assert get_correlation_id() == "abc12345"

    def test_get_returns_empty_string_when_not_set(self) -> None:
        correlation_id_var.set("")
        assert get_correlation_id() == ""


class TestResolveCorrelationId:
    def test_reuses_sane_incoming_id(self) -> None:
        assert resolve_correlation_id("web-7f3a9c") == "web-7f3a9c"

    def test_generates_when_missing(self) -> None:
        assert len(resolve_correlation_id(None)) == 8

    def test_rejects_whitespace_and_long_values(self) -> None:
        assert resolve_correlation_id("two words") != "two words"
        long_value = "x" * 65
        assert resolve_correlation_id(long_value) != long_value
