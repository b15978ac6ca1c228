# Tests for CSRF nonce generation and comparison.

import re

import pytest

from doorkeeper_client.state import generate_state, is_blank, state_matches


class TestGenerateState:
    def test_is_32_hex_chars(self):
        assert re.fullmatch(r"[0-9a-f]{32}", generate_state())

    def test_independent_calls_differ(self):
        nonces = {generate_state() for _ in range(200)}
        assert len(nonces) == 200

    def test_random_source_failure_propagates(self, monkeypatch):
        import doorkeeper_client.state as mod

        def broken(_n):
            raise OSError("no entropy")

        monkeypatch.setattr(mod.secrets, "token_hex", broken)
        with pytest.raises(OSError):
            generate_state()


class TestStateMatches:
    @pytest.mark.parametrize("value", ["abc123", "x", "A b", "ünïcode"])
    def test_same_non_blank_value_matches(self, value):
        assert state_matches(value, value) is True

    @pytest.mark.parametrize("value", ["", " ", "\t\n", None])
    def test_blank_never_matches_itself(self, value):
        assert state_matches(value, value) is False

    @pytest.mark.parametrize(
        "expected, received",
        [("", "x"), (None, "x"), ("  ", "y"), ("x", None), ("x", ""), ("x", "   ")],
    )
    def test_blank_or_missing_side_rejected(self, expected, received):
        assert state_matches(expected, received) is False

    def test_comparison_is_case_sensitive(self):
        assert state_matches("abc123", "ABC123") is False

    def test_no_whitespace_normalization(self):
        assert state_matches("abc123", " abc123") is False

    def test_different_values(self):
        assert state_matches("abc123", "wrong") is False


def test_is_blank():
    assert is_blank(None)
    assert is_blank("")
    assert is_blank("  \t")
    assert not is_blank(" a ")
