"""Tests for infisicalservice.masking: log-safe redaction."""

import pytest

from infisicalservice.masking import NOT_SET, SHORT_MASK, mask_credential, mask_secret_value


class TestMaskSecretValue:
    def test_empty(self):
        assert mask_secret_value("") == "<not set>"

    def test_none(self):
        assert mask_secret_value(None) == NOT_SET

    @pytest.mark.parametrize("value", ["a", "short", "12345678"])
    def test_short_values(self, value):
        assert mask_secret_value(value) == "***"

    def test_keeps_two_each_side(self):
        assert mask_secret_value("abcdefghij") == "ab...ij"

    def test_nine_chars(self):
        assert mask_secret_value("s3cr3t123") == "s3...23"


class TestMaskCredential:
    def test_empty(self):
        assert mask_credential("") == "<not set>"

    def test_boundary(self):
        assert mask_credential("12345678") == SHORT_MASK

    def test_keeps_four_each_side(self):
        assert mask_credential("abcdefghij") == "abcd...ghij"

    def test_never_contains_middle(self):
        secret = "client-secret-abcdefghij"
        masked = mask_credential(secret)
        assert masked == "clie...ghij"
        assert "secret" not in masked
