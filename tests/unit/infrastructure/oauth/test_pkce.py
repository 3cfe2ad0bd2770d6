"""Tests for state and PKCE helpers."""

import pytest

from arealink.infrastructure.oauth.pkce import (
    CODE_CHALLENGE_PLAIN,
    CODE_CHALLENGE_S256,
    derive_code_challenge,
    generate_code_verifier,
    generate_state,
)


class TestCodeVerifier:
    def test_default_length(self):
        assert len(generate_code_verifier()) == 64

    @pytest.mark.parametrize("length", [43, 128])
    def test_bounds_accepted(self, length):
        verifier = generate_code_verifier(length)
        assert len(verifier) == length
        assert set(verifier) <= set(
            "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
        )

    @pytest.mark.parametrize("length", [42, 129])
    def test_out_of_bounds_rejected(self, length):
        with pytest.raises(ValueError):
            generate_code_verifier(length)


class TestCodeChallenge:
    def test_s256_matches_rfc7636_example(self):
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert derive_code_challenge(verifier, CODE_CHALLENGE_S256) == (
            "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"
        )

    def test_plain_returns_verifier(self):
        assert derive_code_challenge("abc", CODE_CHALLENGE_PLAIN) == "abc"

    def test_unknown_method_rejected(self):
        with pytest.raises(ValueError):
            derive_code_challenge("abc", "S512")


def test_state_is_url_safe_and_unique():
    first, second = generate_state(), generate_state()
    assert first != second
    assert "=" not in first and "+" not in first and "/" not in first
