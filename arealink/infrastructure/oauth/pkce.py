"""State and PKCE (RFC 7636) helpers."""

import base64
import hashlib
import secrets
import string

CODE_CHALLENGE_PLAIN = "plain"
CODE_CHALLENGE_S256 = "S256"

MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128

_VERIFIER_ALPHABET = string.ascii_letters + string.digits + "-._~"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def generate_state(size: int = 32) -> str:
    """Random URL-safe state value built from `size` random bytes."""
    if size <= 0:
        raise ValueError("state size must be positive")
    return _b64url(secrets.token_bytes(size))


def generate_code_verifier(length: int = 64) -> str:
    """Random code verifier of `length` unreserved characters."""
    if not MIN_VERIFIER_LENGTH <= length <= MAX_VERIFIER_LENGTH:
        raise ValueError(
            f"code verifier length must be between {MIN_VERIFIER_LENGTH} and {MAX_VERIFIER_LENGTH}"
        )
    return "".join(secrets.choice(_VERIFIER_ALPHABET) for _ in range(length))


def derive_code_challenge(verifier: str, method: str = CODE_CHALLENGE_S256) -> str:
    """Code challenge for `verifier` using the given method."""
    if not verifier:
        raise ValueError("code verifier is required")
    if method == CODE_CHALLENGE_PLAIN:
        return verifier
    if method == CODE_CHALLENGE_S256:
        return _b64url(hashlib.sha256(verifier.encode("ascii")).digest())
    raise ValueError(f"unsupported code challenge method: {method!r}")
