"""Proof-key-for-code-exchange material used while pairing with a hub."""
import base64
import hashlib
import secrets
from typing import NamedTuple

from .exceptions import DirigeraException

MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128
CHALLENGE_METHOD = "S256"


class ProofKeyPair(NamedTuple):
    """A code verifier and the challenge derived from it."""

    verifier: str
    challenge: str

    def __repr__(self) -> str:
        return f"ProofKeyPair(verifier=<redacted>, challenge={self.challenge!r})"


def derive_challenge(verifier: str) -> str:
    """Return the S256 challenge for a verifier (base64url, no padding)."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def generate(length: int = MAX_VERIFIER_LENGTH) -> ProofKeyPair:
    """Create a fresh verifier and its challenge.

    :param length: number of characters in the verifier, 43 to 128
    :raises ValueError: if the length is out of range
    :raises DirigeraException: if the system random source is unavailable
    """
    if not MIN_VERIFIER_LENGTH <= length <= MAX_VERIFIER_LENGTH:
        raise ValueError(
            f"Verifier length must be between {MIN_VERIFIER_LENGTH} and {MAX_VERIFIER_LENGTH}"
        )
    try:
        # 96 random bytes encode to exactly 128 URL-safe characters
        verifier = secrets.token_urlsafe(96)[:length]
    except (OSError, NotImplementedError) as err:
        raise DirigeraException("Unable to read from the random source") from err
    return ProofKeyPair(verifier=verifier, challenge=derive_challenge(verifier))
