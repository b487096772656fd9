from __future__ import annotations
import hashlib
import logging
from typing import Callable

from hash_guesser.errors import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------

# display name -> hashlib name
ALGORITHMS: dict[str, str] = {
    "MD5": "md5",
    "SHA-1": "sha1",
    "SHA-224": "sha224",
    "SHA-256": "sha256",
    "SHA-384": "sha384",
    "SHA-512": "sha512",
    "SHA3-256": "sha3_256",
    "SHA3-512": "sha3_512",
}


def _key(name: str) -> str:
    return name.upper().replace("-", "").replace("_", "")


_BY_KEY = {_key(name): name for name in ALGORITHMS}


def resolve_algorithm(name: str) -> str:
    """Return the canonical algorithm name for ``name`` ("sha256" -> "SHA-256").

    Raises ConfigurationError when the algorithm is not supported or the
    running interpreter's hashlib cannot provide it.
    """
    canonical = _BY_KEY.get(_key(name))
    if canonical is None:
        raise ConfigurationError(
            f"unsupported hash algorithm {name!r}; expected one of {list(ALGORITHMS)}")
    try:
        hashlib.new(ALGORITHMS[canonical], usedforsecurity=False)
    except ValueError as e:
        raise ConfigurationError(f"hash algorithm {canonical} is unavailable: {e}") from e
    return canonical


def digest_size(algorithm: str) -> int:
    return hashlib.new(ALGORITHMS[resolve_algorithm(algorithm)], usedforsecurity=False).digest_size


def hasher_for(algorithm: str) -> Callable[[bytes], bytes]:
    """Return a function computing the raw digest of bytes."""
    constructor = getattr(hashlib, ALGORITHMS[resolve_algorithm(algorithm)])

    def digest(data: bytes) -> bytes:
        return constructor(data, usedforsecurity=False).digest()

    return digest

# ---------------------------------------------------------------------------


def digest_of(text: str, algorithm: str) -> bytes:
    return hasher_for(algorithm)(text.encode())


def hexdigest_of(text: str, algorithm: str) -> str:
    digest = digest_of(text, algorithm).hex()
    logger.debug(f"{algorithm}('{text}') -> {digest}")
    return digest

# ---------------------------------------------------------------------------


def parse_target(hex_digest: str, algorithm: str) -> bytes:
    """Decode a hex target digest and check it fits ``algorithm``."""
    canonical = resolve_algorithm(algorithm)
    text = hex_digest.strip()
    try:
        target = bytes.fromhex(text)
    except ValueError as e:
        raise ConfigurationError(f"target digest is not valid hexadecimal: {e}") from e

    expected = digest_size(canonical)
    if len(target) != expected:
        raise ConfigurationError(
            f"target digest is {len(target)} bytes but {canonical} digests are {expected} bytes")
    return target


def digests_match(candidate: bytes, target: bytes) -> bool:
    """Compare two digests byte by byte, stopping at the first difference."""
    if len(candidate) != len(target):
        return False
    for a, b in zip(candidate, target):
        if a != b:
            return False
    return True
