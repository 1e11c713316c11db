"""
Sealed boxes: AES-256-GCM encryption with a Shamir-split key.

Sealing draws a fresh 256-bit key, encrypts the payload under it and splits
the key with split(). The box itself stores no key material.

Unsealing searches k-subsets of the supplied keys with combine(), using a
successful GCM decryption as the predicate. GCM authentication is what tells
a correct key apart from the random bytes recombined out of corrupt,
mismatched or too few keys.

Box wire format:
    - 1 byte: format version (1)
    - 1 byte: threshold k
    - 1 byte: total keys n
    - 12 bytes: nonce
    - remaining: ciphertext (includes 16-byte auth tag)

The 3-byte header is bound to the ciphertext as associated data.

Reference:
    NIST SP 800-38D: Recommendation for Block Cipher Modes of Operation: GCM
"""

import logging
import os
from dataclasses import dataclass
from typing import Iterable, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .rng import EntropySource, random_bytes
from .shamir import Key, SecretInput, check_parameters, combine, split


_logger = logging.getLogger(__name__)

VERSION = 1

# 96-bit nonce, as recommended by NIST.
NONCE_SIZE = 12

TAG_SIZE = 16

KEY_SIZE = 32

HEADER_SIZE = 3


def _header(k: int, n: int) -> bytes:
    return bytes([VERSION, k, n])


@dataclass(frozen=True)
class SealedBox:
    """
    An encrypted payload whose key has been split.

    Attributes:
        threshold: Keys needed to open the box (k)
        total: Keys produced when sealing (n)
        nonce: Random GCM nonce (12 bytes)
        ciphertext: Encrypted payload including authentication tag
    """

    threshold: int
    total: int
    nonce: bytes
    ciphertext: bytes

    def header(self) -> bytes:
        return _header(self.threshold, self.total)

    def to_bytes(self) -> bytes:
        return self.header() + self.nonce + self.ciphertext

    @classmethod
    def from_bytes(cls, data: bytes) -> "SealedBox":
        """
        Deserialize from binary format.

        Raises:
            ValueError: If data is too short or has an unknown version
            InvalidThreshold, InsufficientShares: If the header is inconsistent
        """
        if len(data) < HEADER_SIZE + NONCE_SIZE + TAG_SIZE:
            raise ValueError(
                f"Sealed box too short: got {len(data)}, "
                f"minimum {HEADER_SIZE + NONCE_SIZE + TAG_SIZE}"
            )

        version, threshold, total = data[0], data[1], data[2]
        if version != VERSION:
            raise ValueError(f"Unsupported sealed box version {version}")
        check_parameters(threshold, total)

        nonce = data[HEADER_SIZE : HEADER_SIZE + NONCE_SIZE]
        ciphertext = data[HEADER_SIZE + NONCE_SIZE :]
        return cls(threshold=threshold, total=total, nonce=nonce, ciphertext=ciphertext)


def _decrypt(box: SealedBox, key: bytes) -> Optional[bytes]:
    """Plaintext of box under key, or None if authentication fails."""
    if len(key) != KEY_SIZE:
        return None
    try:
        return AESGCM(key).decrypt(box.nonce, box.ciphertext, box.header())
    except InvalidTag:
        return None


def seal(
    plaintext: SecretInput,
    k: int,
    n: Optional[int] = None,
    entropy: Optional[EntropySource] = None,
) -> tuple[SealedBox, list[Key]]:
    """
    Encrypt plaintext and split the encryption key.

    Args:
        plaintext: Payload to protect
        k: Keys needed to open the box
        n: Keys to produce (default: k)
        entropy: Source for the AES key and polynomial coefficients

    Returns:
        Tuple of (SealedBox, n keys)

    Raises:
        InvalidThreshold, InsufficientShares, TooManyShares: On bad k or n
    """
    if n is None:
        n = k
    # Validate before drawing any randomness
    check_parameters(k, n)

    data = plaintext.encode("utf-8") if isinstance(plaintext, str) else bytes(plaintext)

    aes_key = random_bytes(KEY_SIZE, entropy)
    # Nonces always come from the system CSPRNG, even with a seeded source
    nonce = os.urandom(NONCE_SIZE)

    ciphertext = AESGCM(aes_key).encrypt(nonce, data, _header(k, n))
    box = SealedBox(threshold=k, total=n, nonce=nonce, ciphertext=ciphertext)

    keys = split(aes_key, k, n, entropy)
    _logger.debug("Sealed %d bytes into a %d-of-%d box", len(data), k, n)
    return box, keys


def unseal(box: SealedBox, keys: Iterable[SecretInput]) -> Optional[bytes]:
    """
    Open a sealed box with any threshold-sized subset of keys.

    Args:
        box: Box produced by seal()
        keys: Candidate keys; extras, corrupt keys and keys from other
            boxes are tolerated as long as some k of them are genuine

    Returns:
        The plaintext, or None if no k of the keys open the box

    Raises:
        NoShares: If keys is empty
        UnequalKeyLengths: If keys have different lengths
    """
    keys = list(keys)
    if 0 < len(keys) < box.threshold:
        _logger.debug(
            "Only %d keys for a %d-of-%d box", len(keys), box.threshold, box.total
        )
        return None

    aes_key = combine(
        keys,
        k=box.threshold,
        predicate=lambda candidate: _decrypt(box, candidate) is not None,
    )
    if aes_key is None:
        _logger.debug("No combination of %d keys opened the box", len(keys))
        return None

    return _decrypt(box, aes_key)
