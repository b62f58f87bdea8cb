"""
ARX Word Operations and Cipher Parameters

This module implements the 32-bit ARX (Addition, Rotation, XOR) primitives
and the little-endian word packing used to load the key and nonce into the
ChaCha20 state, together with input validation for the fixed-size
parameters.
"""

import operator
import secrets
from typing import Any, Dict, List, Sequence, Tuple

# "expand 32-byte k" as four little-endian words
CHACHA_CONSTANTS: Tuple[int, int, int, int] = (
    0x61707865, 0x3320646e, 0x79622d32, 0x6b206574
)

# Default parameters for ChaCha20
CHACHA_DEFAULT_PARAMS: Dict[str, int] = {
    'key_size': 32,      # 256-bit key
    'nonce_size': 12,    # 96-bit nonce
    'block_size': 64,    # Keystream bytes per block
    'rounds': 20,        # 10 double rounds
    'counter_bits': 32,  # Block counter width
}

MASK32 = 0xFFFFFFFF


def rotate_left(value: int, shift: int, size: int = 32) -> int:
    """
    Rotate a value left by the specified number of bits.

    Args:
        value: The value to rotate
        shift: The number of bits to rotate by
        size: The bit size of the value

    Returns:
        The rotated value
    """
    return ((value << shift) | (value >> (size - shift))) & ((1 << size) - 1)


def add32(a: int, b: int) -> int:
    """Add two words modulo 2^32."""
    return (a + b) & MASK32


def bytes_to_words(data: bytes) -> List[int]:
    """
    Split a byte string into 32-bit little-endian words.

    Args:
        data: Bytes to split (length must be a multiple of 4)

    Returns:
        A list of word values
    """
    if len(data) % 4 != 0:
        raise ValueError(f"Data length must be a multiple of 4 bytes, got {len(data)}")

    return [int.from_bytes(data[i:i+4], byteorder='little')
            for i in range(0, len(data), 4)]


def words_to_bytes(words: Sequence[int]) -> bytes:
    """
    Serialize 32-bit words to bytes in little-endian order.

    Args:
        words: Word values (each masked to 32 bits)

    Returns:
        The serialized bytes, 4 per word
    """
    out = bytearray()
    for word in words:
        out.extend((word & MASK32).to_bytes(4, byteorder='little'))
    return bytes(out)


def _as_bytes(value: Any, name: str) -> bytes:
    """Copy a bytes-like object to bytes, reporting other types as ValueError."""
    try:
        return bytes(memoryview(value))
    except TypeError:
        raise ValueError(f"{name} must be a bytes-like object, got {type(value).__name__}")


def validate_key(key: Any) -> bytes:
    """
    Check that a key is a 32-byte bytes-like object.

    Returns:
        The key as an immutable bytes copy
    """
    key = _as_bytes(key, "Key")
    if len(key) != CHACHA_DEFAULT_PARAMS['key_size']:
        raise ValueError(
            f"Key must be exactly {CHACHA_DEFAULT_PARAMS['key_size']} bytes, got {len(key)}"
        )
    return key


def validate_nonce(nonce: Any) -> bytes:
    """
    Check that a nonce is a 12-byte bytes-like object.

    Returns:
        The nonce as an immutable bytes copy
    """
    nonce = _as_bytes(nonce, "Nonce")
    if len(nonce) != CHACHA_DEFAULT_PARAMS['nonce_size']:
        raise ValueError(
            f"Nonce must be exactly {CHACHA_DEFAULT_PARAMS['nonce_size']} bytes, got {len(nonce)}"
        )
    return nonce


def validate_integer(value: Any, name: str) -> int:
    """
    Convert any integer type (including numpy integers) to a plain int.

    Args:
        value: The value to convert
        name: Parameter name used in the error message

    Returns:
        The value as int

    Raises:
        ValueError: If value is a bool or not an integer
    """
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got bool")
    try:
        return operator.index(value)
    except TypeError:
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")


def validate_counter(counter: Any) -> int:
    """Check that a block counter is an unsigned 32-bit integer."""
    counter = validate_integer(counter, "Counter")
    counter_bits = CHACHA_DEFAULT_PARAMS['counter_bits']
    if not 0 <= counter < (1 << counter_bits):
        raise ValueError(f"Counter must be in range [0, 2**{counter_bits}), got {counter}")
    return counter


def validate_rounds(rounds: Any) -> int:
    """Check that a round count is a positive even integer."""
    rounds = validate_integer(rounds, "Rounds")
    if rounds <= 0 or rounds % 2 != 0:
        raise ValueError(f"Rounds must be a positive even number, got {rounds}")
    return rounds


def generate_key(key_size: int = CHACHA_DEFAULT_PARAMS['key_size']) -> bytes:
    """
    Generate a cryptographically secure random key.

    Args:
        key_size: Size of the key in bytes (default: 32)

    Returns:
        A random key as bytes
    """
    return secrets.token_bytes(key_size)


def generate_nonce(nonce_size: int = CHACHA_DEFAULT_PARAMS['nonce_size']) -> bytes:
    """Generate a random 96-bit nonce."""
    return secrets.token_bytes(nonce_size)


if __name__ == "__main__":
    assert rotate_left(0x80000001, 1) == 0x00000003
    assert add32(MASK32, 2) == 1

    words = bytes_to_words(b"expand 32-byte k")
    print(f"Constants: {[hex(w) for w in words]}")
    assert tuple(words) == CHACHA_CONSTANTS
    assert words_to_bytes(words) == b"expand 32-byte k"

    print("ARX operation tests passed!")
