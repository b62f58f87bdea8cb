"""
ChaCha20 Counter-Mode Stream Engine

This module drives the ChaCha20 block function across consecutive block
counters to cover a buffer of any length, XORing each keystream block
into the matching slice of output. The same operation encrypts and
decrypts.
"""

import logging
from typing import Any, List, Optional, Tuple

import numpy as np

from ..cipher_core.chacha_block import initial_state, block_words
from ..cipher_core.vectorized import generate_blocks
from ..key_schedule.arx_ops import (
    CHACHA_DEFAULT_PARAMS,
    MASK32,
    words_to_bytes,
    validate_integer,
    validate_counter,
    validate_rounds,
    generate_nonce,
)

logger = logging.getLogger(__name__)

BLOCK_SIZE = CHACHA_DEFAULT_PARAMS['block_size']

# Blocks per numpy batch in the vectorised path (64 KiB of keystream)
VECTOR_BATCH_BLOCKS = 1024


def _byte_view(buffer: Any, name: str) -> memoryview:
    """Return a flat byte view of buffer, reporting non-buffers as ValueError."""
    try:
        return memoryview(buffer).cast('B')
    except TypeError:
        raise ValueError(f"{name} must be a contiguous bytes-like object, got {type(buffer).__name__}")


def _crypt_scalar(out: memoryview, src: memoryview, template: List[int],
                  counter: int, rounds: int) -> int:
    """XOR the keystream into out one block at a time; returns the next counter."""
    state = list(template)
    length = len(src)
    offset = 0

    while offset < length:
        state[12] = counter
        block = words_to_bytes(block_words(state, rounds))
        counter = (counter + 1) & MASK32

        chunk = min(BLOCK_SIZE, length - offset)
        out[offset:offset + chunk] = bytes(
            a ^ b for a, b in zip(src[offset:offset + chunk], block)
        )
        offset += chunk

    return counter


def _crypt_vectorized(out: memoryview, src: memoryview, template: List[int],
                      counter: int, rounds: int) -> int:
    """XOR the keystream into out in numpy batches; returns the next counter."""
    key = words_to_bytes(template[4:12])
    nonce = words_to_bytes(template[13:16])
    length = len(src)
    offset = 0

    while offset < length:
        chunk = min(VECTOR_BATCH_BLOCKS * BLOCK_SIZE, length - offset)
        num_blocks = -(-chunk // BLOCK_SIZE)
        logger.debug("Vectorised batch of %d blocks at counter %d", num_blocks, counter)

        keystream = np.frombuffer(generate_blocks(key, nonce, counter, num_blocks, rounds),
                                  dtype=np.uint8)
        data = np.frombuffer(src[offset:offset + chunk], dtype=np.uint8)
        out[offset:offset + chunk] = (data ^ keystream[:chunk]).tobytes()

        counter = (counter + num_blocks) & MASK32
        offset += chunk

    return counter


def _process(output: Any, data: Any, template: List[int], counter: int,
             rounds: int, vectorized: bool) -> int:
    """
    Validate the buffers, then fill output with data XOR keystream.

    Returns:
        The counter following the last block used
    """
    src = _byte_view(data, "Input")
    out = _byte_view(output, "Output")

    if out.readonly:
        raise ValueError("Output buffer must be writable")
    if len(out) != len(src):
        raise ValueError(
            f"Output length ({len(out)}) must equal input length ({len(src)})"
        )

    if len(src) == 0:
        return counter

    crypt = _crypt_vectorized if vectorized else _crypt_scalar
    next_counter = crypt(out, src, template, counter, rounds)

    num_blocks = -(-len(src) // BLOCK_SIZE)
    logger.debug("Processed %d bytes in %d blocks", len(src), num_blocks)
    if counter + num_blocks > MASK32 + 1:
        logger.debug("Block counter wrapped past 2^32")

    return next_counter


def apply(output: Any,
          data: Any,
          key: bytes,
          nonce: bytes,
          initial_counter: int = 0,
          rounds: int = CHACHA_DEFAULT_PARAMS['rounds'],
          vectorized: bool = False) -> None:
    """
    XOR the ChaCha20 keystream with `data` into `output`.

    Block `i` of the buffer uses counter `initial_counter + i` (mod 2^32).
    A final partial block still consumes one counter value, and only its
    needed prefix is written. Every argument is checked before any
    keystream is generated, so a rejected call leaves output untouched.

    Args:
        output: Writable buffer of the same length as data
        data: Plaintext or ciphertext
        key: 32-byte key
        nonce: 12-byte nonce
        initial_counter: Counter of the first block
        rounds: Number of rounds (default: 20)
        vectorized: Compute keystream in numpy batches

    Raises:
        ValueError: If any argument is malformed or the lengths differ
    """
    rounds = validate_rounds(rounds)
    template = initial_state(key, nonce, initial_counter)
    _process(output, data, template, template[12], rounds, vectorized)


class ChaCha20:
    """
    ChaCha20 stream cipher bound to one key and nonce, carrying the block
    counter across calls.

    Each call starts on a fresh block: keystream left over from a
    partial final block is discarded, not carried into the next call.
    Instances are not safe to share between threads without a lock.
    """

    def __init__(self,
                 key: bytes,
                 nonce: bytes,
                 initial_counter: int = 0,
                 rounds: int = CHACHA_DEFAULT_PARAMS['rounds'],
                 vectorized: bool = False):
        """
        Initialize the cipher.

        Args:
            key: The secret key (32 bytes)
            nonce: The nonce (12 bytes)
            initial_counter: Counter of the first block (default: 0)
            rounds: Number of rounds (default: 20)
            vectorized: Compute keystream in numpy batches
        """
        self.rounds = validate_rounds(rounds)
        self.vectorized = vectorized

        # Key and nonce are kept only as state words
        self._template = initial_state(key, nonce, initial_counter)
        self._counter = self._template[12]

    @property
    def counter(self) -> int:
        """Counter of the next block to be generated."""
        return self._counter

    def reset_counter(self, value: int) -> None:
        """
        Set the counter of the next block.

        Raises:
            ValueError: If value is not an unsigned 32-bit integer
        """
        self._counter = validate_counter(value)

    def crypt_into(self, data: Any, output: Any) -> None:
        """
        Encrypt or decrypt `data` into the writable buffer `output`.

        Args:
            data: Plaintext or ciphertext
            output: Writable buffer of the same length

        Raises:
            ValueError: If the buffers are malformed or their lengths differ
        """
        self._counter = _process(output, data, self._template, self._counter,
                                 self.rounds, self.vectorized)

    def crypt(self, data: Any) -> bytes:
        """
        Encrypt or decrypt `data`.

        Args:
            data: Plaintext or ciphertext

        Returns:
            The transformed bytes
        """
        output = bytearray(len(_byte_view(data, "Input")))
        self.crypt_into(data, output)
        return bytes(output)

    def keystream(self, length: int) -> bytes:
        """
        Return `length` raw keystream bytes, advancing the counter.

        Args:
            length: Number of bytes

        Returns:
            The keystream
        """
        length = validate_integer(length, "Length")
        if length < 0:
            raise ValueError(f"Length must be a non-negative integer, got {length!r}")
        return self.crypt(bytes(length))


def encrypt(plaintext: bytes,
            key: bytes,
            nonce: Optional[bytes] = None,
            counter: int = 0) -> Tuple[bytes, bytes]:
    """
    Encrypt data with ChaCha20.

    Args:
        plaintext: The plaintext to encrypt
        key: The encryption key
        nonce: Optional nonce (will be generated if None)
        counter: Counter of the first block

    Returns:
        A tuple of (ciphertext, nonce)
    """
    if nonce is None:
        nonce = generate_nonce()

    cipher = ChaCha20(key, nonce, initial_counter=counter)
    return cipher.crypt(plaintext), bytes(nonce)


def decrypt(ciphertext: bytes,
            key: bytes,
            nonce: bytes,
            counter: int = 0) -> bytes:
    """
    Decrypt data with ChaCha20.

    Args:
        ciphertext: The ciphertext to decrypt
        key: The encryption key
        nonce: The nonce used during encryption
        counter: Counter of the first block used during encryption

    Returns:
        The decrypted plaintext
    """
    cipher = ChaCha20(key, nonce, initial_counter=counter)
    return cipher.crypt(ciphertext)


def keystream(key: bytes, nonce: bytes, length: int, counter: int = 0) -> bytes:
    """Return `length` bytes of keystream starting at block `counter`."""
    return ChaCha20(key, nonce, initial_counter=counter).keystream(length)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    from ..key_schedule.arx_ops import generate_key

    key = generate_key()
    plaintext = b"This is a test message for the ChaCha20 stream cipher."

    ciphertext, nonce = encrypt(plaintext, key)

    print(f"Key: {key.hex()}")
    print(f"Nonce: {nonce.hex()}")
    print(f"Plaintext: {plaintext}")
    print(f"Ciphertext: {ciphertext.hex()}")

    decrypted = decrypt(ciphertext, key, nonce)
    print(f"Decrypted: {decrypted}")
    assert decrypted == plaintext

    # In-place over a caller-owned buffer, vectorised
    buffer = bytearray(plaintext)
    apply(buffer, buffer, key, nonce, vectorized=True)
    assert bytes(buffer) == ciphertext

    print("Stream cipher tests completed successfully!")
