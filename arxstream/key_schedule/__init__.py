"""
Key Schedule Package

This package implements the ARX word primitives and the little-endian
key/nonce loading that feed the ChaCha20 state, along with validation of
the fixed-size cipher parameters.
"""

from .arx_ops import (
    CHACHA_CONSTANTS,
    CHACHA_DEFAULT_PARAMS,
    rotate_left,
    add32,
    bytes_to_words,
    words_to_bytes,
    validate_integer,
    validate_key,
    validate_nonce,
    validate_counter,
    validate_rounds,
    generate_key,
    generate_nonce,
)

__all__ = [
    'CHACHA_CONSTANTS', 'CHACHA_DEFAULT_PARAMS',
    'rotate_left', 'add32',
    'bytes_to_words', 'words_to_bytes',
    'validate_integer', 'validate_key', 'validate_nonce', 'validate_counter', 'validate_rounds',
    'generate_key', 'generate_nonce',
]
