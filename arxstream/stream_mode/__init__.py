"""
Stream Mode Package

This package implements the counter-mode engine that turns the ChaCha20
block function into a stream cipher over buffers of any length.
"""

from .counter_mode import ChaCha20, apply, encrypt, decrypt, keystream, VECTOR_BATCH_BLOCKS

__all__ = ['ChaCha20', 'apply', 'encrypt', 'decrypt', 'keystream', 'VECTOR_BATCH_BLOCKS']
