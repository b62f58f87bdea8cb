"""
arxstream - ChaCha20 Stream Cipher Library

This library implements the ChaCha20 stream cipher as specified in
RFC 8439: a 256-bit key, a 96-bit nonce and a 32-bit block counter
driving an ARX block function that produces 64-byte keystream blocks.

Key Features:
- Bit-exact RFC 8439 block function (20 rounds, reduced rounds configurable)
- Counter-mode engine over any bytes-like buffer, filled in place
- Numpy-vectorised generation of consecutive keystream blocks
- Stateful cipher object that carries the block counter across calls
"""

from .cipher_core import generate_block, generate_blocks
from .stream_mode import ChaCha20, apply, encrypt, decrypt, keystream
from .key_schedule import generate_key, generate_nonce

__version__ = '0.1.0'
__author__ = 'arxstream Team'

__all__ = [
    'generate_block', 'generate_blocks',
    'ChaCha20', 'apply', 'encrypt', 'decrypt', 'keystream',
    'generate_key', 'generate_nonce',
]
