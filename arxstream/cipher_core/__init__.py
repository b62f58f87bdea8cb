"""
Cipher Core Package

This package implements the ChaCha20 block function, including the
quarter-round, the column/diagonal double round, the feed-forward step,
and a numpy-vectorised generator for runs of consecutive blocks.
"""

from .chacha_block import (
    generate_block,
    initial_state,
    quarter_round,
    double_round,
    block_words,
    self_test,
)
from .vectorized import generate_blocks

__all__ = [
    'generate_block', 'initial_state', 'quarter_round', 'double_round',
    'block_words', 'self_test', 'generate_blocks',
]
