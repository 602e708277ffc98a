"""Sub-byte integer fields inside big-endian words.

Offsets count from the most significant bit, matching how protocol
documents number header bits: in a 32-bit word, offset 0 is the top bit and
``read_bits(word, 14, 6)`` returns bits 14..19.
"""

from __future__ import annotations


def _check_field(offset: int, width: int, word_bits: int) -> None:
    if width <= 0:
        raise ValueError(f"Field width must be positive, got {width}")
    if offset < 0 or offset + width > word_bits:
        raise ValueError(
            f"Field [{offset}, {offset + width}) exceeds {word_bits}-bit word"
        )


def read_bits(word: int, offset: int, width: int, word_bits: int = 32) -> int:
    """Extract ``width`` bits starting at ``offset`` as an unsigned integer.

    Args:
        word: Unsigned word value.
        offset: Bit offset from the most significant bit.
        width: Number of bits to read.
        word_bits: Size of ``word`` in bits.

    Returns:
        The field value, shifted down to bit 0.

    Raises:
        ValueError: If the field does not fit into the word.
    """
    _check_field(offset, width, word_bits)
    shift = word_bits - offset - width
    return (word >> shift) & ((1 << width) - 1)


def write_bits(
    word: int, offset: int, width: int, value: int, word_bits: int = 32
) -> int:
    """Return ``word`` with the field at ``offset`` replaced by ``value``.

    Bits outside the field are preserved.

    Raises:
        ValueError: If the field does not fit into the word or ``value``
            does not fit into ``width`` bits.
    """
    _check_field(offset, width, word_bits)
    mask = (1 << width) - 1
    if value < 0 or value > mask:
        raise ValueError(f"Value {value} does not fit into {width} bits")
    shift = word_bits - offset - width
    return (word & ~(mask << shift)) | (value << shift)


def read_bool(word: int, offset: int, word_bits: int = 32) -> bool:
    """Return the single bit at ``offset``."""
    return read_bits(word, offset, 1, word_bits) == 1


def write_bool(word: int, offset: int, value: bool, word_bits: int = 32) -> int:
    """Set or clear the single bit at ``offset``."""
    return write_bits(word, offset, 1, 1 if value else 0, word_bits)
