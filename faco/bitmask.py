import numpy as np
import numba as nb

WORD_BITS = 64


def word_count(size: int) -> int:
    return (size + WORD_BITS - 1) // WORD_BITS


# Kernels operate on the raw uint64 word array so they can be called from
# other nopython functions (e.g. the unvisited list compaction of an Ant).
# All shift operands are cast to uint64, mixing uint64 with int64 in numba
# promotes to float64.

@nb.jit(nb.void(nb.uint64[:], nb.int64), nopython=True, nogil=True)
def set_bit(words, bit):
    words[bit >> 6] |= np.uint64(1) << np.uint64(bit & 63)


@nb.jit(nb.void(nb.uint64[:], nb.int64), nopython=True, nogil=True)
def clear_bit(words, bit):
    words[bit >> 6] &= ~(np.uint64(1) << np.uint64(bit & 63))


@nb.jit(nb.boolean(nb.uint64[:], nb.int64), nopython=True, nogil=True)
def get_bit(words, bit):
    return ((words[bit >> 6] >> np.uint64(bit & 63)) & np.uint64(1)) != np.uint64(0)


class Bitmask:
    """
    Packed bit-set over node ids ``[0, size)``.

    Single bit operations are O(1), ``clear`` is O(size / 64).
    """

    def __init__(self, size: int = 0):
        self.size = size
        self.words = np.zeros(word_count(size), dtype=np.uint64)

    def resize(self, size: int):
        """Resize the mask. Storage is reused when the word count does not change,
        so bits are only guaranteed to be zero after ``clear``."""
        if word_count(size) != len(self.words):
            self.words = np.zeros(word_count(size), dtype=np.uint64)
        self.size = size

    def clear(self):
        self.words[:] = 0

    def set_bit(self, bit: int):
        set_bit(self.words, int(bit))

    def clear_bit(self, bit: int):
        clear_bit(self.words, int(bit))

    def get_bit(self, bit: int) -> bool:
        return bool(get_bit(self.words, int(bit)))

    def count(self) -> int:
        """Number of set bits."""
        return int(np.unpackbits(self.words.view(np.uint8)).sum())

    def __len__(self):
        return self.size

    def __contains__(self, bit):
        return 0 <= bit < self.size and self.get_bit(bit)

    def __eq__(self, other):
        if not isinstance(other, Bitmask):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.words, other.words)

    def __repr__(self):
        return f"Bitmask(size={self.size}, set={self.count()})"
