"""Fixed-size packed bitset backed by a numpy byte array."""

from typing import Iterable, List

import numpy as np


# BitSet
#
# A fixed-length array of single-bit flags. Bit ``i`` lives in byte
# ``i >> 3`` at position ``i & 7`` (least-significant bit of byte 0 is bit 0),
# which matches ``np.packbits(..., bitorder="little")``.
#
# Parameters
#   size (int): Number of addressable bits, must be positive.
#
# Example
#   bits = BitSet(10)
#   bits.set(3)
#   assert bits.get(3) and (not bits.get(4))
#
class BitSet:
    __slots__ = ("size", "_bytes")

    def __init__(self, size: int) -> None:
        if (size <= 0):
            raise ValueError(f"BitSet size must be positive, got {size}")
        self.size: int = int(size)
        self._bytes: np.ndarray = np.zeros((self.size + 7) // 8, dtype=np.uint8)

    # Raise an IndexError when "index" does not address a bit in this set.
    # Negative indices are never wrapped around.
    def _check(self, index: int) -> None:
        if not (0 <= index < self.size):
            raise IndexError(f"bit index {index} out of range [0, {self.size})")

    def get(self, index: int) -> bool:
        self._check(index)
        return bool(self._bytes[index >> 3] & (1 << (index & 7)))

    def set(self, index: int, value: bool = True) -> None:
        self._check(index)
        if value:
            self._bytes[index >> 3] |= np.uint8(1 << (index & 7))
        else:
            self._bytes[index >> 3] &= np.uint8(~(1 << (index & 7)) & 0xFF)

    def __getitem__(self, index: int) -> bool:
        return self.get(index)

    def __setitem__(self, index: int, value: bool) -> None:
        self.set(index, value)

    def __len__(self) -> int:
        return self.size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitSet):
            return NotImplemented
        return (self.size == other.size) and bool(np.array_equal(self._bytes, other._bytes))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(size={self.size}, set={self.count()})"

    # Number of bits currently set.
    def count(self) -> int:
        return int(np.unpackbits(self._bytes).sum())

    # ------------------------------------------------------------------
    # Conversions

    # Packed little-endian bytes, ``ceil(size / 8)`` long. Padding bits in
    # the final byte are always zero.
    def to_bytes(self) -> bytes:
        return self._bytes.tobytes()

    # Rebuild a BitSet of "size" bits from its packed bytes.
    #
    # Raises
    #   ValueError: If the byte length does not match "size" or any padding
    #     bit past "size" is set.
    #
    @classmethod
    def from_bytes(cls, data: bytes, size: int) -> "BitSet":
        if (size <= 0):
            raise ValueError(f"BitSet size must be positive, got {size}")
        # Length is checked before anything of "size" bits is allocated.
        expected = (size + 7) // 8
        if (len(data) != expected):
            raise ValueError(f"expected {expected} bytes for {size} bits, got {len(data)}")
        packed = np.frombuffer(bytes(data), dtype=np.uint8).copy()
        padding = expected * 8 - size
        if (padding > 0) and (int(packed[-1]) >> (8 - padding)):
            raise ValueError("padding bits past the end of the bitset are set")
        bits = cls.__new__(cls)
        bits.size = int(size)
        bits._bytes = packed
        return bits

    # Ordered list of booleans, one per bit.
    def to_list(self) -> List[bool]:
        unpacked = np.unpackbits(self._bytes, count=self.size, bitorder="little")
        return unpacked.astype(bool).tolist()

    @classmethod
    def from_list(cls, flags: Iterable[bool]) -> "BitSet":
        flags = np.asarray(list(flags), dtype=bool)
        bits = cls(flags.size)
        bits._bytes = np.packbits(flags, bitorder="little")
        return bits
