"""
Index derivation by double hashing.

Two unrelated non-cryptographic hashes of an item are combined as

  index_i = (h_a + i * h_b) mod m

to simulate ``k`` independent hash functions (Kirsch & Mitzenmacher,
"Less Hashing, Same Performance"). ``h_a`` is the unsigned 32-bit
MurmurHash3 of the item and ``h_b`` its 64-bit xxHash. Both are computed
with fixed seeds, so the same item always maps to the same indices, across
calls and across processes. Python integers do not overflow, so the sum is
taken at full width before the modulus.
"""

from typing import Iterator, Tuple, Union

import mmh3
import xxhash


MURMUR_SEED = 0
XXHASH_SEED = 0


# Convert an item to the bytes that get hashed (strings as UTF-8).
def encode_item(item: Union[str, bytes, bytearray, memoryview]) -> bytes:
    if isinstance(item, str):
        return item.encode("utf-8")
    if isinstance(item, (bytes, bytearray, memoryview)):
        return bytes(item)
    raise TypeError(f"item must be str or bytes-like, got {type(item).__name__}")


# Compute the two base digests of "item".
#
# Returns
#   (Tuple[int, int]): (murmur3 32-bit unsigned, xxh64 unsigned).
#
def digests(item: bytes) -> Tuple[int, int]:
    h_a = mmh3.hash(item, MURMUR_SEED, signed=False)
    h_b = xxhash.xxh64_intdigest(item, seed=XXHASH_SEED)
    return h_a, h_b


# Derive the bit index of "item" for hash round "round".
#
# Parameters
#   item (bytes): Encoded item.
#   round (int): Non-negative hash round.
#   bit_count (int): Length of the bit array, positive.
#
# Returns
#   (int): Index in [0, bit_count).
#
def derive_index(item: bytes, round: int, bit_count: int) -> int:
    if (round < 0):
        raise ValueError(f"round must be non-negative, got {round}")
    if (bit_count <= 0):
        raise ValueError(f"bit_count must be positive, got {bit_count}")
    h_a, h_b = digests(item)
    return (h_a + round * h_b) % bit_count


# Yield the indices for rounds 0 .. hash_count-1, hashing "item" only once.
# Consumers may stop early, later rounds are computed lazily.
def derive_indices(item: bytes, hash_count: int, bit_count: int) -> Iterator[int]:
    if (hash_count <= 0) or (bit_count <= 0):
        raise ValueError("hash_count and bit_count must be positive")
    h_a, h_b = digests(item)
    for i in range(hash_count):
        yield (h_a + i * h_b) % bit_count
