"""
BloomFilter - capacity-bounded Bloom filter over string items.

A filter is sized from the number of items it must hold (its capacity) and
a target false-positive probability. Each item sets ``hash_count`` bits of a
packed bit array, the positions derived by double hashing (see
``bfilters.hashing``). Queries answer "definitely absent" (some bit clear)
or "probably present" (all bits set). Once ``capacity`` items have been
inserted the filter refuses further inserts instead of silently degrading
its false positive rate.

The whole state (parameters, counter and bits) serializes to a JSON
document or a compact binary blob, and reloads as an independent filter
that answers every query identically.

Example
  bloom = BloomFilter.create(capacity=1000, false_positive_target=0.01)
  bloom.insert("hello")
  print(bloom.might_contain("hello"))  # True
  print(bloom.might_contain("world"))  # False (probably)
"""

import base64
import binascii
import json
import logging
import math
import numbers
import struct
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Union

import numpy as np

from .bitset import BitSet
from .config import (
    BINARY_FORMAT_VERSION, BINARY_HEADER, BINARY_MAGIC,
    JSON_FORMAT_NAME, JSON_FORMAT_VERSION, FilterConfig,
)
from .errors import (
    FormatError, InvalidBitCountError, InvalidCapacityError, InvalidFalsePositiveRateError,
    InvalidHashCountError, ZeroCapacityError,
)
from .hashing import derive_indices, encode_item
from .sizing import best_bit_count, best_hash_count, expected_false_positive_rate


# Check that "value" is an integer, python or numpy (bools are rejected).
def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and (not isinstance(value, (bool, np.bool_)))


# Check that "value" is a real number, python or numpy (bools are rejected).
def _is_real(value: Any) -> bool:
    return isinstance(value, numbers.Real) and (not isinstance(value, (bool, np.bool_)))


# BloomFilter
#
# Attributes
#   false_positive_target (float): Design false positive rate, in (0, 1).
#   bit_count (int): Length of the bit array.
#   capacity (int): Maximum number of admitted inserts.
#   hash_count (int): Number of derived indices per item.
#   bits (BitSet): The bit array, only ever set (never cleared).
#   items_inserted (int): Number of successful inserts so far.
#
@dataclass
class BloomFilter:
    false_positive_target: float
    bit_count: int
    capacity: int
    hash_count: int
    bits: BitSet
    items_inserted: int = 0

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    # Create a new, empty filter sized for "capacity" items at the given
    # false positive target.
    #
    # Parameters
    #   capacity (int): Maximum number of items, positive.
    #   false_positive_target (float, optional): Target rate in (0, 1),
    #     defaults to DEFAULT_FALSE_POSITIVE_TARGET (0.4).
    #
    # Raises
    #   ZeroCapacityError: If capacity is not positive.
    #   InvalidCapacityError: If capacity is not an integer.
    #   InvalidFalsePositiveRateError: If the target is outside (0, 1).
    #
    @classmethod
    def create(cls, capacity: int, false_positive_target: Optional[float] = None) -> "BloomFilter":
        return cls.from_config(FilterConfig(
            capacity=capacity, false_positive_target=false_positive_target,
        ))

    # Like "create", but "bit_count" and "hash_count" may be given
    # explicitly instead of being derived.
    #
    # Raises
    #   InvalidBitCountError, InvalidHashCountError: For non-positive overrides.
    #
    @classmethod
    def custom(
        cls,
        capacity: int,
        false_positive_target: Optional[float] = None,
        bit_count: Optional[int] = None,
        hash_count: Optional[int] = None,
    ) -> "BloomFilter":
        return cls.from_config(FilterConfig(
            capacity=capacity,
            false_positive_target=false_positive_target,
            bit_count=bit_count,
            hash_count=hash_count,
        ))

    @classmethod
    def from_config(cls, config: FilterConfig) -> "BloomFilter":
        capacity = config.capacity
        if (not _is_int(capacity)):
            raise InvalidCapacityError(f"The bloom filter's capacity must be an integer, got {capacity!r}.")
        capacity = int(capacity)
        if (capacity <= 0):
            raise ZeroCapacityError(f"The bloom filter's capacity must be positive, got {capacity}.")
        target = config.resolved_false_positive_target()
        if (not _is_real(target)) or (not (0 < float(target) < 1)):
            raise InvalidFalsePositiveRateError(
                f"The bloom filter's false positive target must be in (0, 1), got {target!r}."
            )
        target = float(target)
        bit_count = config.bit_count
        if (bit_count is None):
            bit_count = best_bit_count(capacity, target)
        elif (not _is_int(bit_count)) or (bit_count <= 0):
            raise InvalidBitCountError(f"The bloom filter's bit count must be a positive integer, got {bit_count!r}.")
        else:
            bit_count = int(bit_count)
        hash_count = config.hash_count
        if (hash_count is None):
            hash_count = best_hash_count(target)
        elif (not _is_int(hash_count)) or (hash_count <= 0):
            raise InvalidHashCountError(f"The bloom filter's hash count must be a positive integer, got {hash_count!r}.")
        else:
            hash_count = int(hash_count)
        return cls(
            false_positive_target=target,
            bit_count=bit_count,
            capacity=capacity,
            hash_count=hash_count,
            bits=BitSet(bit_count),
            items_inserted=0,
        )

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def _indices(self, item: Union[str, bytes]):
        return derive_indices(encode_item(item), self.hash_count, self.bit_count)

    # Insert an item into the filter.
    #
    # Returns
    #   (bool): True if the item was admitted, False (and nothing changed)
    #     when the filter already holds "capacity" items.
    #
    def insert(self, item: str) -> bool:
        if (self.items_inserted >= self.capacity):
            logging.debug(f"BloomFilter refused insert, full at capacity {self.capacity}.")
            return False
        for idx in self._indices(item):
            self.bits.set(idx)
        self.items_inserted += 1
        return True

    # Check if an item may be present in the filter.
    #
    # Returns
    #   (bool): True if the item may be present, False if it is definitely not.
    #
    def might_contain(self, item: str) -> bool:
        for idx in self._indices(item):
            if (not self.bits.get(idx)):
                return False
        return True

    def __contains__(self, item: str) -> bool:
        return self.might_contain(item)

    # Insert items in order until the filter is full.
    #
    # Returns
    #   (int): The number of items admitted.
    #
    def update(self, items: Iterable[str]) -> int:
        admitted = 0
        for item in items:
            if (not self.insert(item)):
                break
            admitted += 1
        return admitted

    @property
    def is_full(self) -> bool:
        return self.items_inserted >= self.capacity

    @property
    def remaining_capacity(self) -> int:
        return self.capacity - self.items_inserted

    # Fraction of bits that are set.
    def fill_ratio(self) -> float:
        return self.bits.count() / float(self.bit_count)

    # Theoretical false positive rate given the current number of inserts.
    def current_false_positive_rate(self) -> float:
        return expected_false_positive_rate(self.bit_count, self.hash_count, self.items_inserted)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    # Serialize the full state to a JSON document. The bits are stored as the
    # base64 encoding of the packed (little-endian) bytes.
    def to_json(self) -> str:
        return json.dumps({
            "format": JSON_FORMAT_NAME,
            "version": JSON_FORMAT_VERSION,
            "false_positive_target": self.false_positive_target,
            "bit_count": self.bit_count,
            "capacity": self.capacity,
            "hash_count": self.hash_count,
            "items_inserted": self.items_inserted,
            "bits": base64.b64encode(self.bits.to_bytes()).decode("ascii"),
        }, sort_keys=True)

    # Reconstruct a filter from "to_json" output. The "bits" field may also
    # be an ordered list of booleans of length "bit_count".
    #
    # Raises
    #   FormatError: For invalid JSON, missing or mistyped fields, or state
    #     that violates the filter invariants.
    #
    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "BloomFilter":
        try:
            doc = json.loads(text)
        except (ValueError, UnicodeDecodeError) as exc:
            raise FormatError(f"filter document is not valid JSON: {exc}") from exc
        if (not isinstance(doc, dict)):
            raise FormatError(f"filter document must be a JSON object, got {type(doc).__name__}")
        if ("format" in doc) and (doc["format"] != JSON_FORMAT_NAME):
            raise FormatError(f"unknown filter format {doc['format']!r}")
        if ("version" in doc) and (doc["version"] != JSON_FORMAT_VERSION):
            raise FormatError(f"unsupported filter format version {doc['version']!r}")
        missing = [name for name in ("false_positive_target", "bit_count", "capacity",
                                     "hash_count", "items_inserted", "bits") if name not in doc]
        if missing:
            raise FormatError(f"filter document is missing fields {missing}")
        target = doc["false_positive_target"]
        if (not _is_real(target)):
            raise FormatError(f"'false_positive_target' must be a number, got {target!r}")
        for name in ("bit_count", "capacity", "hash_count", "items_inserted"):
            if (not _is_int(doc[name])):
                raise FormatError(f"'{name}' must be an integer, got {doc[name]!r}")
        bit_count = doc["bit_count"]
        if (bit_count <= 0):
            raise FormatError(f"'bit_count' must be positive, got {bit_count}")
        raw_bits = doc["bits"]
        if isinstance(raw_bits, str):
            try:
                packed = base64.b64decode(raw_bits.encode("ascii"), validate=True)
                bits = BitSet.from_bytes(packed, bit_count)
            except (binascii.Error, UnicodeEncodeError, ValueError) as exc:
                raise FormatError(f"'bits' does not hold {bit_count} packed bits: {exc}") from exc
        elif isinstance(raw_bits, list):
            if (len(raw_bits) != bit_count):
                raise FormatError(f"'bits' has {len(raw_bits)} entries, expected {bit_count}")
            if (not all(isinstance(flag, bool) for flag in raw_bits)):
                raise FormatError("'bits' entries must all be booleans")
            bits = BitSet.from_list(raw_bits)
        else:
            raise FormatError(f"'bits' must be a string or a list, got {type(raw_bits).__name__}")
        return cls._restore(
            false_positive_target=float(target),
            bit_count=bit_count,
            capacity=doc["capacity"],
            hash_count=doc["hash_count"],
            bits=bits,
            items_inserted=doc["items_inserted"],
        )

    # Serialize the full state to a compact binary blob: a fixed header
    # (see BINARY_HEADER) followed by the packed bits.
    def to_bytes(self) -> bytes:
        header = struct.pack(
            BINARY_HEADER, BINARY_MAGIC, BINARY_FORMAT_VERSION,
            self.false_positive_target, self.bit_count, self.capacity,
            self.hash_count, self.items_inserted,
        )
        return header + self.bits.to_bytes()

    # Reconstruct a filter from "to_bytes" output.
    #
    # Raises
    #   FormatError: If the data is truncated, has the wrong magic or version,
    #     or describes an invalid filter.
    #
    @classmethod
    def from_bytes(cls, data: bytes) -> "BloomFilter":
        header_size = struct.calcsize(BINARY_HEADER)
        if (len(data) < header_size):
            raise FormatError(f"data too short for a filter header ({len(data)} < {header_size} bytes)")
        magic, version, target, bit_count, capacity, hash_count, items = struct.unpack(
            BINARY_HEADER, data[:header_size]
        )
        if (magic != BINARY_MAGIC):
            raise FormatError(f"bad magic {magic!r}, expected {BINARY_MAGIC!r}")
        if (version != BINARY_FORMAT_VERSION):
            raise FormatError(f"unsupported binary format version {version}")
        if (bit_count <= 0):
            raise FormatError(f"'bit_count' must be positive, got {bit_count}")
        try:
            bits = BitSet.from_bytes(data[header_size:], bit_count)
        except ValueError as exc:
            raise FormatError(f"bit payload does not match bit_count {bit_count}: {exc}") from exc
        return cls._restore(
            false_positive_target=target,
            bit_count=bit_count,
            capacity=capacity,
            hash_count=hash_count,
            bits=bits,
            items_inserted=items,
        )

    # Text form of the filter state (JSON).
    def serialize(self) -> str:
        return self.to_json()

    # Reconstruct a filter from either serialized form. Binary blobs are
    # recognized by their magic prefix, everything else is parsed as JSON.
    @classmethod
    def deserialize(cls, data: Union[str, bytes, bytearray]) -> "BloomFilter":
        if isinstance(data, (bytes, bytearray)):
            if bytes(data[:len(BINARY_MAGIC)]) == BINARY_MAGIC:
                return cls.from_bytes(bytes(data))
            return cls.from_json(bytes(data))
        if isinstance(data, str):
            return cls.from_json(data)
        raise FormatError(f"cannot deserialize a filter from {type(data).__name__}")

    # Validate deserialized fields against the filter invariants.
    @classmethod
    def _restore(cls, false_positive_target: float, bit_count: int, capacity: int,
                 hash_count: int, bits: BitSet, items_inserted: int) -> "BloomFilter":
        if math.isnan(false_positive_target) or not (0 < false_positive_target < 1):
            raise FormatError(f"'false_positive_target' must be in (0, 1), got {false_positive_target}")
        if (capacity <= 0):
            raise FormatError(f"'capacity' must be positive, got {capacity}")
        if (hash_count <= 0):
            raise FormatError(f"'hash_count' must be positive, got {hash_count}")
        if not (0 <= items_inserted <= capacity):
            raise FormatError(f"'items_inserted' must be in [0, {capacity}], got {items_inserted}")
        if (len(bits) != bit_count):
            raise FormatError(f"bit store holds {len(bits)} bits, expected {bit_count}")
        return cls(
            false_positive_target=false_positive_target,
            bit_count=bit_count,
            capacity=capacity,
            hash_count=hash_count,
            bits=bits,
            items_inserted=items_inserted,
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    # Write this filter to "path" (JSON, or the binary form when "binary").
    # See "bfilters.storage.save_to_path".
    def save(self, path: str, binary: bool = False) -> None:
        from .storage import save_to_path
        save_to_path(self, path, binary=binary)

    # Read a filter from "path". See "bfilters.storage.load_from_path".
    @classmethod
    def load(cls, path: str) -> "BloomFilter":
        from .storage import load_from_path
        return load_from_path(path)
