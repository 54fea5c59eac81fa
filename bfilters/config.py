"""Shared constants and the optional construction parameters of a filter."""

from dataclasses import dataclass
from typing import Optional

# ---------------------------------------------------------------------------
# Configuration constants
DEFAULT_FALSE_POSITIVE_TARGET = 0.4

# ---------------------------------------------------------------------------
# Serialized layout (shared by filter & storage)
JSON_FORMAT_NAME = "bfilters.bloom"
JSON_FORMAT_VERSION = 1
BINARY_MAGIC = b"BFLT"
BINARY_FORMAT_VERSION = 1
# magic, version, false_positive_target, bit_count, capacity, hash_count, items_inserted
BINARY_HEADER = "<4sBdQQQQ"


# ---------------------------------------------------------------------------
# Data structures
@dataclass
class FilterConfig:
    """Parameters for ``BloomFilter.from_config``.

    * ``capacity`` - maximum number of inserts the filter admits.
    * ``false_positive_target`` - ``None`` uses ``DEFAULT_FALSE_POSITIVE_TARGET``.
    * ``bit_count`` - ``None`` derives it from capacity and target.
    * ``hash_count`` - ``None`` derives it from the target.
    """

    capacity: int
    false_positive_target: Optional[float] = None
    bit_count: Optional[int] = None
    hash_count: Optional[int] = None

    def resolved_false_positive_target(self) -> float:
        if (self.false_positive_target is None):
            return DEFAULT_FALSE_POSITIVE_TARGET
        return self.false_positive_target
