"""Exceptions raised by the bfilters package."""

from enum import Enum
from typing import Optional


class BloomFilterError(Exception): pass


class ConfigurationErrorKind(Enum):
    ZERO_CAPACITY = "zero_capacity"
    INVALID_CAPACITY = "invalid_capacity"
    INVALID_FALSE_POSITIVE_RATE = "invalid_false_positive_rate"
    INVALID_BIT_COUNT = "invalid_bit_count"
    INVALID_HASH_COUNT = "invalid_hash_count"


# Raised at construction time for parameters that cannot describe a filter.
# The "kind" attribute discriminates the cause, each kind also has its own
# subclass so callers can catch exactly what they expect.
class ConfigurationError(BloomFilterError, ValueError):
    kind: ConfigurationErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ZeroCapacityError(ConfigurationError):
    kind = ConfigurationErrorKind.ZERO_CAPACITY

class InvalidCapacityError(ConfigurationError):
    kind = ConfigurationErrorKind.INVALID_CAPACITY

class InvalidFalsePositiveRateError(ConfigurationError):
    kind = ConfigurationErrorKind.INVALID_FALSE_POSITIVE_RATE

class InvalidBitCountError(ConfigurationError):
    kind = ConfigurationErrorKind.INVALID_BIT_COUNT

class InvalidHashCountError(ConfigurationError):
    kind = ConfigurationErrorKind.INVALID_HASH_COUNT


# Raised when serialized filter state is malformed or violates an invariant.
class FormatError(BloomFilterError, ValueError): pass


class PersistErrorKind(Enum):
    IO = "io"
    FORMAT = "format"


# Raised by path based save / load. The underlying OSError or FormatError is
# chained as "__cause__" and summarized by "kind".
#
# Attributes
#   kind (PersistErrorKind): IO for file system failures, FORMAT for corrupt
#     or unserializable data.
#   path (str): The file that was being written or read.
#
class PersistError(BloomFilterError):
    def __init__(self, kind: PersistErrorKind, path: str, message: Optional[str] = None) -> None:
        self.kind = kind
        self.path = path
        super().__init__(message or f"{kind.value} error for {path!r}")

    @property
    def is_io(self) -> bool:
        return self.kind is PersistErrorKind.IO

    @property
    def is_format(self) -> bool:
        return self.kind is PersistErrorKind.FORMAT
