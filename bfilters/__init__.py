# Get the version number from the about file.
import os

DIRECTORY = os.path.dirname(os.path.abspath(__file__))
ABOUT_DIR = os.path.join(DIRECTORY, "about")
VERSION_FILE = os.path.join(ABOUT_DIR, "version.txt")
if (os.path.exists(VERSION_FILE)):
    with open(VERSION_FILE) as f:
        __version__ = f.read().strip()
else:
    __version__ = "unknown"


from bfilters.bitset import BitSet
from bfilters.config import DEFAULT_FALSE_POSITIVE_TARGET, FilterConfig
from bfilters.errors import (
    BloomFilterError,
    ConfigurationError, ConfigurationErrorKind,
    ZeroCapacityError, InvalidCapacityError, InvalidFalsePositiveRateError,
    InvalidBitCountError, InvalidHashCountError,
    FormatError,
    PersistError, PersistErrorKind,
)
from bfilters.filter import BloomFilter
from bfilters.hashing import derive_index, derive_indices
from bfilters.sizing import best_bit_count, best_hash_count, expected_false_positive_rate
from bfilters.storage import save_to_path, load_from_path
