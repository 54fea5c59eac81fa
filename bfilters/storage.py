import logging
import os
import shutil
import struct
import tempfile

from .config import BINARY_MAGIC
from .errors import FormatError, PersistError, PersistErrorKind
from .filter import BloomFilter


TEMPORARY_SUFFIX: str = ".tmp"
DEFAULT_FILE_MODE: int = 0o666


# Give a freshly written temporary file the permissions "target" has (or
#  would get from the current umask when it does not exist yet).
def _match_mode(temporary_path: str, target: str) -> None:
    if os.path.exists(target):
        shutil.copymode(target, temporary_path)
    else:
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(temporary_path, DEFAULT_FILE_MODE & ~umask)


# Save a filter to a file, creating or overwriting it.
#
# The filter is serialized before the file system is touched, then written
# to a temporary file next to "path" that atomically replaces the target.
# Symlinks are followed, the file they point at is replaced and keeps its
# permissions. A failed save leaves any existing file at "path" unchanged
# and never leaves the temporary file behind.
#
# Arguments:
#   bloom (BloomFilter): The filter to save.
#   path (str): Destination file.
#   binary (bool): Write the compact binary form instead of JSON.
#
# Raises:
#   PersistError: kind FORMAT if serialization fails, kind IO for any
#     OSError while writing.
#
def save_to_path(bloom: BloomFilter, path: str, binary: bool = False) -> None:
    path = os.fspath(path)
    try:
        data = bloom.to_bytes() if binary else bloom.to_json().encode("utf-8")
    except (ValueError, TypeError, OverflowError, struct.error) as exc:
        raise PersistError(PersistErrorKind.FORMAT, path, f"Failed to serialize filter for {path!r}: {exc}") from exc
    target = os.path.realpath(path)
    directory = os.path.dirname(target)
    temporary_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb", dir=directory, prefix=os.path.basename(target) + ".",
            suffix=TEMPORARY_SUFFIX, delete=False,
        ) as f:
            temporary_path = f.name
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        _match_mode(temporary_path, target)
        os.replace(temporary_path, target)
        temporary_path = None
    except OSError as exc:
        logging.warning(f"Failed to save bloom filter to {repr(path)}: {exc}")
        raise PersistError(PersistErrorKind.IO, path, f"Failed to write {path!r}: {exc}") from exc
    finally:
        if (temporary_path is not None) and os.path.exists(temporary_path):
            os.remove(temporary_path)
    logging.info(f"Saved bloom filter ({bloom.bit_count} bits, {bloom.items_inserted}/{bloom.capacity} items) to {repr(path)}..")


# Load a filter previously written by "save_to_path".
#
# The whole file is read before parsing, a filter is only returned when the
# contents parse completely (binary form is detected by its magic prefix).
#
# Arguments:
#   path (str): Source file.
#
# Returns:
#   BloomFilter: A new, independent filter.
#
# Raises:
#   PersistError: kind IO if the file cannot be read, kind FORMAT if its
#     contents are not a valid filter.
#
def load_from_path(path: str) -> BloomFilter:
    path = os.fspath(path)
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        logging.warning(f"Failed to read bloom filter from {repr(path)}: {exc}")
        raise PersistError(PersistErrorKind.IO, path, f"Failed to read {path!r}: {exc}") from exc
    try:
        if data.startswith(BINARY_MAGIC):
            bloom = BloomFilter.from_bytes(data)
        else:
            bloom = BloomFilter.from_json(data)
    except FormatError as exc:
        logging.warning(f"Corrupt bloom filter file {repr(path)}: {exc}")
        raise PersistError(PersistErrorKind.FORMAT, path, f"Corrupt filter in {path!r}: {exc}") from exc
    logging.info(f"Loaded bloom filter ({bloom.bit_count} bits, {bloom.items_inserted}/{bloom.capacity} items) from {repr(path)}..")
    return bloom
