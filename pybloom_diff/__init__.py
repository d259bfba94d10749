"""Bloom filtered record lookup over a differential file and a database file."""
from .differential import BloomDifferential, NaiveDifferential, build_filter
from .exceptions import (FrozenFilterError, MalformedRecordError,
                         PyBloomDiffError, RecordFileError)
from .hashing import (HASH_FAMILIES, FNVHashFamily, HashFamily,
                      MurmurHashFamily, RotationHashFamily)
from .pybloom import BloomFilter
from .records import NOT_FOUND

__all__ = [
    'BloomDifferential', 'BloomFilter', 'FNVHashFamily', 'FrozenFilterError',
    'HASH_FAMILIES', 'HashFamily', 'MalformedRecordError', 'MurmurHashFamily',
    'NOT_FOUND', 'NaiveDifferential', 'PyBloomDiffError', 'RecordFileError',
    'RotationHashFamily', 'build_filter',
]
