"""Line-oriented record files.

Each line holds one record: four whitespace separated key tokens followed by
zero or more ``year n m`` integer triples, e.g.::

    Archbishop had given him 1720 8 6 1727 10 4

The identity key of a record is its four key tokens concatenated without a
separator ("Archbishophadgivenhim"). Lookups compare keys case-insensitively.
"""
import logging
from collections import namedtuple

from .exceptions import MalformedRecordError, RecordFileError

logger = logging.getLogger(__name__)

KEY_TOKENS = 4
ENCODING = 'utf-8'


class _NotFound:
    """Sentinel returned when neither tier holds a key."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return 'NOT_FOUND'


NOT_FOUND = _NotFound()


Record = namedtuple('Record', ['tokens', 'triples'])
Record.__doc__ = "A parsed record: four key tokens and a list of (year, n, m) triples."


def normalize_key(key):
    """Strip all whitespace from a query key."""
    return ''.join(key.split())


def match_key(key):
    """Comparison form of a normalized key."""
    return key.casefold()


def record_key(line):
    """Return the identity key of a record line.

    Raises:
        MalformedRecordError: If the line has fewer than four tokens.
    """
    tokens = line.split(None, KEY_TOKENS)
    if len(tokens) < KEY_TOKENS:
        raise MalformedRecordError(line, f"expected {KEY_TOKENS} key tokens, got {len(tokens)}")
    return ''.join(tokens[:KEY_TOKENS])


def parse_record(line):
    """Parse a record line into its key tokens and count triples.

    Example:
        >>> parse_record("Archbishop had given him 1720 8 6")
        Record(tokens=('Archbishop', 'had', 'given', 'him'), triples=[(1720, 8, 6)])
    """
    tokens = line.split()
    if len(tokens) < KEY_TOKENS:
        raise MalformedRecordError(line, f"expected {KEY_TOKENS} key tokens, got {len(tokens)}")
    payload = tokens[KEY_TOKENS:]
    if len(payload) % 3:
        raise MalformedRecordError(line, "trailing counts are not whole (year, n, m) triples")
    try:
        values = [int(token) for token in payload]
    except ValueError:
        raise MalformedRecordError(line, "non-integer count") from None
    triples = [tuple(values[i:i + 3]) for i in range(0, len(values), 3)]
    return Record(tuple(tokens[:KEY_TOKENS]), triples)


def scan_records(path, strict=False):
    """Stream ``(key, line)`` pairs from a record file.

    Lines are yielded without their line terminator. Blank lines are ignored;
    malformed lines are logged and skipped.

    Args:
        path: Path of the record file.
        strict (bool): Raise RecordFileError on I/O failure instead of
            logging it and stopping the scan.

    Yields:
        tuple: ``(identity_key, line)``
    """
    try:
        with open(path, encoding=ENCODING) as f:
            for lineno, raw in enumerate(f, 1):
                line = raw.rstrip('\r\n')
                if not line.strip():
                    continue
                try:
                    key = record_key(line)
                except MalformedRecordError as e:
                    logger.warning("Skipping %s:%d: %s", path, lineno, e.reason)
                    continue
                yield key, line
    except (OSError, UnicodeDecodeError) as e:
        if strict:
            raise RecordFileError(path, e) from e
        logger.error("Exception reading record file %s: %s", path, e)


def find_record(key, path, strict=False):
    """Return the first line of ``path`` whose key matches, else NOT_FOUND.

    ``key`` must already be whitespace-normalized.
    """
    wanted = match_key(key)
    for record, line in scan_records(path, strict=strict):
        if match_key(record) == wanted:
            return line
    return NOT_FOUND
