"""Two-tier record retrieval over a differential file and a database file.

The differential file holds recently changed records and shadows the large,
mostly static database file. ``BloomDifferential`` keeps a Bloom filter of
the differential keys so a query for a key that was never changed skips the
differential scan and goes straight to the database. ``NaiveDifferential``
always scans the differential file first and serves as the reference.

Both return the matching line verbatim, or ``NOT_FOUND``.
"""
import logging

from .pybloom import DEFAULT_BITS_PER_ELEMENT, DEFAULT_HASH_FAMILY, BloomFilter
from .records import NOT_FOUND, find_record, normalize_key, scan_records

logger = logging.getLogger(__name__)


def build_filter(diff_file, num_items, bits_per_element=DEFAULT_BITS_PER_ELEMENT,
                 family=DEFAULT_HASH_FAMILY, rng=None, strict=False):
    """Build a frozen Bloom filter over the keys of ``diff_file``.

    Performs one full pass over the file, adding each record's identity key.

    Args:
        diff_file: Path of the differential file.
        num_items (int): Expected number of records, used for sizing.
        bits_per_element (int, optional): Sizing knob. Default is 8.
        family (str, optional): Hash family name. Default is 'fnv'.
        rng (random.Random, optional): Random source for the hash functions.
        strict (bool, optional): Raise RecordFileError if the file cannot be
            read. By default the failure is logged and the filter stays empty.

    Returns:
        BloomFilter: The filter, already frozen.
    """
    bloom = BloomFilter(num_items, bits_per_element, family=family, rng=rng)
    for key, _ in scan_records(diff_file, strict=strict):
        bloom.add(key)
    bloom.freeze()
    if bloom.data_size() > num_items:
        logger.warning("%s holds %d records but the filter was sized for %d; "
                       "false positive rate will exceed the target",
                       diff_file, bloom.data_size(), num_items)
    logger.info("Built %s filter over %s: filter_size=%d num_hashes=%d data_size=%d",
                family, diff_file, bloom.filter_size(), bloom.num_hashes(),
                bloom.data_size())
    return bloom


class BloomDifferential:
    """Filter-then-scan retrieval.

    Usage:
        lookup = BloomDifferential.create("differential.txt", "database.txt",
                                          num_items=1262147)
        line = lookup.retrieve_record("Archbishop had given him")
    """

    def __init__(self, diff_file, database, bloom_filter, strict=False):
        self.diff_file = diff_file
        self.database = database
        self.filter = bloom_filter
        self.strict = strict

    @classmethod
    def create(cls, diff_file, database, num_items,
               bits_per_element=DEFAULT_BITS_PER_ELEMENT,
               family=DEFAULT_HASH_FAMILY, rng=None, strict=False):
        """Build the filter for ``diff_file`` and return a ready lookup."""
        bloom = build_filter(diff_file, num_items, bits_per_element,
                             family=family, rng=rng, strict=strict)
        return cls(diff_file, database, bloom, strict=strict)

    def retrieve_record(self, key, diff_file=None, database=None):
        """Return the newest record for ``key``.

        The differential record wins over the database record. The
        differential file is only scanned when the filter reports the key as
        possibly present.

        Args:
            key (str): Query key; whitespace is ignored, case is not significant.
            diff_file (optional): The differential file path. Only the file
                the filter was built from is accepted.
            database (optional): Override the database file path.

        Returns:
            str: The matching line, or NOT_FOUND.

        Raises:
            ValueError: If ``diff_file`` is not the file the filter covers.
        """
        if diff_file is not None and diff_file != self.diff_file:
            raise ValueError(
                f"Filter was built over {self.diff_file!r}; build a new lookup for {diff_file!r}")
        diff_file = self.diff_file
        database = self.database if database is None else database
        wanted = normalize_key(key)

        if self.filter.appears(wanted):
            line = find_record(wanted, diff_file, strict=self.strict)
            if line is not NOT_FOUND:
                logger.debug("%r found in differential file", wanted)
                return line
            logger.debug("%r is a false positive in the differential filter", wanted)

        line = find_record(wanted, database, strict=self.strict)
        if line is NOT_FOUND:
            logger.debug("%r does not exist", wanted)
        return line


class NaiveDifferential:
    """Scan the differential file, then the database. No filter."""

    def __init__(self, diff_file, database, strict=False):
        self.diff_file = diff_file
        self.database = database
        self.strict = strict

    def retrieve_record(self, key, diff_file=None, database=None):
        diff_file = self.diff_file if diff_file is None else diff_file
        database = self.database if database is None else database
        wanted = normalize_key(key)

        line = find_record(wanted, diff_file, strict=self.strict)
        if line is NOT_FOUND:
            line = find_record(wanted, database, strict=self.strict)
        return line
