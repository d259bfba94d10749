"""Empirical evaluation of the filters and of filtered retrieval.

Two experiments:

1. False positive rate: insert a set of random strings, probe with a
   disjoint set and compare the observed rate with 0.6185^bits_per_element.
2. Retrieval comparison: time ``BloomDifferential`` against
   ``NaiveDifferential`` on random keys drawn from a key source file and
   check the two agree.
"""
import logging
import random
import string
import time
from collections import namedtuple

from .differential import BloomDifferential, NaiveDifferential
from .hashing import HASH_FAMILIES
from .pybloom import DEFAULT_BITS_PER_ELEMENT, DEFAULT_HASH_FAMILY, BloomFilter
from .records import KEY_TOKENS, scan_records

logger = logging.getLogger(__name__)

# (1/2)^(ln 2), the false positive base at the optimal k
FALSE_POSITIVE_BASE = 0.6185

FalsePositiveReport = namedtuple('FalsePositiveReport', [
    'family', 'bits_per_element', 'false_positives', 'probes',
    'filter_size', 'data_size', 'num_hashes', 'rate', 'theoretical_rate',
])

ComparisonReport = namedtuple('ComparisonReport', [
    'key_file', 'experiments', 'bloom_ms', 'naive_ms', 'mismatches',
])


def theoretical_false_positive_rate(bits_per_element):
    return FALSE_POSITIVE_BASE ** bits_per_element


def generate_random_strings(count, rng=None, min_length=6, max_length=12):
    """Generate ``count`` distinct random lowercase strings plus probes.

    Every eleventh new string goes to the probe list instead, so the probes
    (about ``count / 10`` of them) never overlap the members.

    Returns:
        tuple: ``(members, probes)``
    """
    if rng is None:
        rng = random.Random()
    seen = set()
    members = []
    probes = []
    streak = 0
    while len(members) < count:
        length = rng.randint(min_length, max_length)
        candidate = ''.join(rng.choice(string.ascii_lowercase) for _ in range(length))
        if candidate in seen:
            continue
        seen.add(candidate)
        if streak < 10:
            streak += 1
            members.append(candidate)
        else:
            streak = 0
            probes.append(candidate)
    return members, probes


def false_positive_experiment(members, probes, bits_per_element,
                              family=DEFAULT_HASH_FAMILY, rng=None):
    """Measure the false positive rate of one filter configuration.

    Args:
        members (list): Strings added to the filter; also its set size.
        probes (list): Strings disjoint from ``members``.
        bits_per_element (int): Sizing knob.
        family (str): Hash family name.
        rng (random.Random, optional): Random source for the hash functions.

    Returns:
        FalsePositiveReport
    """
    bloom = BloomFilter(len(members), bits_per_element, family=family, rng=rng)
    for member in members:
        bloom.add(member)
    bloom.freeze()

    false_positives = sum(1 for probe in probes if bloom.appears(probe))
    rate = false_positives / len(probes) if probes else 0.0
    report = FalsePositiveReport(
        family=family,
        bits_per_element=bits_per_element,
        false_positives=false_positives,
        probes=len(probes),
        filter_size=bloom.filter_size(),
        data_size=bloom.data_size(),
        num_hashes=bloom.num_hashes(),
        rate=rate,
        theoretical_rate=theoretical_false_positive_rate(bits_per_element),
    )
    logger.info("%s bits_per_element=%d: %d/%d false positives (rate %.5f, theory %.5f)",
                family, bits_per_element, false_positives, len(probes),
                rate, report.theoretical_rate)
    return report


def run_false_positive_experiments(set_size, bits_values=(4, 8, 10),
                                   families=None, rng=None):
    """Run ``false_positive_experiment`` for every family and bits value.

    The same random strings are shared across all configurations.
    """
    if rng is None:
        rng = random.Random()
    if families is None:
        families = list(HASH_FAMILIES)
    members, probes = generate_random_strings(set_size, rng)
    reports = []
    for bits_per_element in bits_values:
        for family in families:
            reports.append(false_positive_experiment(
                members, probes, bits_per_element, family=family, rng=rng))
    return reports


def count_records(path):
    return sum(1 for _ in scan_records(path))


def random_key(key_file, num_records, rng):
    """Return the key tokens of a random record of ``key_file``, space joined."""
    target = rng.randrange(num_records)
    for i, (_, line) in enumerate(scan_records(key_file)):
        if i == target:
            return ' '.join(line.split()[:KEY_TOKENS])
    raise ValueError(f"{key_file} has fewer than {target + 1} records")


def _timed(lookup, key):
    start = time.perf_counter()
    result = lookup.retrieve_record(key)
    return result, (time.perf_counter() - start) * 1000.0


def empirical_comparison(diff_file, database, key_files, num_items,
                         bits_per_element=DEFAULT_BITS_PER_ELEMENT,
                         num_experiments=10, family=DEFAULT_HASH_FAMILY,
                         rng=None):
    """Compare filtered and naive retrieval latency.

    The filter is built once. For each key source file, ``num_experiments``
    random keys are looked up with both methods.

    Args:
        diff_file: Differential file path.
        database: Database file path.
        key_files (list): Files to draw query keys from, e.g. the database,
            the differential file and a database-only subset.
        num_items (int): Expected number of differential records.
        bits_per_element (int, optional): Sizing knob. Default is 8.
        num_experiments (int, optional): Lookups per key file. Default is 10.
        family (str, optional): Hash family name.
        rng (random.Random, optional): Random source for keys and hashing.

    Returns:
        list: One ComparisonReport per key file. Times are average
            milliseconds per lookup.
    """
    if num_experiments < 1:
        raise ValueError("Num_Experiments must be > 0")
    if rng is None:
        rng = random.Random()
    bloom = BloomDifferential.create(diff_file, database, num_items,
                                     bits_per_element, family=family, rng=rng)
    naive = NaiveDifferential(diff_file, database)

    reports = []
    for key_file in key_files:
        num_records = count_records(key_file)
        if not num_records:
            raise ValueError(f"{key_file} holds no records to draw keys from")
        bloom_total = naive_total = 0.0
        mismatches = []
        for _ in range(num_experiments):
            key = random_key(key_file, num_records, rng)
            bloom_result, bloom_ms = _timed(bloom, key)
            naive_result, naive_ms = _timed(naive, key)
            bloom_total += bloom_ms
            naive_total += naive_ms
            if bloom_result != naive_result:
                logger.error("Lookups disagree on %r: %r != %r", key, bloom_result, naive_result)
                mismatches.append(key)
        report = ComparisonReport(
            key_file=key_file,
            experiments=num_experiments,
            bloom_ms=bloom_total / num_experiments,
            naive_ms=naive_total / num_experiments,
            mismatches=mismatches,
        )
        logger.info("%s: bloom %.3f ms, naive %.3f ms per lookup",
                    key_file, report.bloom_ms, report.naive_ms)
        reports.append(report)
    return reports
