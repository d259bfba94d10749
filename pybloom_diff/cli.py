"""Command line interface: ``pybloom-diff``."""
import argparse
import logging
import random
import sys

from .differential import BloomDifferential, NaiveDifferential
from .exceptions import PyBloomDiffError
from .experiments import empirical_comparison, run_false_positive_experiments
from .hashing import HASH_FAMILIES
from .pybloom import DEFAULT_BITS_PER_ELEMENT, DEFAULT_HASH_FAMILY
from .records import NOT_FOUND

logger = logging.getLogger(__name__)


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='pybloom-diff',
        description="Bloom filtered lookups over a differential file and a database file")
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    parser.add_argument('--seed', type=int,
                        help="Seed the random source for reproducible filters")
    sub = parser.add_subparsers(dest='command', required=True)

    lookup = sub.add_parser('lookup', help="Retrieve the newest record for a key")
    lookup.add_argument('key', help="Four key words, e.g. 'Archbishop had given him'")
    lookup.add_argument('--diff', required=True, help="Differential file")
    lookup.add_argument('--database', required=True, help="Database file")
    lookup.add_argument('--items', type=int, required=True,
                        help="Expected number of differential records")
    lookup.add_argument('--bits', type=int, default=DEFAULT_BITS_PER_ELEMENT,
                        help="Bits per element (default: %(default)s)")
    lookup.add_argument('--family', choices=sorted(HASH_FAMILIES), default=DEFAULT_HASH_FAMILY)
    lookup.add_argument('--naive', action='store_true', help="Skip the filter")
    lookup.add_argument('--strict', action='store_true',
                        help="Fail on unreadable files instead of reporting not found")

    fp = sub.add_parser('false-positives', help="Measure false positive rates")
    fp.add_argument('--set-size', type=int, default=100000,
                    help="Strings inserted per filter (default: %(default)s)")
    fp.add_argument('--bits', type=int, nargs='+', default=[4, 8, 10])
    fp.add_argument('--family', choices=sorted(HASH_FAMILIES), nargs='+',
                    default=sorted(HASH_FAMILIES))

    compare = sub.add_parser('compare', help="Time filtered against naive retrieval")
    compare.add_argument('--diff', required=True, help="Differential file")
    compare.add_argument('--database', required=True, help="Database file")
    compare.add_argument('--keys', action='append', required=True,
                         help="File to draw query keys from; may be repeated")
    compare.add_argument('--items', type=int, required=True,
                         help="Expected number of differential records")
    compare.add_argument('--bits', type=int, default=DEFAULT_BITS_PER_ELEMENT)
    compare.add_argument('--family', choices=sorted(HASH_FAMILIES), default=DEFAULT_HASH_FAMILY)
    compare.add_argument('--experiments', type=int, default=10,
                         help="Lookups per key file (default: %(default)s)")
    return parser.parse_args(argv)


def _lookup(args, rng):
    if args.naive:
        lookup = NaiveDifferential(args.diff, args.database, strict=args.strict)
    else:
        lookup = BloomDifferential.create(args.diff, args.database, args.items,
                                          args.bits, family=args.family, rng=rng,
                                          strict=args.strict)
    line = lookup.retrieve_record(args.key)
    if line is NOT_FOUND:
        print(f"{args.key} does not exist!")
        return 1
    print(line)
    return 0


def _false_positives(args, rng):
    reports = run_false_positive_experiments(
        args.set_size, bits_values=args.bits, families=args.family, rng=rng)
    for r in reports:
        print(f"{r.family:<9} bits={r.bits_per_element:<3} k={r.num_hashes:<3} "
              f"filter_size={r.filter_size:<10} data_size={r.data_size:<8} "
              f"false_positives={r.false_positives}/{r.probes} "
              f"rate={r.rate:.5f} theoretical={r.theoretical_rate:.5f}")
    return 0


def _compare(args, rng):
    reports = empirical_comparison(
        args.diff, args.database, args.keys, args.items,
        bits_per_element=args.bits, num_experiments=args.experiments,
        family=args.family, rng=rng)
    status = 0
    for r in reports:
        print(f"{r.key_file}: bloom {r.bloom_ms:.3f} ms, naive {r.naive_ms:.3f} ms "
              f"over {r.experiments} lookups")
        if r.mismatches:
            print(f"  {len(r.mismatches)} lookups disagreed")
            status = 1
    return status


COMMANDS = {
    'lookup': _lookup,
    'false-positives': _false_positives,
    'compare': _compare,
}


def main(argv=None):
    args = _parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    rng = random.Random(args.seed)
    try:
        return COMMANDS[args.command](args, rng)
    except (PyBloomDiffError, ValueError) as e:
        logger.error("%s", e)
        return 2


if __name__ == '__main__':
    sys.exit(main())
