"""Bloom filter with pluggable hash families.

This module implements the probabilistic pre-filter used by the differential
lookup: a fixed-size bit array plus one of three interchangeable hash
families (see ``pybloom_diff.hashing``).

Sizing:
    - Filter size: the least prime p >= set_size * bits_per_element
    - Hash functions: k = floor(ln(2) * bits_per_element) for the FNV and
      Murmur families, k = floor(ln(2) * p / set_size) for the rotation
      family (both clamped to at least 1)
    - False positive probability: P ~ (1 - e^(-kn/p))^k, roughly
      0.6185^bits_per_element at the optimum

The bit array is only ever set, never cleared, so a key that was added is
always reported as present: there are no false negatives. There is no
removal; refreshing the contents means building a new filter.

Requirements:
    - bitarray: Efficient bit array storage
"""
import math
import threading

from .exceptions import FrozenFilterError
from .hashing import get_hash_family
from .primes import least_prime_at_least

try:
    import bitarray
except ImportError:
    raise ImportError('pybloom_diff requires bitarray')

DEFAULT_BITS_PER_ELEMENT = 8
DEFAULT_HASH_FAMILY = 'fnv'


def num_hashes_for(family, set_size, bits_per_element, filter_size):
    """Return the number of hash functions the named family uses.

    The FNV and Murmur families derive k from ``bits_per_element`` alone; the
    rotation family derives it from the realised ``filter_size``. Since the
    filter size is rounded up to a prime the two can differ by one.
    """
    return get_hash_family(family).optimal_num_hashes(
        set_size, bits_per_element, filter_size)


class BloomFilter:

    def __init__(self, set_size, bits_per_element=DEFAULT_BITS_PER_ELEMENT,
                 family=DEFAULT_HASH_FAMILY, rng=None):
        """Initialize a Bloom filter for a set of about ``set_size`` keys.

        Args:
            set_size (int): Expected number of elements. Must be > 0.
            bits_per_element (int, optional): Bits of filter per expected
                element. Must be > 0. Default is 8.
            family (str, optional): Hash family name: 'fnv', 'murmur' or
                'rotation'. Default is 'fnv'.
            rng (random.Random, optional): Random source for the hash
                coefficients. Pass a seeded instance for a reproducible
                filter; by default every construction differs.

        Raises:
            ValueError: If set_size or bits_per_element is not positive.
            ValueError: If family is unknown.

        Example:
            >>> bf = BloomFilter(set_size=1000, bits_per_element=8)
            >>> bf.add("Archbishop had given him")
            False
            >>> bf.appears("ARCHBISHOP HAD GIVEN HIM")
            True
        """
        if not set_size > 0:
            raise ValueError("Set_Size must be > 0")
        if not bits_per_element > 0:
            raise ValueError("Bits_Per_Element must be > 0")
        family_cls = get_hash_family(family)

        self.set_size = set_size
        self.bits_per_element = bits_per_element
        self.family = family
        self.num_bits = least_prime_at_least(set_size * bits_per_element)
        k = family_cls.optimal_num_hashes(set_size, bits_per_element, self.num_bits)
        self.hash_family = family_cls(self.num_bits, k, rng=rng)
        self.count = 0
        self.bitarray = bitarray.bitarray(self.num_bits, endian='little')
        self.bitarray.setall(False)
        self._lock = threading.Lock()
        self._frozen = False

    def appears(self, key):
        """Test whether ``key`` may be in the filter (case-insensitive).

        Returns:
            bool: False if the key was definitely never added, True if it
                probably was.

        Time Complexity:
            O(k * len(key)); stops at the first unset bit.
        """
        bitarray = self.bitarray
        for index in self.hash_family.indexes(key):
            if not bitarray[index]:
                return False
        return True

    __contains__ = appears

    def __len__(self):
        return self.count

    def add(self, key):
        """Add ``key`` to the filter.

        Every call counts towards ``data_size()``, duplicates included.

        Args:
            key (str): The element to add. Lowercased before hashing.

        Returns:
            bool: True if every bit for the key was already set (the key, or
                a colliding one, was probably added before), False otherwise.

        Raises:
            FrozenFilterError: If ``freeze()`` has been called.
        """
        with self._lock:
            if self._frozen:
                raise FrozenFilterError("BloomFilter is frozen; build a new filter instead")
            bitarray = self.bitarray
            found_all_bits = True
            for index in self.hash_family.indexes(key):
                if found_all_bits and not bitarray[index]:
                    found_all_bits = False
                bitarray[index] = True
            self.count += 1
            return found_all_bits

    def freeze(self):
        """End the build phase. Later ``add`` calls raise FrozenFilterError.

        Queries on a frozen filter never write, so it can be shared freely
        between threads.
        """
        with self._lock:
            self._frozen = True
        return self

    @property
    def frozen(self):
        return self._frozen

    def filter_size(self):
        """Number of bits in the filter (a prime)."""
        return self.num_bits

    def data_size(self):
        """Number of ``add`` calls made on the filter."""
        return self.count

    def num_hashes(self):
        """Number of hash functions (k)."""
        return self.hash_family.num_hashes

    def fill_ratio(self):
        """Fraction of bits currently set."""
        return self.bitarray.count(True) / self.num_bits

    def estimated_false_positive_rate(self):
        """Expected false positive rate for the current ``data_size()``.

        Uses ``(1 - e^(-k * n / m)) ^ k``.
        """
        k = self.num_hashes()
        return (1.0 - math.exp(-k * self.count / self.num_bits)) ** k

    def __repr__(self):
        return (f"BloomFilter(family={self.family!r}, filter_size={self.num_bits}, "
                f"num_hashes={self.num_hashes()}, data_size={self.count})")
