"""Hash families for the Bloom filter.

A hash family owns ``k`` independently parameterised functions, each mapping
a string to a bit index in ``[0, filter_size)``. Every function finishes with
the same affine step over a prime modulus::

    h_i(s) = (a_i * |x_i(s)| + b_i) mod filter_size

where ``a_i`` is drawn from ``[1, filter_size - 1]``, ``b_i`` from
``[0, filter_size - 1]`` and ``x_i`` is the family specific mixing hash:

- ``FNVHashFamily``: 64-bit FNV-1a seeded with a random prime offset basis.
- ``MurmurHashFamily``: 64-bit MurmurHash64A over the UTF-8 bytes, random
  32-bit seed.
- ``RotationHashFamily``: no seeded mixing. The input string is extended by
  one of its own characters per function and hashed with the base-31
  polynomial string hash.

All families casefold their input, so membership is case-insensitive
(including expanding forms such as "ß" and "SS").
"""
import math
import random
from collections import namedtuple
from struct import unpack_from

from .primes import random_prime_seed

MASK_64 = (1 << 64) - 1
MASK_32 = (1 << 32) - 1

FNV_OFFSET_BASIS = 0xcbf29ce484222325
FNV_PRIME = 0x100000001b3

MURMUR_M = 0xc6a4a7935bd1e995
MURMUR_R = 47

ROTATION_PAD = '$'


HashFunctionSpec = namedtuple('HashFunctionSpec', ['a', 'b', 'seed'])
HashFunctionSpec.__doc__ = """Coefficients of one hash function.

``seed`` is the FNV offset basis, the Murmur seed, or ``None`` for the
rotation family.
"""


def to_signed_64(value):
    """Reinterpret an unsigned 64-bit integer as two's complement."""
    value &= MASK_64
    return value - (1 << 64) if value >> 63 else value


def fnv1a_64(text, offset_basis=FNV_OFFSET_BASIS):
    """64-bit FNV-1a over the code points of ``text``.

    Each step is ``h = (h ^ ord(ch)) * FNV_PRIME`` truncated to 64 bits.

    Returns:
        int: Unsigned 64-bit hash.
    """
    h = offset_basis & MASK_64
    for ch in text:
        h = ((h ^ ord(ch)) * FNV_PRIME) & MASK_64
    return h


def murmur64a(data, seed):
    """MurmurHash64A of ``data`` (bytes) with a 32-bit ``seed``.

    Returns:
        int: Unsigned 64-bit hash.
    """
    m = MURMUR_M
    r = MURMUR_R
    length = len(data)
    h = ((seed & MASK_32) ^ (length * m)) & MASK_64

    tail_start = length - (length % 8)
    for offset in range(0, tail_start, 8):
        k, = unpack_from('<Q', data, offset)
        k = (k * m) & MASK_64
        k ^= k >> r
        k = (k * m) & MASK_64
        h ^= k
        h = (h * m) & MASK_64

    tail = data[tail_start:]
    if tail:
        for shift, byte in reversed(list(enumerate(tail))):
            h ^= byte << (8 * shift)
        h = (h * m) & MASK_64

    h ^= h >> r
    h = (h * m) & MASK_64
    h ^= h >> r
    return h


def polynomial_hash(text):
    """Base-31 polynomial string hash with signed 32-bit wraparound.

    Matches the classic ``s[0]*31^(n-1) + ... + s[n-1]`` string hash code.

    Example:
        >>> polynomial_hash("hello")
        99162322
    """
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & MASK_32
    return h - (1 << 32) if h >> 31 else h


class HashFamily:
    """Base class for the ``k`` index functions used by a Bloom filter.

    Subclasses supply ``make_seed`` (per-function seed, may be ``None``) and
    ``mixes`` (the family's raw signed hash per function). The affine step,
    casefolding and coefficient generation live here.

    Args:
        filter_size (int): Modulus and bit array length. Should be prime.
        num_hashes (int): Number of index functions (k).
        rng: Random source used once, at construction. Defaults to a fresh
            ``random.Random()``.
    """
    name = None

    def __init__(self, filter_size, num_hashes, rng=None):
        if filter_size < 2:
            raise ValueError("Filter_Size must be >= 2")
        if num_hashes < 1:
            raise ValueError("Num_Hashes must be >= 1")
        if rng is None:
            rng = random.Random()
        self.filter_size = filter_size
        self.num_hashes = num_hashes
        self.specs = tuple(self._make_spec(rng) for _ in range(num_hashes))

    @classmethod
    def optimal_num_hashes(cls, set_size, bits_per_element, filter_size):
        """Return ``k = floor(ln 2 * bits_per_element)``, at least 1."""
        return max(1, int(math.log(2) * bits_per_element))

    def _make_spec(self, rng):
        seed = self.make_seed(rng)
        a = rng.randrange(1, self.filter_size)
        b = rng.randrange(self.filter_size)
        return HashFunctionSpec(a, b, seed)

    def make_seed(self, rng):
        return None

    def mixes(self, text):
        raise NotImplementedError

    def indexes(self, key):
        """Yield the ``k`` bit indexes for ``key``, lazily, in function order."""
        filter_size = self.filter_size
        for spec, x in zip(self.specs, self.mixes(key.casefold())):
            yield (spec.a * abs(x) + spec.b) % filter_size

    def __repr__(self):
        return (f"{type(self).__name__}(filter_size={self.filter_size}, "
                f"num_hashes={self.num_hashes})")


class FNVHashFamily(HashFamily):
    """FNV-1a functions, each with its own prime offset basis."""
    name = 'fnv'

    def make_seed(self, rng):
        return random_prime_seed(rng)

    def mixes(self, text):
        for spec in self.specs:
            yield to_signed_64(fnv1a_64(text, spec.seed))


class MurmurHashFamily(HashFamily):
    """MurmurHash64A functions, each with its own random 32-bit seed."""
    name = 'murmur'

    def make_seed(self, rng):
        return rng.getrandbits(32)

    def mixes(self, text):
        data = text.encode('utf-8')
        for spec in self.specs:
            yield to_signed_64(murmur64a(data, spec.seed))


class RotationHashFamily(HashFamily):
    """Affine functions over rotated copies of the input.

    Before function ``i`` runs, the working string is padded with ``$`` up to
    ``k`` characters and its ``i``-th character is appended. The working
    string carries over from one function to the next, so function ``i``
    hashes a string ``i + 1`` characters longer than the padded input.
    """
    name = 'rotation'

    @classmethod
    def optimal_num_hashes(cls, set_size, bits_per_element, filter_size):
        """Return ``k = floor(ln 2 * filter_size / set_size)``, at least 1."""
        return max(1, int(math.log(2) * filter_size / set_size))

    def rotate(self, text, i):
        if len(text) < self.num_hashes:
            text += ROTATION_PAD * (self.num_hashes - len(text))
        return text + text[i]

    def mixes(self, text):
        for i in range(self.num_hashes):
            text = self.rotate(text, i)
            yield polynomial_hash(text)


HASH_FAMILIES = {
    cls.name: cls
    for cls in (FNVHashFamily, MurmurHashFamily, RotationHashFamily)
}


def get_hash_family(kind):
    """Look up a hash family class by name ('fnv', 'murmur', 'rotation')."""
    try:
        return HASH_FAMILIES[kind]
    except KeyError:
        raise ValueError(
            f"Unknown hash family {kind!r}; expected one of "
            f"{', '.join(sorted(HASH_FAMILIES))}") from None


def make_hash_family(kind, filter_size, num_hashes, rng=None):
    """Instantiate the named hash family."""
    return get_hash_family(kind)(filter_size, num_hashes, rng=rng)
