"""Prime search used for filter sizing and hash seeding.

The same trial-division search serves two callers with different intents:

1. ``least_prime_at_least`` sizes the bit array. A prime modulus keeps the
   affine step ``(a * x + b) % p`` a permutation of ``[0, p)`` for every
   non-zero ``a``.
2. ``random_prime_seed`` turns a random 32-bit draw into a prime-shaped
   offset basis for the FNV hash family.
"""
import math

MAX_SEED = 1 << 31


def is_prime(n):
    """Return True if ``n`` is prime.

    Uses trial division by 2, 3 and then numbers of the form 6k +/- 1 up to
    ``sqrt(n)``.
    """
    if n <= 1:
        return False
    if n <= 3:
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False
    limit = math.isqrt(n)
    i = 5
    while i <= limit:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def least_prime_at_least(n):
    """Return the smallest prime ``p >= n``.

    Inputs below 2 are clamped to 2, so the result is always a usable
    modulus. Fractional inputs are rounded up first.

    Example:
        >>> least_prime_at_least(80)
        83
        >>> least_prime_at_least(0)
        2
    """
    candidate = max(2, math.ceil(n))
    while not is_prime(candidate):
        candidate += 1
    return candidate


def random_prime_seed(rng):
    """Draw a non-zero signed 32-bit integer and round |x| up to a prime.

    Args:
        rng: A ``random.Random`` compatible source.

    Returns:
        int: The smallest prime no smaller than the absolute value drawn.
    """
    draw = 0
    while draw == 0:
        draw = rng.randint(-MAX_SEED, MAX_SEED - 1)
    return least_prime_at_least(abs(draw))
