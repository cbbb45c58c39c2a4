"""
ELLM Prime Source
Prime generation, primality testing and factorization

This module implements:
- Sieve of Eratosthenes up to a configurable bound
- Memoized deterministic primality test
- On-demand extension of the prime sequence beyond the sieve
- Trial-division factorization against the known primes

All primes handed out are Python ints so that products of primes never
overflow.
"""

import logging
import threading
from typing import Dict, List

import numpy as np
from numba import jit


logger = logging.getLogger(__name__)

DEFAULT_SIEVE_LIMIT = 1000


class PrimeError(Exception):
    """Raised when prime operations receive invalid input."""
    pass


class PrimeSource:
    """
    Generates and caches prime numbers.

    The sieve is computed once at construction; later requests that fall
    outside it extend the cached sequence one prime at a time.
    """

    def __init__(self, max_size: int = DEFAULT_SIEVE_LIMIT):
        """
        Initialize the prime source.

        Args:
            max_size: Upper bound (inclusive) of the initial sieve
        """
        self.max_size = max_size
        self.primes: List[int] = self._generate_primes(max_size)
        self.prime_cache: Dict[int, bool] = {}

        self.stats = {
            'primality_tests': 0,
            'cache_hits': 0,
            'extensions': 0,
            'factorizations': 0
        }

        # Thread safety
        self.lock = threading.RLock()

        logger.debug(f"Sieved {len(self.primes)} primes up to {max_size}")

    def _generate_primes(self, limit: int) -> List[int]:
        """Sieve of Eratosthenes up to and including limit."""
        if limit < 2:
            return []

        sieve = np.ones(limit + 1, dtype=np.bool_)
        sieve[0] = False
        sieve[1] = False
        _mark_composites(sieve)

        return [int(p) for p in np.flatnonzero(sieve)]

    def is_prime(self, n: int) -> bool:
        """Deterministic primality test with memoization."""
        with self.lock:
            if n in self.prime_cache:
                self.stats['cache_hits'] += 1
                return self.prime_cache[n]

            self.stats['primality_tests'] += 1
            result = _trial_division(n)
            self.prime_cache[n] = result
            return result

    def nth_prime(self, k: int) -> int:
        """
        Return the k-th prime (0-indexed).

        Args:
            k: Index into the prime sequence

        Returns:
            The k-th prime
        """
        if k < 0:
            raise PrimeError(f"Prime index must be non-negative, got {k}")

        with self.lock:
            while k >= len(self.primes):
                self._extend()
            return self.primes[k]

    def _extend(self) -> int:
        """Append the next prime above the largest known one."""
        candidate = self.primes[-1] + 1 if self.primes else 2
        while not self.is_prime(candidate):
            candidate += 1

        self.primes.append(candidate)
        self.stats['extensions'] += 1
        return candidate

    def factorize(self, n: int) -> List[int]:
        """
        Prime factors of n in ascending order, with multiplicity.

        Args:
            n: Integer to factorize

        Returns:
            Ascending list of prime factors; empty for n <= 1
        """
        factors: List[int] = []
        if n <= 1:
            return factors

        with self.lock:
            self.stats['factorizations'] += 1
            remaining = n
            index = 0

            while remaining > 1:
                p = self.nth_prime(index)
                if p * p > remaining:
                    factors.append(remaining)
                    break
                while remaining % p == 0:
                    factors.append(p)
                    remaining //= p
                index += 1

        return factors

    def get_performance_stats(self) -> Dict[str, int]:
        """Get cache statistics."""
        with self.lock:
            stats = self.stats.copy()
            stats['known_primes'] = len(self.primes)
            stats['largest_known_prime'] = self.primes[-1] if self.primes else 0
            return stats


def _trial_division(n: int) -> bool:
    """Primality by 6k±1 trial division. Works on arbitrary-size ints."""
    if n <= 1:
        return False
    if n <= 3:
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False

    i = 5
    while i * i <= n:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


# Performance optimization functions using Numba
@jit(nopython=True)
def _mark_composites(sieve: np.ndarray) -> None:
    """
    Clear every composite index of a boolean sieve in place.

    Args:
        sieve: Boolean array with indices 0 and 1 already cleared
    """
    limit = sieve.shape[0] - 1
    i = 2
    while i * i <= limit:
        if sieve[i]:
            for j in range(i * i, limit + 1, i):
                sieve[j] = False
        i += 1
