"""
ELLM Concept Encoder
Gödel-style encoding of concepts, facts and rules as primes

This module implements:
- Bijective concept <-> prime table (primes assigned in first-seen order)
- Fact encoding as the product of its three component primes
- Fact decoding by factorization
- Structural encoding of universal, capability and standard rules
"""

import logging
import threading
from dataclasses import dataclass
from typing import ClassVar, Dict, Optional, Tuple, Union

from .facts import (
    CapabilityRule, Fact, Rule, RuleKind, StandardRule, UniversalRule,
    normalize_concept,
)
from .primes import DEFAULT_SIEVE_LIMIT, PrimeSource


logger = logging.getLogger(__name__)

# Reserved concept for the bound variable of quantified rules
VARIABLE_CONCEPT = "_variable_"


class EncodingError(Exception):
    """Raised when a concept or rule cannot be encoded."""
    pass


@dataclass(frozen=True)
class EncodedQuantifiedRule:
    """Encoded single-variable rule ("All X are/can Y")."""
    variable_prime: int
    category_prime: int
    property_prime: int
    predicate_prime: int
    condition_encoding: int
    conclusion_encoding: int

    kind: ClassVar[RuleKind]
    verb: ClassVar[str]


class EncodedUniversalRule(EncodedQuantifiedRule):
    kind = RuleKind.UNIVERSAL
    verb = "are"


class EncodedCapabilityRule(EncodedQuantifiedRule):
    kind = RuleKind.CAPABILITY
    verb = "can"


@dataclass(frozen=True)
class EncodedStandardRule:
    """Encoded conjunctive implication."""
    condition_encodings: Tuple[int, ...]
    conclusion_encoding: int

    kind: ClassVar[RuleKind] = RuleKind.STANDARD


EncodedRule = Union[EncodedUniversalRule, EncodedCapabilityRule, EncodedStandardRule]


class ConceptEncoder:
    """
    Maps normalized concepts to primes and facts to prime products.

    The table is append-only: once a concept has a prime it keeps it for the
    lifetime of the encoder. Encodings issued by one encoder are meaningless
    to any other.
    """

    def __init__(self, prime_source: Optional[PrimeSource] = None,
                 sieve_limit: int = DEFAULT_SIEVE_LIMIT):
        """
        Initialize the encoder.

        Args:
            prime_source: Shared prime source, created if omitted
            sieve_limit: Sieve bound used when creating a prime source
        """
        self.prime_source = prime_source or PrimeSource(sieve_limit)

        self.concept_to_prime: Dict[str, int] = {}
        self.prime_to_concept: Dict[int, str] = {}
        self.next_prime_index = 0

        # Thread safety
        self.lock = threading.RLock()

        self.variable_prime = self.prime_of(VARIABLE_CONCEPT)

    def prime_of(self, concept: str) -> int:
        """Return the prime for a concept, assigning the next one if unseen."""
        normalized = normalize_concept(concept)
        if not normalized:
            raise EncodingError(f"Cannot encode empty concept: {concept!r}")

        with self.lock:
            prime = self.concept_to_prime.get(normalized)
            if prime is not None:
                return prime

            prime = self.prime_source.nth_prime(self.next_prime_index)
            self.next_prime_index += 1
            self.concept_to_prime[normalized] = prime
            self.prime_to_concept[prime] = normalized

            logger.debug(f"Assigned prime {prime} to concept '{normalized}'")
            return prime

    def concept_of(self, prime: int) -> str:
        """Reverse lookup; unknown primes render as a placeholder."""
        return self.prime_to_concept.get(prime, f"Unknown({prime})")

    def encode_fact(self, fact: Fact) -> int:
        """Encode a fact as the product of its component primes."""
        subject_prime = self.prime_of(fact.subject)
        predicate_prime = self.prime_of(fact.predicate)
        object_prime = self.prime_of(fact.object)

        return subject_prime * predicate_prime * object_prime

    def decode_fact(self, encoding: int) -> Optional[Fact]:
        """
        Decode a fact encoding.

        The three factors are assigned to subject, predicate and object in
        ascending numeric order. Unassigned primes decode to the concept_of
        placeholder, which Fact normalization lower-cases to "unknown(p)".

        Args:
            encoding: Product of three primes

        Returns:
            Decoded fact, or None if the encoding does not have exactly
            three prime factors
        """
        factors = self.prime_source.factorize(encoding)
        if len(factors) != 3:
            return None

        subject_prime, predicate_prime, object_prime = factors
        return Fact(
            self.concept_of(subject_prime),
            self.concept_of(predicate_prime),
            self.concept_of(object_prime)
        )

    def encode_rule(self, rule: Rule) -> EncodedRule:
        """Encode a rule according to its kind."""
        if isinstance(rule, UniversalRule):
            return EncodedUniversalRule(
                variable_prime=self.variable_prime,
                category_prime=self.prime_of(rule.category),
                property_prime=self.prime_of(rule.property),
                predicate_prime=self.prime_of("is"),
                condition_encoding=self.encode_fact(rule.conditions[0]),
                conclusion_encoding=self.encode_fact(rule.conclusion)
            )

        if isinstance(rule, CapabilityRule):
            return EncodedCapabilityRule(
                variable_prime=self.variable_prime,
                category_prime=self.prime_of(rule.category),
                property_prime=self.prime_of(rule.capability),
                predicate_prime=self.prime_of("can"),
                condition_encoding=self.encode_fact(rule.conditions[0]),
                conclusion_encoding=self.encode_fact(rule.conclusion)
            )

        if isinstance(rule, StandardRule):
            condition_encodings = tuple(self.encode_fact(c) for c in rule.conditions)
            return EncodedStandardRule(
                condition_encodings=condition_encodings,
                conclusion_encoding=self.encode_fact(rule.conclusion)
            )

        raise EncodingError(f"Unsupported rule type: {type(rule).__name__}")

    def __len__(self) -> int:
        return len(self.concept_to_prime)
