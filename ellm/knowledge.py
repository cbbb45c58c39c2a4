"""
ELLM Knowledge Store
Append-only fact and rule storage over a concept encoder
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Tuple

from .encoder import (
    ConceptEncoder, EncodedQuantifiedRule, EncodedRule, EncodedStandardRule,
)
from .facts import Fact, Rule


logger = logging.getLogger(__name__)

UNPARSEABLE_RULE = "[Rule with unparseable structure]"


def describe_rule(encoder: ConceptEncoder, rule: EncodedRule) -> str:
    """Render an encoded rule back to readable text."""
    if isinstance(rule, EncodedQuantifiedRule):
        category = encoder.concept_of(rule.category_prime)
        prop = encoder.concept_of(rule.property_prime)
        return f"All {category} {rule.verb} {prop}"

    if isinstance(rule, EncodedStandardRule):
        conditions = [encoder.decode_fact(e) for e in rule.condition_encodings]
        conclusion = encoder.decode_fact(rule.conclusion_encoding)
        if conclusion is None or any(c is None for c in conditions):
            return UNPARSEABLE_RULE
        joined = " AND ".join(str(c) for c in conditions)
        return f"IF ({joined}) THEN ({conclusion})"

    return UNPARSEABLE_RULE


@dataclass(frozen=True)
class KnowledgeSnapshot:
    """Read-only view of a knowledge store at one point in time."""
    encoder: ConceptEncoder
    facts: Tuple[Fact, ...]
    fact_encodings: Tuple[int, ...]
    rules: Tuple[EncodedRule, ...]

    def contains_fact_encoding(self, encoding: int) -> bool:
        return encoding in self.fact_encodings

    def all_facts(self) -> Tuple[Fact, ...]:
        return self.facts

    def all_fact_encodings(self) -> Tuple[int, ...]:
        return self.fact_encodings

    def all_rules(self) -> Tuple[EncodedRule, ...]:
        return self.rules

    def snapshot(self) -> 'KnowledgeSnapshot':
        return self


class KnowledgeStore:
    """
    Accumulated facts and rules for one session.

    Facts are kept both in their original form (for display and transitive
    reasoning) and encoded (for membership tests). Duplicates are kept.
    """

    def __init__(self, encoder: ConceptEncoder):
        """
        Initialize an empty store.

        Args:
            encoder: Encoder shared with the rest of the session
        """
        self.encoder = encoder

        self.facts: List[Fact] = []
        self.fact_encodings: List[int] = []
        self.rules: List[EncodedRule] = []

        # Thread safety
        self.lock = threading.RLock()

    def add_fact(self, fact: Fact) -> int:
        """Encode and append a fact, returning its encoding."""
        with self.lock:
            encoding = self.encoder.encode_fact(fact)
            self.facts.append(fact)
            self.fact_encodings.append(encoding)

        logger.debug(f"Stored fact '{fact}' as {encoding}")
        return encoding

    def add_rule(self, rule: Rule) -> EncodedRule:
        """Encode and append a rule."""
        with self.lock:
            encoded = self.encoder.encode_rule(rule)
            self.rules.append(encoded)

        logger.debug(f"Stored {encoded.kind.value} rule '{rule}'")
        return encoded

    def contains_fact_encoding(self, encoding: int) -> bool:
        """Linear membership test over stored fact encodings."""
        with self.lock:
            return encoding in self.fact_encodings

    def all_facts(self) -> Tuple[Fact, ...]:
        with self.lock:
            return tuple(self.facts)

    def all_fact_encodings(self) -> Tuple[int, ...]:
        with self.lock:
            return tuple(self.fact_encodings)

    def all_rules(self) -> Tuple[EncodedRule, ...]:
        with self.lock:
            return tuple(self.rules)

    def describe(self, rule: EncodedRule) -> str:
        """Render a stored rule as text."""
        return describe_rule(self.encoder, rule)

    def snapshot(self) -> KnowledgeSnapshot:
        """Capture the current contents for a reader."""
        with self.lock:
            return KnowledgeSnapshot(
                encoder=self.encoder,
                facts=tuple(self.facts),
                fact_encodings=tuple(self.fact_encodings),
                rules=tuple(self.rules)
            )
