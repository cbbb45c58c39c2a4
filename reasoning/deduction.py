"""
ELLM Reasoning Engine
Backward-chaining deduction over prime-encoded knowledge

This module implements:
- Direct fact lookup by encoding
- Universal and capability rule application
- Conjunctive standard rule chaining
- Transitive fallback for "is" and "part of"
- Per-query cycle detection with a human-readable justification trail
"""

import logging
import sys
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Union

from ellm.encoder import EncodedQuantifiedRule, EncodedStandardRule
from ellm.facts import Fact
from ellm.knowledge import KnowledgeSnapshot, KnowledgeStore


# Predicates eligible for the transitive fallback
TRANSITIVE_PREDICATES = ("is", "part of")

# None derives the cutoff from the interpreter recursion limit
DEFAULT_MAX_DEPTH: Optional[int] = None

# Every reasoning level costs two interpreter frames
FRAMES_PER_LEVEL = 2
RECURSION_HEADROOM = 200


class ReasoningError(Exception):
    """Raised when deduction fails unexpectedly."""
    pass


def recursion_depth_limit() -> int:
    """Deepest reasoning level the interpreter stack can hold."""
    return max(1, (sys.getrecursionlimit() - RECURSION_HEADROOM) // FRAMES_PER_LEVEL)


@dataclass
class DeductionResult:
    """Verdict of a deduction with its justification."""
    result: bool
    explanation: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'result': self.result,
            'explanation': self.explanation
        }


@dataclass
class DeductionContext:
    """State owned by a single top-level deduce call."""
    visited: Set[str] = field(default_factory=set)
    # Encodings of goals whose own expansion led back to themselves
    looped: Set[int] = field(default_factory=set)
    depth_limit: int = 0
    goals_expanded: int = 0
    cycles_detected: int = 0
    depth_cutoffs: int = 0
    max_depth_reached: int = 0


class ReasoningEngine:
    """
    Cycle-safe backward chaining over a knowledge store.

    The engine holds no per-query state: every call to deduce builds its own
    DeductionContext and reasons over a snapshot of the store, so concurrent
    queries never share a cycle guard.
    """

    def __init__(self, max_depth: Optional[int] = DEFAULT_MAX_DEPTH):
        """
        Initialize the reasoning engine.

        Args:
            max_depth: Recursion depth cutoff, None to derive it from
                sys.getrecursionlimit()
        """
        self.max_depth = max_depth
        self.logger = logging.getLogger(__name__)

        # Performance tracking
        self.stats = self._empty_stats()

        # Thread safety
        self.lock = threading.RLock()

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            'deductions': 0,
            'successful_deductions': 0,
            'goals_expanded': 0,
            'cycles_detected': 0,
            'depth_cutoffs': 0,
            'max_depth_reached': 0,
            'total_time': 0.0
        }

    def deduce(self, store: Union[KnowledgeStore, KnowledgeSnapshot],
               query_fact: Fact) -> DeductionResult:
        """
        Decide whether a fact follows from the knowledge store.

        Args:
            store: Knowledge store or snapshot to reason over
            query_fact: Fact to establish

        Returns:
            DeductionResult with the verdict and its explanation
        """
        start_time = time.time()
        context = DeductionContext(depth_limit=self.depth_limit())

        try:
            knowledge = store.snapshot()
            outcome = self._decide(knowledge, query_fact, context, 0)
        except RecursionError:
            self.logger.warning(f"Interpreter recursion limit reached deducing '{query_fact}'")
            context.depth_cutoffs += 1
            outcome = DeductionResult(False, f"Maximum reasoning depth exceeded: {query_fact}")
        except Exception as e:
            self.logger.error(f"Deduction failed for '{query_fact}': {str(e)}")
            raise ReasoningError(f"Deduction failed: {str(e)}") from e

        elapsed = time.time() - start_time
        self._record(context, outcome, elapsed)

        self.logger.debug(
            f"Deduced '{query_fact}' -> {outcome.result} "
            f"({context.goals_expanded} goals, {elapsed:.4f}s)"
        )
        return outcome

    def depth_limit(self) -> int:
        """Effective recursion depth cutoff for the next deduction."""
        if self.max_depth is not None:
            return self.max_depth
        return recursion_depth_limit()

    def _record(self, context: DeductionContext, outcome: DeductionResult,
                elapsed: float) -> None:
        """Merge one call's counters into the engine statistics."""
        with self.lock:
            self.stats['deductions'] += 1
            if outcome.result:
                self.stats['successful_deductions'] += 1
            self.stats['goals_expanded'] += context.goals_expanded
            self.stats['cycles_detected'] += context.cycles_detected
            self.stats['depth_cutoffs'] += context.depth_cutoffs
            self.stats['max_depth_reached'] = max(
                self.stats['max_depth_reached'], context.max_depth_reached
            )
            self.stats['total_time'] += elapsed

    def _decide(self, knowledge: KnowledgeSnapshot, fact: Fact,
                context: DeductionContext, depth: int) -> DeductionResult:
        """Recursive backward-chaining step."""
        encoding = knowledge.encoder.encode_fact(fact)
        context.max_depth_reached = max(context.max_depth_reached, depth)

        fact_key = str(fact)
        if fact_key in context.visited:
            context.cycles_detected += 1
            context.looped.add(encoding)
            return DeductionResult(False, f"Circular reasoning detected: {fact}")
        context.visited.add(fact_key)

        if depth > context.depth_limit:
            context.depth_cutoffs += 1
            return DeductionResult(False, f"Maximum reasoning depth exceeded: {fact}")

        context.goals_expanded += 1
        cutoffs_before = context.depth_cutoffs

        if knowledge.contains_fact_encoding(encoding):
            return DeductionResult(True, f"Direct fact in knowledge base: {fact}")

        outcome = self._apply_quantified_rules(knowledge, fact, context, depth)
        if outcome is not None:
            return outcome

        outcome = self._apply_standard_rules(knowledge, fact, encoding, context, depth)
        if outcome is not None:
            return outcome

        if fact.predicate in TRANSITIVE_PREDICATES:
            outcome = self._try_transitive(knowledge, fact, context, depth)
            if outcome is not None:
                return outcome

        # A cutoff anywhere below makes the failure inconclusive
        if context.depth_cutoffs > cutoffs_before:
            return DeductionResult(False, f"Maximum reasoning depth exceeded: {fact}")
        if encoding in context.looped:
            return DeductionResult(False, f"Circular reasoning detected: {fact}")
        return DeductionResult(False, f"Could not deduce: {fact}")

    def _apply_quantified_rules(self, knowledge: KnowledgeSnapshot, fact: Fact,
                                context: DeductionContext,
                                depth: int) -> Optional[DeductionResult]:
        """Try every universal and capability rule in storage order."""
        encoder = knowledge.encoder

        for rule in knowledge.all_rules():
            if not isinstance(rule, EncodedQuantifiedRule):
                continue

            if fact.predicate != encoder.concept_of(rule.predicate_prime):
                continue
            prop = encoder.concept_of(rule.property_prime)
            if fact.object != prop:
                continue

            category = encoder.concept_of(rule.category_prime)
            membership = Fact(fact.subject, "is", category)
            sub = self._decide(knowledge, membership, context, depth + 1)
            if sub.result:
                return DeductionResult(
                    True,
                    f"{sub.explanation}, and all {category} {rule.verb} {prop}"
                )

        return None

    def _apply_standard_rules(self, knowledge: KnowledgeSnapshot, fact: Fact,
                              encoding: int, context: DeductionContext,
                              depth: int) -> Optional[DeductionResult]:
        """Try every standard rule whose conclusion encodes to the goal."""
        encoder = knowledge.encoder

        for rule in knowledge.all_rules():
            if not isinstance(rule, EncodedStandardRule):
                continue
            if rule.conclusion_encoding != encoding:
                continue

            explanations: List[str] = []
            all_conditions_met = True

            for condition_encoding in rule.condition_encodings:
                condition = encoder.decode_fact(condition_encoding)
                if condition is None:
                    all_conditions_met = False
                    break

                sub = self._decide(knowledge, condition, context, depth + 1)
                if not sub.result:
                    all_conditions_met = False
                    break
                explanations.append(sub.explanation)

            if all_conditions_met:
                return DeductionResult(
                    True, f"{', '.join(explanations)}, which implies {fact}"
                )

        return None

    def _try_transitive(self, knowledge: KnowledgeSnapshot, fact: Fact,
                        context: DeductionContext,
                        depth: int) -> Optional[DeductionResult]:
        """Chain through any stored fact sharing the goal's subject and predicate."""
        for stored in knowledge.all_facts():
            if stored.subject != fact.subject or stored.predicate != fact.predicate:
                continue

            bridge = Fact(stored.object, fact.predicate, fact.object)
            sub = self._decide(knowledge, bridge, context, depth + 1)
            if sub.result:
                return DeductionResult(
                    True,
                    f"{fact.subject} {fact.predicate} {stored.object}, and {sub.explanation}"
                )

        return None

    def get_performance_stats(self) -> Dict[str, Any]:
        """Get cumulative deduction statistics."""
        with self.lock:
            return self.stats.copy()

    def reset_stats(self) -> None:
        """Reset all deduction statistics."""
        with self.lock:
            self.stats = self._empty_stats()
