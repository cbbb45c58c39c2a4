"""
ELLM Knowledge Representation
Facts and the closed set of rule kinds

This module implements:
- Fact: normalized (subject, predicate, object) triple
- UniversalRule: "All X are Y"
- CapabilityRule: "All X can Y"
- StandardRule: conjunctive IF ... THEN implication
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Tuple, Union


# Bound variable used by the synthetic condition/conclusion of quantified rules
RULE_VARIABLE = "_x_"


class RuleError(Exception):
    """Raised when a rule is malformed."""
    pass


class RuleKind(Enum):
    """Kinds of rules the knowledge store accepts."""
    UNIVERSAL = "universal"
    CAPABILITY = "capability"
    STANDARD = "standard"


def normalize_concept(concept: object) -> str:
    """Case-fold and trim a concept token."""
    return str(concept).strip().lower()


@dataclass(frozen=True)
class Fact:
    """Represents an atomic (subject, predicate, object) fact."""
    subject: str
    predicate: str
    object: str

    def __post_init__(self):
        object.__setattr__(self, 'subject', normalize_concept(self.subject))
        object.__setattr__(self, 'predicate', normalize_concept(self.predicate))
        object.__setattr__(self, 'object', normalize_concept(self.object))

    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object}"


def _format_implication(conditions: Tuple[Fact, ...], conclusion: Fact) -> str:
    joined = " AND ".join(str(c) for c in conditions)
    return f"IF ({joined}) THEN ({conclusion})"


@dataclass(frozen=True)
class UniversalRule:
    """All members of a category have a property."""
    category: str
    property: str
    conditions: Tuple[Fact, ...] = field(init=False, repr=False, compare=False)
    conclusion: Fact = field(init=False, repr=False, compare=False)

    kind: ClassVar[RuleKind] = RuleKind.UNIVERSAL

    def __post_init__(self):
        object.__setattr__(self, 'category', normalize_concept(self.category))
        object.__setattr__(self, 'property', normalize_concept(self.property))
        object.__setattr__(self, 'conditions', (Fact(RULE_VARIABLE, "is", self.category),))
        object.__setattr__(self, 'conclusion', Fact(RULE_VARIABLE, "is", self.property))

    def __str__(self) -> str:
        return f"All {self.category} are {self.property}"


@dataclass(frozen=True)
class CapabilityRule:
    """All members of a category can do something."""
    category: str
    capability: str
    conditions: Tuple[Fact, ...] = field(init=False, repr=False, compare=False)
    conclusion: Fact = field(init=False, repr=False, compare=False)

    kind: ClassVar[RuleKind] = RuleKind.CAPABILITY

    def __post_init__(self):
        object.__setattr__(self, 'category', normalize_concept(self.category))
        object.__setattr__(self, 'capability', normalize_concept(self.capability))
        object.__setattr__(self, 'conditions', (Fact(RULE_VARIABLE, "is", self.category),))
        object.__setattr__(self, 'conclusion', Fact(RULE_VARIABLE, "can", self.capability))

    def __str__(self) -> str:
        return f"All {self.category} can {self.capability}"


@dataclass(frozen=True)
class StandardRule:
    """Conjunction of condition facts implying a conclusion fact."""
    conditions: Tuple[Fact, ...]
    conclusion: Fact

    kind: ClassVar[RuleKind] = RuleKind.STANDARD

    def __post_init__(self):
        # Accept a single fact or any sequence of facts
        if isinstance(self.conditions, Fact):
            object.__setattr__(self, 'conditions', (self.conditions,))
        elif not isinstance(self.conditions, tuple):
            object.__setattr__(self, 'conditions', tuple(self.conditions))

        if not self.conditions:
            raise RuleError("A standard rule needs at least one condition")

    def __str__(self) -> str:
        return _format_implication(self.conditions, self.conclusion)


Rule = Union[UniversalRule, CapabilityRule, StandardRule]
