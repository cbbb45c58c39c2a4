"""
ELLM Core Module
Efficient Language and Logic Model based on prime encoding

This module contains the core components of the ELLM architecture:
- Prime Source: sieve, primality and factorization
- Concept Encoder: concept <-> prime bijection and fact encoding
- Knowledge Store: encoded facts and rules
"""

__version__ = "1.0.0"
__author__ = "ELLM Development Team"

# Core components
from .primes import PrimeSource, PrimeError
from .facts import (
    Fact, UniversalRule, CapabilityRule, StandardRule, Rule, RuleKind, RuleError
)
from .encoder import (
    ConceptEncoder, EncodingError, EncodedUniversalRule, EncodedCapabilityRule,
    EncodedStandardRule
)
from .knowledge import KnowledgeStore, KnowledgeSnapshot

__all__ = [
    "PrimeSource",
    "PrimeError",
    "Fact",
    "UniversalRule",
    "CapabilityRule",
    "StandardRule",
    "Rule",
    "RuleKind",
    "RuleError",
    "ConceptEncoder",
    "EncodingError",
    "EncodedUniversalRule",
    "EncodedCapabilityRule",
    "EncodedStandardRule",
    "KnowledgeStore",
    "KnowledgeSnapshot"
]
