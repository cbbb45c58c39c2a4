"""
ELLM Reasoning Module
Deduction, language parsing and session management

This module contains the reasoning components:
- Reasoning Engine: cycle-safe backward chaining over encoded knowledge
- Language Processor: fixed-template sentence and question parsing
- Session: learn/query/summary/reset over one knowledge base
"""

__version__ = "1.0.0"
__author__ = "ELLM Development Team"

# Reasoning components
from .deduction import ReasoningEngine, DeductionResult, ReasoningError
from .language import LanguageProcessor
from .session import ELLMSession, SessionConfig, QueryResult, create_session

__all__ = [
    "ReasoningEngine",
    "DeductionResult",
    "ReasoningError",
    "LanguageProcessor",
    "ELLMSession",
    "SessionConfig",
    "QueryResult",
    "create_session"
]
