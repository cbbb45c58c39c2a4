"""
ELLM Session
Learning and question answering over one encoder/knowledge-store lifetime

This module wires the language processor, concept encoder, knowledge store
and reasoning engine together and exposes the operations used by the CLI
and the API:
- learn: add facts and rules from free text
- query: answer a yes/no question with an explanation
- knowledge_summary: list what has been learned
- reset: start over with a fresh session
"""

import logging
import os
import re
import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import yaml

from ellm.encoder import ConceptEncoder
from ellm.knowledge import KnowledgeStore
from ellm.primes import DEFAULT_SIEVE_LIMIT

from .deduction import DEFAULT_MAX_DEPTH, ReasoningEngine
from .language import LanguageProcessor


logger = logging.getLogger(__name__)

_SENTENCE_BOUNDARY = re.compile(r"[.!?]\s*")


@dataclass
class SessionConfig:
    """Configuration for an ELLM session."""
    # Encoding
    sieve_limit: int = DEFAULT_SIEVE_LIMIT

    # Reasoning
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH


@dataclass
class QueryResult:
    """Answer to a question."""
    query: str
    parsed_query: Optional[str]
    answer: str
    explanation: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'query': self.query,
            'parsed_query': self.parsed_query,
            'answer': self.answer,
            'explanation': self.explanation
        }


class ELLMSession:
    """
    One learning/querying session.

    The encoder and knowledge store live and die together with the session;
    reset hands back a new session instead of clearing this one.
    """

    def __init__(self, config: Optional[SessionConfig] = None):
        """
        Initialize a session.

        Args:
            config: Session configuration
        """
        self.config = config or SessionConfig()

        self.encoder = ConceptEncoder(sieve_limit=self.config.sieve_limit)
        self.language = LanguageProcessor()
        self.knowledge = KnowledgeStore(self.encoder)
        self.reasoner = ReasoningEngine(max_depth=self.config.max_depth)

        self.performance_stats = {
            'sentences_learned': 0,
            'sentences_rejected': 0,
            'queries': 0,
            'unparsed_queries': 0,
            'total_time': 0.0
        }

        # Serializes writers; readers work on store snapshots
        self.lock = threading.RLock()

    def learn(self, text: str) -> List[str]:
        """
        Learn facts and rules from text.

        Args:
            text: One or more sentences

        Returns:
            One result line per non-empty sentence
        """
        start_time = time.time()
        results = []

        with self.lock:
            for sentence in _SENTENCE_BOUNDARY.split(text):
                if not sentence.strip():
                    continue

                rule = self.language.parse_rule(sentence)
                if rule is not None:
                    self.knowledge.add_rule(rule)
                    results.append(f"Added rule: {rule}")
                    self.performance_stats['sentences_learned'] += 1
                    continue

                fact = self.language.parse_fact(sentence)
                if fact is not None:
                    self.knowledge.add_fact(fact)
                    results.append(f"Added fact: {fact}")
                    self.performance_stats['sentences_learned'] += 1
                    continue

                results.append(f'Failed to parse: "{self.language.normalize(sentence)}"')
                self.performance_stats['sentences_rejected'] += 1

            self.performance_stats['total_time'] += time.time() - start_time

        logger.info(f"Learned from {len(results)} sentence(s)")
        return results

    def query(self, question: str) -> QueryResult:
        """
        Answer a yes/no question.

        Args:
            question: Question such as "Is Socrates mortal?"

        Returns:
            QueryResult; answer is "Unknown" only if the question is not understood
        """
        start_time = time.time()
        query_fact = self.language.parse_query(question)

        if query_fact is None:
            with self.lock:
                self.performance_stats['queries'] += 1
                self.performance_stats['unparsed_queries'] += 1
            return QueryResult(
                query=question,
                parsed_query=None,
                answer="Unknown",
                explanation="Could not parse the query"
            )

        outcome = self.reasoner.deduce(self.knowledge, query_fact)

        with self.lock:
            self.performance_stats['queries'] += 1
            self.performance_stats['total_time'] += time.time() - start_time

        return QueryResult(
            query=question,
            parsed_query=str(query_fact),
            answer="Yes" if outcome.result else "No",
            explanation=outcome.explanation
        )

    def knowledge_summary(self) -> Dict[str, List[str]]:
        """Display strings for every stored fact and rule."""
        snapshot = self.knowledge.snapshot()
        return {
            'facts': [str(fact) for fact in snapshot.all_facts()],
            'rules': [self.knowledge.describe(rule) for rule in snapshot.all_rules()]
        }

    def reset(self) -> 'ELLMSession':
        """Return a fresh session with the same configuration."""
        logger.info("Resetting session")
        return ELLMSession(self.config)

    def get_performance_stats(self) -> Dict[str, Any]:
        """Get session, reasoning and prime cache statistics."""
        with self.lock:
            stats = self.performance_stats.copy()
        stats['facts'] = len(self.knowledge.all_facts())
        stats['rules'] = len(self.knowledge.all_rules())
        stats['concepts'] = len(self.encoder)
        stats['reasoning'] = self.reasoner.get_performance_stats()
        stats['primes'] = self.encoder.prime_source.get_performance_stats()
        return stats


def load_config(config_path: Optional[str] = None) -> SessionConfig:
    """
    Build a SessionConfig, optionally overridden from a YAML file.

    Args:
        config_path: Path to a YAML file with "encoding" and/or "reasoning" sections

    Returns:
        SessionConfig instance
    """
    config = SessionConfig()

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}

            for section in ('encoding', 'reasoning'):
                for key, value in (config_data.get(section) or {}).items():
                    if hasattr(config, key):
                        setattr(config, key, value)
                    else:
                        logger.warning(f"Ignoring unknown {section} option: {key}")

        except Exception as e:
            logger.warning(f"Failed to load configuration from {config_path}: {str(e)}")
            config = SessionConfig()
    elif config_path:
        logger.warning(f"Configuration file not found: {config_path}")

    logger.debug(f"Session configuration: {asdict(config)}")
    return config


def create_session(config_path: Optional[str] = None) -> ELLMSession:
    """
    Create an ELLMSession with optional configuration.

    Args:
        config_path: Path to configuration file

    Returns:
        ELLMSession instance
    """
    return ELLMSession(load_config(config_path))
