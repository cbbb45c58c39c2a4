"""
ELLM Language Processor
Fixed-template parsing of English sentences into facts, rules and queries

Supported statements:
- "X is Y", "X are Y", "X has Y", "X can Y", "X cannot Y",
  "X likes Y", "X teaches Y", "[The] X [is] part of [the] Y"
- "All X are Y", "All X can Y", "If A [and B ...][,] then C"

Supported questions:
- "Is X a/an Y?", "Is X part of Y?", "Is X Y?", "Are X Y?",
  "Does X have Y?", "Can X Y?", "Does X like Y?"
"""

import logging
import re
from typing import List, Optional, Tuple

from ellm.facts import CapabilityRule, Fact, Rule, StandardRule, UniversalRule


logger = logging.getLogger(__name__)

# Connective phrase -> stored predicate, tried in order
FACT_CONNECTIVES: List[Tuple[str, str]] = [
    (" is ", "is"),
    (" are ", "is"),
    (" has ", "has"),
    (" can ", "can"),
    (" cannot ", "cannot"),
    (" likes ", "likes"),
    (" teaches ", "teaches"),
]

PART_OF = " part of "

_TRAILING_PUNCTUATION = re.compile(r"[.?!,;]$")


def _split_once(text: str, separator: str) -> Optional[Tuple[str, str]]:
    """Split on a separator that must occur exactly once with non-empty sides."""
    parts = text.split(separator)
    if len(parts) != 2:
        return None
    left, right = parts[0].strip(), parts[1].strip()
    if not left or not right:
        return None
    return left, right


def _strip_article(text: str) -> str:
    if text.startswith("the "):
        return text[4:].strip()
    return text


class LanguageProcessor:
    """Turns English sentences into facts, rules and query facts."""

    def normalize(self, sentence: str) -> str:
        """Lower-case, trim and drop one trailing punctuation mark."""
        text = sentence.lower().strip()
        return _TRAILING_PUNCTUATION.sub("", text).strip()

    def parse_fact(self, sentence: str) -> Optional[Fact]:
        """Parse a statement such as "Socrates is human"."""
        text = self.normalize(sentence)

        # "part of" goes first so that "X is part of Y" is not read as "is"
        if PART_OF in text:
            parts = _split_once(text, PART_OF)
            if parts:
                subject, obj = parts
                if subject.endswith(" is"):
                    subject = subject[:-3].strip()
                subject, obj = _strip_article(subject), _strip_article(obj)
                if subject and obj:
                    return Fact(subject, "part of", obj)

        for connective, predicate in FACT_CONNECTIVES:
            if connective in text:
                parts = _split_once(text, connective)
                if parts:
                    return Fact(parts[0], predicate, parts[1])

        return None

    def parse_rule(self, sentence: str) -> Optional[Rule]:
        """Parse "All X are Y", "All X can Y" or "If ... then ..."."""
        text = self.normalize(sentence)

        if text.startswith("all "):
            rest = text[4:]
            if " are " in rest:
                parts = _split_once(rest, " are ")
                if parts:
                    return UniversalRule(parts[0], parts[1])
            if " can " in rest:
                parts = _split_once(rest, " can ")
                if parts:
                    return CapabilityRule(parts[0], parts[1])

        if text.startswith("if ") and " then " in text:
            rest = text[3:]
            separator = ", then " if ", then " in rest else " then "
            parts = _split_once(rest, separator)
            if not parts:
                return None
            condition_text, conclusion_text = parts

            conditions = []
            for part in condition_text.split(" and "):
                condition = self.parse_fact(part)
                if condition is None:
                    return None
                conditions.append(condition)

            conclusion = self.parse_fact(conclusion_text)
            if conclusion is not None:
                return StandardRule(conditions, conclusion)

        return None

    def parse_query(self, question: str) -> Optional[Fact]:
        """Parse a yes/no question into the fact it asks about."""
        text = self.normalize(question)

        if text.startswith("is "):
            rest = text[3:].strip()
            if PART_OF in rest:
                parts = _split_once(rest, PART_OF)
                if parts:
                    return Fact(_strip_article(parts[0]), "part of", _strip_article(parts[1]))
            elif " a " in rest:
                parts = _split_once(rest, " a ")
                if parts:
                    return Fact(parts[0], "is", parts[1])
            elif " an " in rest:
                parts = _split_once(rest, " an ")
                if parts:
                    return Fact(parts[0], "is", parts[1])
            else:
                return self._subject_first(rest, "is")

        if text.startswith("are "):
            return self._subject_first(text[4:].strip(), "is")

        if text.startswith("does ") and " have " in text:
            parts = _split_once(text[5:].strip(), " have ")
            if parts:
                return Fact(parts[0], "has", parts[1])

        if text.startswith("can "):
            return self._subject_first(text[4:].strip(), "can")

        if text.startswith("does ") and " like " in text:
            parts = _split_once(text[5:].strip(), " like ")
            if parts:
                return Fact(parts[0], "likes", parts[1])

        return None

    def _subject_first(self, rest: str, predicate: str) -> Optional[Fact]:
        """First word is the subject, the remainder the object."""
        words = rest.split()
        if len(words) < 2:
            return None
        return Fact(words[0], predicate, " ".join(words[1:]))
