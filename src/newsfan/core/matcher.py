#!/usr/bin/env python3
"""
Phrase Matcher

Builds a relevance predicate from a search phrase. A text matches when it
contains the phrase, allowing minor variation: simple inflections of each
word (plural, past tense, gerund) and small spelling differences caught by a
sliding-window similarity check.
"""

import re
import logging
import unicodedata
from difflib import SequenceMatcher
from typing import List, Optional, Pattern

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.85

# Shorter phrase words only match exactly or through an inflection
MIN_FUZZY_WORD_LENGTH = 5
# A misspelling keeps the word's opening letters ("parliment", not "selection")
FUZZY_PREFIX_LENGTH = 2

# Inflections tolerated at the end of every phrase word
_SUFFIX = r"(?:s|es|ed|d|ing)?"


def normalize_text(text: Optional[str]) -> str:
    """Normalize text for matching."""
    if not text:
        return ""

    text = unicodedata.normalize('NFKC', text).casefold()

    # Possessives ("senate's") collapse onto the bare word
    text = re.sub(r"['’]s\b", '', text)

    text = re.sub(r'[^\w\s]', ' ', text)
    text = re.sub(r'\s+', ' ', text).strip()

    return text


class Predicate:
    """Relevance test over free text, built once per search phrase."""

    def __init__(self, phrase: str, similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        self.phrase = phrase
        self.similarity_threshold = similarity_threshold
        self._normalized = normalize_text(phrase)
        self._words: List[str] = self._normalized.split()
        self._pattern: Optional[Pattern] = self._compile(self._words)

    @staticmethod
    def _compile(words: List[str]) -> Optional[Pattern]:
        if not words:
            return None
        body = r'\W+'.join(re.escape(word) + _SUFFIX for word in words)
        return re.compile(r'\b' + body + r'\b')

    def test(self, text: Optional[str]) -> bool:
        """Return True if ``text`` contains the phrase; never raises."""
        if self._pattern is None or not isinstance(text, str):
            return False

        normalized = normalize_text(text)
        if not normalized:
            return False

        if self._pattern.search(normalized):
            return True

        return self._fuzzy_window_match(normalized)

    def _fuzzy_window_match(self, normalized: str) -> bool:
        """Compare every run of len(phrase) words against the phrase, word by word."""
        words = normalized.split()
        size = len(self._words)
        if len(words) < size:
            return False

        for start in range(len(words) - size + 1):
            window = words[start:start + size]
            if all(self._similar_word(candidate, target) for candidate, target in zip(window, self._words)):
                logger.debug(f"Fuzzy match '{' '.join(window)}' ~ '{self._normalized}'")
                return True

        return False

    def _similar_word(self, candidate: str, target: str) -> bool:
        """Exact word, or a near spelling of a long word with the same leading letters."""
        if candidate == target:
            return True
        if len(target) < MIN_FUZZY_WORD_LENGTH or candidate[:FUZZY_PREFIX_LENGTH] != target[:FUZZY_PREFIX_LENGTH]:
            return False

        matcher = SequenceMatcher(None, candidate, target, autojunk=False)
        if matcher.real_quick_ratio() < self.similarity_threshold:
            return False
        if matcher.quick_ratio() < self.similarity_threshold:
            return False
        return matcher.ratio() >= self.similarity_threshold

    __call__ = test

    def __repr__(self):
        return f"Predicate(phrase={self.phrase!r}, threshold={self.similarity_threshold})"


class Matcher:
    """Factory for relevance predicates with a fixed similarity threshold."""

    def __init__(self, similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        if not 0.0 <= similarity_threshold <= 1.0:
            raise ValueError("similarity_threshold must be between 0.0 and 1.0")
        self.similarity_threshold = similarity_threshold

    def build(self, phrase: Optional[str]) -> Predicate:
        """Build a predicate for ``phrase``. An empty phrase matches nothing."""
        return Predicate(phrase or "", self.similarity_threshold)


def build_predicate(phrase: Optional[str],
                    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD) -> Predicate:
    """Build a relevance predicate for ``phrase``."""
    return Matcher(similarity_threshold).build(phrase)
