"""
Decision Index - Rarity-anchored buckets of compiled match phrases
==================================================================

Matching every input against every phrase does not scale with the
corpus, so phrases are bucketed by an anchor token:

1. ``count_document_frequency`` counts, over the whole corpus, how many
   phrases contain each token.
2. ``build_index`` files each phrase under its rarest token, which keeps
   buckets small, and compiles the phrase into a fuzzy pattern.
3. ``DecisionIndex.candidates`` picks the buckets an input touches and
   narrows them before any pattern runs.

A fuzzy pattern requires the phrase's tokens to appear in order,
anywhere in the input, with arbitrary text between them. Tokens are
literals: ``what?`` needs a real question mark.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from core.exceptions import IndexBuildError
from core.logging import get_logger
from .record import RuleRecord

logger = get_logger("rules.index", component="index")

# Whitespace tokenization never yields "", so it cannot collide with a token
FALLBACK_KEY = ""

STRATEGY_NARROW = "narrow"
STRATEGY_COMPLETE = "complete"


def tokenize(text: str) -> List[str]:
    """Lowercase and split on whitespace."""
    return text.lower().split()


def distinct_tokens(text: str) -> List[str]:
    """Tokens of ``text`` without repeats, in encounter order."""
    return list(dict.fromkeys(tokenize(text)))


def compile_phrase(phrase: str) -> "re.Pattern":
    """
    Compile a match phrase into a case-insensitive fuzzy pattern.

    ``"hello world"`` becomes ``hello.*?world``; evaluate it with
    ``search`` so it may match anywhere. An empty phrase compiles to
    the empty pattern, which matches every input.

    Raises:
        IndexBuildError: If the pattern cannot be compiled
    """
    source = ".*?".join(re.escape(token) for token in tokenize(phrase))
    try:
        return re.compile(source, re.IGNORECASE | re.DOTALL)
    except re.error as e:
        raise IndexBuildError(f"Cannot compile match phrase: {e}", {"phrase": phrase})


@dataclass(frozen=True, eq=False)
class CompiledEntry:
    """
    One compiled match phrase and the template it answers with.

    Entries compare by identity, so identical phrases from different
    rules stay distinct during candidate set operations.
    """
    pattern: "re.Pattern"
    response: str
    phrase: str = ""

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def count_document_frequency(records: Iterable[RuleRecord]) -> Mapping[str, int]:
    """
    Count, for each token, how many phrases contain it.

    A token repeated inside one phrase counts once for that phrase.

    Returns:
        Read-only token -> frequency mapping
    """
    frequencies: Dict[str, int] = {}
    for record in records:
        for phrase in record.match:
            for token in set(tokenize(phrase)):
                frequencies[token] = frequencies.get(token, 0) + 1
    return MappingProxyType(frequencies)


def select_anchor(tokens: Sequence[str], frequencies: Mapping[str, int]) -> str:
    """
    Pick the rarest token; the first one wins a tie.

    Tokens absent from ``frequencies`` count as zero.
    """
    if not tokens:
        return FALLBACK_KEY
    return min(tokens, key=lambda token: frequencies.get(token, 0))


class DecisionIndex:
    """
    Anchor token -> ordered bucket of compiled entries.

    Built once by ``build_index`` and frozen; safe to read from any
    number of threads afterwards.
    """

    def __init__(self):
        self._buckets: Dict[str, List[CompiledEntry]] = {}
        self._frozen = False

    def insert(self, anchor: str, entry: CompiledEntry) -> None:
        if self._frozen:
            raise IndexBuildError("Cannot insert into a frozen decision index")
        self._buckets.setdefault(anchor or FALLBACK_KEY, []).append(entry)

    def freeze(self) -> None:
        """Turn buckets into tuples; no insert is accepted afterwards."""
        self._buckets = {key: tuple(bucket) for key, bucket in self._buckets.items()}
        self._frozen = True

    def bucket(self, token: str) -> Tuple[CompiledEntry, ...]:
        return tuple(self._buckets.get(token, ()))

    @property
    def fallback(self) -> Tuple[CompiledEntry, ...]:
        return self.bucket(FALLBACK_KEY)

    def anchors(self) -> List[str]:
        return [key for key in self._buckets if key != FALLBACK_KEY]

    def bucket_count(self) -> int:
        return len(self._buckets)

    def entry_count(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __iter__(self):
        return iter(self._buckets.items())

    def candidates(self, tokens: Iterable[str], strategy: str = STRATEGY_NARROW) -> List[CompiledEntry]:
        """
        Select the entries worth evaluating for an input.

        Buckets whose anchor appears among ``tokens`` are ordered by
        size. With the ``narrow`` strategy, two or more buckets are
        first narrowed to the intersection of the two smallest; if that
        is empty, or fewer than two buckets are present, every present
        bucket is unioned. The ``complete`` strategy always unions.
        The fallback bucket is appended in every case.

        The narrowing is a heuristic: a rule anchored in a larger bucket
        is not evaluated when the two smallest buckets already share an
        entry.

        Args:
            tokens: Distinct input tokens in encounter order
            strategy: "narrow" or "complete"

        Returns:
            Candidate entries, without duplicates, in evaluation order
        """
        present = [
            self._buckets[token]
            for token in tokens
            if token != FALLBACK_KEY and token in self._buckets
        ]
        present.sort(key=len)

        selected: List[CompiledEntry] = []
        if strategy == STRATEGY_NARROW and len(present) >= 2:
            second = set(present[1])
            selected = [entry for entry in present[0] if entry in second]

        if not selected:
            selected = _ordered_union(present)

        seen = set(selected)
        for entry in self._buckets.get(FALLBACK_KEY, ()):
            if entry not in seen:
                seen.add(entry)
                selected.append(entry)

        return selected


def _ordered_union(buckets: Iterable[Sequence[CompiledEntry]]) -> List[CompiledEntry]:
    seen = set()
    union = []
    for bucket in buckets:
        for entry in bucket:
            if entry not in seen:
                seen.add(entry)
                union.append(entry)
    return union


def build_index(records: Sequence[RuleRecord], frequencies: Mapping[str, int]) -> DecisionIndex:
    """
    File every phrase of every record under its anchor bucket.

    Args:
        records: Loaded rule records
        frequencies: Complete frequency map from ``count_document_frequency``

    Returns:
        Frozen decision index

    Raises:
        IndexBuildError: If a phrase cannot be compiled
    """
    index = DecisionIndex()

    for position, record in enumerate(records):
        for phrase in record.match:
            try:
                pattern = compile_phrase(phrase)
            except IndexBuildError as e:
                logger.error(f"Failed to compile phrase {phrase!r} of rule #{position}: {e}")
                raise

            anchor = select_anchor(tokenize(phrase), frequencies)
            index.insert(anchor, CompiledEntry(pattern=pattern, response=record.response, phrase=phrase))

    index.freeze()
    return index
