"""
Rules Engine - Indexed fuzzy matching and template responses
============================================================

This module implements the engine that matches incoming chat input
against the rule corpus and renders the templates of every rule that
fires.

Construction loads the corpus, counts token frequencies and builds the
decision index in one synchronous pass. The result is an immutable
snapshot; queries never mutate it, and ``reload`` replaces it whole.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.config import CANDIDATE_STRATEGIES, Config
from core.exceptions import ConfigError
from core.logging import get_logger
from .context import MatchContext
from .index import (
    STRATEGY_NARROW,
    CompiledEntry,
    DecisionIndex,
    build_index,
    count_document_frequency,
    distinct_tokens,
)
from .loader import CompositeRuleSource, FileRuleSource, InMemoryRuleSource, RuleSource
from .record import RuleRecord
from .templates import PlaceholderRegistry, default_registry

logger = get_logger("rules.engine", component="engine")


@dataclass(frozen=True)
class IndexSnapshot:
    """
    Everything a query reads, built together and never modified.

    Attributes:
        records (tuple): Loaded rules in load order
        frequencies (Mapping): Token -> number of phrases containing it
        index (DecisionIndex): Anchor buckets of compiled phrases
    """
    records: Tuple[RuleRecord, ...]
    frequencies: Mapping[str, int]
    index: DecisionIndex

    @classmethod
    def build(cls, records: Sequence[RuleRecord]) -> "IndexSnapshot":
        records = tuple(records)
        # Anchors depend on global frequencies, so count everything first
        frequencies = count_document_frequency(records)
        index = build_index(records, frequencies)
        return cls(records=records, frequencies=frequencies, index=index)

    @property
    def phrase_count(self) -> int:
        return sum(len(record.match) for record in self.records)


class RulesEngine:
    """
    Main rules engine for matching input and rendering responses.

    Example:
        engine = RulesEngine(FileRuleSource("rules/"))

        for reply in engine.match(context, "hey, where am i right now"):
            print(reply)

    Several rules may fire for one input; every resolved response is
    returned, in candidate order.
    """

    def __init__(
        self,
        source: RuleSource,
        registry: Optional[PlaceholderRegistry] = None,
        candidate_strategy: str = STRATEGY_NARROW
    ):
        """
        Initialize the engine and build the index.

        Args:
            source: Where rule records come from
            registry: Placeholder registry (built-ins when omitted)
            candidate_strategy: "narrow" or "complete"

        Raises:
            ConfigError: If the strategy is unknown
            IndexBuildError: If a phrase cannot be compiled
        """
        if candidate_strategy not in CANDIDATE_STRATEGIES:
            raise ConfigError(f"Invalid candidate_strategy: {candidate_strategy}")

        self.source = source
        self.registry = registry if registry is not None else default_registry()
        self.candidate_strategy = candidate_strategy
        self._snapshot = self._build()

    @classmethod
    def from_records(cls, records: Iterable[Any], **kwargs) -> "RulesEngine":
        """Build an engine over records (or their dict form) held in memory."""
        return cls(InMemoryRuleSource(records), **kwargs)

    @classmethod
    def from_config(
        cls,
        config: Config,
        registry: Optional[PlaceholderRegistry] = None,
        extra_sources: Sequence[RuleSource] = ()
    ) -> "RulesEngine":
        """
        Build an engine from application configuration.

        Args:
            config: Loaded configuration
            registry: Placeholder registry (built-ins when omitted)
            extra_sources: Additional sources, e.g. addon rule packs,
                loaded after the rule directory
        """
        source: RuleSource = FileRuleSource(
            config.rules_path,
            suffixes=config.rules.suffixes,
            default_document=config.rules.default_document,
            write_default=config.rules.write_default,
        )
        if extra_sources:
            source = CompositeRuleSource(source, *extra_sources)

        return cls(source, registry=registry, candidate_strategy=config.rules.candidate_strategy)

    def _build(self) -> IndexSnapshot:
        snapshot = IndexSnapshot.build(self.source.load())
        logger.info(
            f"Loaded {len(snapshot.records)} rules; indexed {snapshot.phrase_count} phrases "
            f"into {snapshot.index.bucket_count()} buckets"
        )
        return snapshot

    @property
    def snapshot(self) -> IndexSnapshot:
        return self._snapshot

    def reload(self) -> Dict[str, Any]:
        """
        Reload the rule source and swap in a fresh index.

        Queries already running finish against the snapshot they
        started with. If the rebuild fails the current index stays.

        Returns:
            Statistics of the new index
        """
        self._snapshot = self._build()
        return self.stats()

    def candidates(self, raw_input: str) -> List[CompiledEntry]:
        """Entries a query for ``raw_input`` would evaluate."""
        text = raw_input.strip()
        if not text:
            return []
        return self._snapshot.index.candidates(distinct_tokens(text), self.candidate_strategy)

    def match(self, context: Optional[MatchContext], raw_input: str) -> List[str]:
        """
        Resolve every rule whose phrase fuzzily appears in the input.

        Args:
            context: Attribute lookups for placeholders
            raw_input: Free-text input

        Returns:
            Resolved responses; empty for blank input or no match
        """
        text = (raw_input or "").strip()
        if not text:
            return []

        index = self._snapshot.index
        results = []
        for entry in index.candidates(distinct_tokens(text), self.candidate_strategy):
            if entry.matches(text):
                results.append(self.registry.resolve(entry.response, context))

        logger.debug(f"Input {text[:50]!r} produced {len(results)} responses")
        return results

    def match_first(self, context: Optional[MatchContext], raw_input: str) -> Optional[str]:
        """First resolved response, or None."""
        results = self.match(context, raw_input)
        return results[0] if results else None

    def stats(self) -> Dict[str, Any]:
        """Summary of the current index."""
        snapshot = self._snapshot
        return {
            "rules": len(snapshot.records),
            "phrases": snapshot.phrase_count,
            "buckets": snapshot.index.bucket_count(),
            "tokens": len(snapshot.frequencies),
            "fallback_entries": len(snapshot.index.fallback),
            "placeholders": len(self.registry),
            "candidate_strategy": self.candidate_strategy,
        }
