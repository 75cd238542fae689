"""
Rules Module - Indexed fuzzy rule matching
==========================================

This module provides the rule-based response layer that answers chat
input without a language model, offering:
- Rule documents discovered recursively under a directory
- Rarity-anchored decision index over every match phrase
- In-order fuzzy phrase matching
- Context-bound template placeholders
"""

from .context import AttributeContext, MatchContext
from .engine import IndexSnapshot, RulesEngine
from .index import CompiledEntry, DecisionIndex, build_index, count_document_frequency
from .loader import CompositeRuleSource, FileRuleSource, InMemoryRuleSource, RuleSource
from .record import RuleRecord
from .templates import PlaceholderRegistry, default_registry

__all__ = [
    "AttributeContext",
    "MatchContext",
    "IndexSnapshot",
    "RulesEngine",
    "CompiledEntry",
    "DecisionIndex",
    "build_index",
    "count_document_frequency",
    "CompositeRuleSource",
    "FileRuleSource",
    "InMemoryRuleSource",
    "RuleSource",
    "RuleRecord",
    "PlaceholderRegistry",
    "default_registry",
]
