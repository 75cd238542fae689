"""
Rule Record - A set of match phrases and one response template
==============================================================
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from core.exceptions import RuleLoadError


@dataclass(frozen=True)
class RuleRecord:
    """
    A single rule loaded from a rule document.

    Attributes:
        match (tuple): Phrases that trigger this rule
        response (str): Response template, may contain {placeholders}
    """
    match: Tuple[str, ...]
    response: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuleRecord":
        """
        Create a record from a parsed document entry.

        A bare string under ``match`` is treated as a single phrase.

        Raises:
            RuleLoadError: If the entry is not a valid rule
        """
        if not isinstance(data, dict):
            raise RuleLoadError(f"Rule must be a mapping, got {type(data).__name__}")

        phrases = data.get("match")
        response = data.get("response")

        if isinstance(phrases, str):
            phrases = [phrases]

        if not isinstance(phrases, list) or not phrases:
            raise RuleLoadError("Rule 'match' must be a non-empty list of strings")

        if not all(isinstance(p, str) for p in phrases):
            raise RuleLoadError("Rule 'match' entries must be strings", {"match": phrases})

        if not isinstance(response, str):
            raise RuleLoadError("Rule 'response' must be a string")

        return cls(match=tuple(phrases), response=response)

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to its document form."""
        return {"match": list(self.match), "response": self.response}
