"""
Match Context - Read-only attribute lookups for placeholder resolution
======================================================================

Placeholder functions never reach into global state. Whatever the host
wants to expose (the player who spoke, their world, entities around
them) is handed to ``RulesEngine.match`` as a context object, and any
object with a ``get(key, default=None)`` method will do.

Keys are dotted paths such as ``player.name`` or ``world.weather``.
"""

from typing import Any, Mapping, Optional, Protocol


_MISSING = object()


class MatchContext(Protocol):
    """Capability interface consumed by placeholder functions."""

    def get(self, key: str, default: Any = None) -> Any:
        ...


class AttributeContext:
    """
    Context backed by nested mappings or plain objects.

    Example:
        context = AttributeContext({
            "player": {"name": "Steve", "health": 20.0},
            "world": {"name": "overworld", "storm": False},
        })
        context.get("player.name")  # "Steve"
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **attributes: Any):
        self._data = dict(data or {})
        self._data.update(attributes)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Resolve a dotted key.

        Each segment is looked up as a mapping key first and as an
        object attribute second. Missing segments yield ``default``.
        """
        if key in self._data:
            return self._data[key]

        current: Any = self._data
        for part in key.split("."):
            if isinstance(current, Mapping):
                current = current.get(part, _MISSING)
            else:
                current = getattr(current, part, _MISSING)
            if current is _MISSING:
                return default
        return current

    def __repr__(self) -> str:
        return f"AttributeContext({self._data!r})"


EMPTY_CONTEXT = AttributeContext()
