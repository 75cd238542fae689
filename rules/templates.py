"""
Placeholder Registry - Context-bound values for response templates
==================================================================

This module resolves ``{name}`` placeholders in response templates.
Each placeholder is bound to a function that reads the match context,
so values always reflect the state at resolution time.

Built-in placeholder families:
- Player: {player_name}, {player_health}, {player_location}, ...
- World: {world_weather}, {world_seed}, ...
- Nearby entities: {nearby_entities_count}, {nearby_zombie_detail}, ...
- Time: {time_utc}, {time_tokyo}, {time_gmt_plus_07_00}, ...
"""

import re
from collections import Counter
from datetime import timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from core.exceptions import PlaceholderError
from .context import EMPTY_CONTEXT, MatchContext
from .timezones import NAMED_ZONES, format_time, format_zone_time, needs_offset_sweep, offset_time


PlaceholderFunc = Callable[[MatchContext], Any]

UNKNOWN = "unknown"

_PLACEHOLDER = re.compile(r"\{[^{}]+\}")

ENTITY_TYPES = (
    "allay", "armadillo", "axolotl", "bat", "bee", "blaze", "bogged", "breeze",
    "camel", "cat", "cave_spider", "chicken", "cod", "cow", "creeper", "dolphin",
    "donkey", "drowned", "elder_guardian", "ender_dragon", "endermite", "evoker",
    "fox", "frog", "ghast", "glow_squid", "goat", "guardian", "hoglin", "horse",
    "husk", "illusioner", "iron_golem", "llama", "magma_cube", "mooshroom", "mule",
    "ocelot", "panda", "parrot", "phantom", "pig", "piglin", "piglin_brute",
    "pillager", "polar_bear", "pufferfish", "rabbit", "ravager", "salmon", "sheep",
    "shulker", "silverfish", "skeleton", "skeleton_horse", "slime", "sniffer",
    "snow_golem", "spider", "squid", "stray", "strider", "trader_llama",
    "tropical_fish", "turtle", "vex", "vindicator", "warden", "witch", "wither",
    "wither_skeleton", "wolf", "zoglin", "zombie", "zombie_horse", "zombie_villager",
    "zombified_piglin",
)


def wrap_name(name: str) -> str:
    """Return the delimited form of a placeholder name."""
    if name.startswith("{") and name.endswith("}"):
        return name
    return f"{{{name}}}"


class PlaceholderRegistry:
    """
    Registry of named placeholders bound to value functions.

    Names are case-sensitive and unique. Placeholders left in a
    template that the registry does not know pass through untouched.

    Example:
        registry = PlaceholderRegistry()
        registry.register("x", lambda ctx: "42")
        registry.resolve("You are at {x}", context)  # "You are at 42"
    """

    def __init__(self, placeholders: Optional[Mapping[str, PlaceholderFunc]] = None):
        self._placeholders: Dict[str, PlaceholderFunc] = {}
        if placeholders:
            self.extend(placeholders)

    def register(self, name: str, func: PlaceholderFunc) -> None:
        """
        Bind a placeholder name to a value function.

        Raises:
            PlaceholderError: If the name is empty, already registered,
                or func is not callable
        """
        if not name or not name.strip("{}"):
            raise PlaceholderError("Placeholder name cannot be empty")
        if not callable(func):
            raise PlaceholderError(f"Placeholder {name} must be bound to a callable")

        key = wrap_name(name)
        if key in self._placeholders:
            raise PlaceholderError(f"Placeholder {key} is already registered")
        self._placeholders[key] = func

    def extend(self, placeholders: Mapping[str, PlaceholderFunc]) -> None:
        """Register several placeholders at once."""
        for name, func in placeholders.items():
            self.register(name, func)

    def names(self) -> List[str]:
        """Registered names, delimiters included, in registration order."""
        return list(self._placeholders)

    def __contains__(self, name: str) -> bool:
        return wrap_name(name) in self._placeholders

    def __len__(self) -> int:
        return len(self._placeholders)

    def resolve(self, template: str, context: Optional[MatchContext] = None) -> str:
        """
        Substitute every registered placeholder found in a template.

        The template is scanned once, so text produced by a placeholder
        is never expanded again. Each function runs at most once per
        call, however often its placeholder repeats. Fixed-offset time
        placeholders are resolved in the same pass when the template
        mentions one.

        Args:
            template: Response template
            context: Match context handed to placeholder functions

        Returns:
            Resolved text
        """
        if context is None:
            context = EMPTY_CONTEXT

        sweep = needs_offset_sweep(template)
        values: Dict[str, str] = {}

        def substitute(match: "re.Match") -> str:
            name = match.group(0)
            if name in values:
                return values[name]

            func = self._placeholders.get(name)
            if func is not None:
                value = _text(func(context))
            else:
                value = (offset_time(name) if sweep else None) or name
            values[name] = value
            return value

        return _PLACEHOLDER.sub(substitute, template)


# === Value formatting ===

def _text(value: Any) -> str:
    if value is None:
        return UNKNOWN
    return str(value)


def _attr(key: str) -> PlaceholderFunc:
    return lambda ctx: ctx.get(key)


def _field(obj: Any, key: str, default: Any = None) -> Any:
    """Read a key from a mapping or an attribute from an object."""
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _coords(location: Any) -> Optional[tuple]:
    if location is None:
        return None
    if isinstance(location, Mapping) or hasattr(location, "x"):
        try:
            return tuple(float(_field(location, axis)) for axis in ("x", "y", "z"))
        except (TypeError, ValueError):
            return None
    try:
        x, y, z = location
        return (float(x), float(y), float(z))
    except (TypeError, ValueError):
        return None


def format_location(location: Any) -> str:
    coords = _coords(location)
    if coords is None:
        return UNKNOWN
    return "X: %.1f, Y: %.1f, Z: %.1f" % coords


def format_item(item: Any) -> str:
    """
    Describe an item stack.

    Items are mappings or objects with a ``type`` and optional
    ``amount``, ``name``, ``lore`` and ``custom_model_data``; a bare
    string is read as the type.
    """
    if isinstance(item, str):
        return item

    parts = [f"{_field(item, 'type', UNKNOWN)} x{_field(item, 'amount', 1)}"]
    name = _field(item, "name")
    if name:
        parts.append(f"Name: {name}")
    lore = _field(item, "lore")
    if lore:
        parts.append("Lore: " + " | ".join(str(line) for line in lore))
    model = _field(item, "custom_model_data")
    if model is not None:
        parts.append(f"Model: {model}")
    return ", ".join(parts)


def _item_in_hand(ctx: MatchContext) -> str:
    item = ctx.get("player.item_in_hand")
    return format_item(item) if item else "No item in hand."


def _inventory(ctx: MatchContext) -> str:
    items = [item for item in (ctx.get("player.inventory") or []) if item]
    if not items:
        return "Inventory is empty."
    return "\n".join(format_item(item) for item in items)


def _uuid_short(ctx: MatchContext) -> Any:
    uuid = ctx.get("player.uuid")
    return str(uuid).split("-")[0] if uuid is not None else None


def _location(ctx: MatchContext) -> str:
    return format_location(ctx.get("player.location"))


def _weather(ctx: MatchContext) -> str:
    storm = ctx.get("world.storm")
    if storm is None:
        return UNKNOWN
    return "Raining" if storm else "Clear"


def _entity_type(entity: Any) -> str:
    if isinstance(entity, str):
        return entity.lower()
    return str(_field(entity, "type", UNKNOWN)).lower()


def _nearby(ctx: MatchContext, entity_type: Optional[str] = None) -> List[Any]:
    entities = ctx.get("nearby.entities") or []
    if entity_type is None:
        return list(entities)
    return [e for e in entities if _entity_type(e) == entity_type]


def _nearby_summary(ctx: MatchContext) -> str:
    counts = Counter(_entity_type(e) for e in _nearby(ctx))
    if not counts:
        return "No entities nearby."
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return ", ".join(f"{name} x{count}" for name, count in ordered)


def _nearby_detail(entity_type: str) -> PlaceholderFunc:
    def detail(ctx: MatchContext) -> str:
        entities = _nearby(ctx, entity_type)
        if not entities:
            return "None nearby."
        lines = []
        for entity in entities:
            label = entity_type
            location = None
            if not isinstance(entity, str):
                label = _field(entity, "name") or entity_type
                location = _field(entity, "location")
            if location is not None:
                lines.append(f"- {label} at {format_location(location)}")
            else:
                lines.append(f"- {label}")
        return "\n".join(lines)
    return detail


def _nearby_count(entity_type: str) -> PlaceholderFunc:
    return lambda ctx: str(len(_nearby(ctx, entity_type)))


def _zone(zone_name: str) -> PlaceholderFunc:
    return lambda ctx: format_zone_time(zone_name)


# === Built-in registry ===

def builtin_placeholders(entity_types: Iterable[str] = ENTITY_TYPES) -> Dict[str, PlaceholderFunc]:
    """Return the built-in placeholder table."""
    placeholders: Dict[str, PlaceholderFunc] = {
        "nearby_entities_count": lambda ctx: str(len(_nearby(ctx))),
        "nearby_entities_detail": _nearby_summary,
    }
    for entity_type in entity_types:
        placeholders[f"nearby_{entity_type}_count"] = _nearby_count(entity_type)
        placeholders[f"nearby_{entity_type}_detail"] = _nearby_detail(entity_type)

    placeholders.update({
        "item_in_hand": _item_in_hand,
        "player_displayname": _attr("player.display_name"),
        "player_exp_level": _attr("player.level"),
        "player_food_level": _attr("player.food_level"),
        "player_gamemode": _attr("player.gamemode"),
        "player_health": _attr("player.health"),
        "player_inventory": _inventory,
        "player_ip": _attr("player.ip"),
        "player_location": _location,
        "player_max_health": _attr("player.max_health"),
        "player_name": _attr("player.name"),
        "player_uuid": _attr("player.uuid"),
        "player_uuid_short": _uuid_short,
        "player_world": _attr("world.name"),

        "world_difficulty": _attr("world.difficulty"),
        "world_entity_count": _attr("world.entity_count"),
        "world_loaded_chunks": _attr("world.loaded_chunks"),
        "world_seed": _attr("world.seed"),
        "world_time": _attr("world.time"),
        "world_weather": _weather,

        "time_gmt": lambda ctx: format_time(timezone.utc),
        "time_server": lambda ctx: format_time(),
        "time_utc": lambda ctx: format_time(timezone.utc),
    })

    for name, zone_name in NAMED_ZONES.items():
        placeholders[name] = _zone(zone_name)

    return placeholders


def default_registry(
    extra: Optional[Mapping[str, PlaceholderFunc]] = None
) -> PlaceholderRegistry:
    """
    Create a registry with every built-in placeholder.

    Args:
        extra: Additional placeholders contributed by the host

    Raises:
        PlaceholderError: If an extra placeholder shadows a built-in
    """
    registry = PlaceholderRegistry(builtin_placeholders())
    if extra:
        registry.extend(extra)
    return registry
