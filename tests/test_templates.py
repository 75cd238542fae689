"""
Test Placeholder Module
=======================

Unit tests for placeholder registration, resolution and time zones.
"""

import re
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.exceptions import PlaceholderError
from rules.context import AttributeContext
from rules.engine import RulesEngine
from rules.templates import PlaceholderRegistry, default_registry, format_item
from rules.timezones import (
    format_zone_time,
    needs_offset_sweep,
    replace_offset_times,
    zone_label,
)

TIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")
NOON = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def context():
    return AttributeContext({
        "player": {
            "name": "Steve",
            "display_name": "Sir Steve",
            "uuid": "1b2c3d4e-0000-1111-2222-333344445555",
            "health": 18.5,
            "location": (10, 64, -3.25),
            "item_in_hand": {"type": "DIAMOND_SWORD", "amount": 1, "name": "Edge"},
            "inventory": [{"type": "DIRT", "amount": 32}, "TORCH"],
        },
        "world": {"name": "overworld", "storm": True, "seed": 12345},
        "nearby": {
            "entities": [
                {"type": "zombie", "location": {"x": 1, "y": 2, "z": 3}},
                {"type": "zombie"},
                "cow",
            ],
        },
    })


class TestPlaceholderRegistry:
    """Tests for PlaceholderRegistry."""

    def test_registered_and_unknown(self):
        """Registered names resolve; unknown names pass through."""
        registry = PlaceholderRegistry({"x": lambda ctx: "42"})

        assert registry.resolve("You are at {x}", AttributeContext()) == "You are at 42"
        assert registry.resolve("You are at {x} {y}", None) == "You are at 42 {y}"

    def test_names_are_wrapped(self):
        """Names given with or without braces are the same placeholder."""
        registry = PlaceholderRegistry()
        registry.register("x", lambda ctx: "1")

        assert "{x}" in registry
        assert "x" in registry
        with pytest.raises(PlaceholderError):
            registry.register("{x}", lambda ctx: "2")

    def test_names_are_case_sensitive(self):
        """{X} and {x} are different placeholders."""
        registry = PlaceholderRegistry({"x": lambda ctx: "lower"})
        assert registry.resolve("{x} {X}") == "lower {X}"

    def test_invalid_registration(self):
        """Empty names and non-callables are rejected."""
        registry = PlaceholderRegistry()
        with pytest.raises(PlaceholderError):
            registry.register("{}", lambda ctx: "")
        with pytest.raises(PlaceholderError):
            registry.register("x", "not callable")

    def test_function_called_once_per_name(self):
        """Repeated placeholders share one invocation."""
        calls = []

        def counter(ctx):
            calls.append(1)
            return str(len(calls))

        registry = PlaceholderRegistry({"n": counter})
        assert registry.resolve("{n} {n} {n}") == "1 1 1"
        assert len(calls) == 1

    def test_values_reflect_current_context(self):
        """Nothing is cached between resolutions."""
        registry = PlaceholderRegistry({"hp": lambda ctx: ctx.get("hp")})
        state = {"hp": 20}

        assert registry.resolve("{hp}", state) == "20"
        state["hp"] = 5
        assert registry.resolve("{hp}", state) == "5"

    def test_substituted_values_are_not_expanded(self):
        """Text produced by a placeholder is inserted literally."""
        registry = PlaceholderRegistry({
            "player_name": lambda ctx: "{secret}",
            "secret": lambda ctx: "TOKEN",
            "nick": lambda ctx: "{time_utc_plus_01_00}",
        })
        assert registry.resolve("Hi {player_name}") == "Hi {secret}"
        assert registry.resolve("{nick} at {time_gmt_plus_07_00}").startswith(
            "{time_utc_plus_01_00} at "
        )

    def test_extra_cannot_shadow_builtin(self):
        """Addon placeholders must use fresh names."""
        with pytest.raises(PlaceholderError):
            default_registry({"player_name": lambda ctx: "x"})

        registry = default_registry({"server_motd": lambda ctx: "Welcome"})
        assert registry.resolve("{server_motd}") == "Welcome"


class TestBuiltinPlaceholders:
    """Tests for the built-in placeholder table."""

    def test_player(self, context):
        """Player attributes resolve."""
        registry = default_registry()
        text = registry.resolve(
            "{player_name}/{player_displayname}/{player_uuid_short}/{player_health}",
            context,
        )
        assert text == "Steve/Sir Steve/1b2c3d4e/18.5"

    def test_location_and_world(self, context):
        """Locations are formatted and the world name is reported."""
        registry = default_registry()
        assert registry.resolve("{player_location} in {player_world}", context) == (
            "X: 10.0, Y: 64.0, Z: -3.2 in overworld"
        )

    def test_weather(self, context):
        """Storm flag maps to a weather word."""
        assert default_registry().resolve("{world_weather}", context) == "Raining"
        assert default_registry().resolve("{world_weather}", AttributeContext()) == "unknown"

    def test_missing_attribute(self):
        """Missing attributes render as unknown."""
        assert default_registry().resolve("{player_name}", AttributeContext()) == "unknown"

    def test_items(self, context):
        """Held item and inventory are described."""
        registry = default_registry()
        assert registry.resolve("{item_in_hand}", context) == "DIAMOND_SWORD x1, Name: Edge"
        assert registry.resolve("{player_inventory}", context) == "DIRT x32\nTORCH"
        assert registry.resolve("{item_in_hand}", AttributeContext()) == "No item in hand."
        assert registry.resolve("{player_inventory}", AttributeContext()) == "Inventory is empty."

    def test_object_valued_items_and_entities(self):
        """Items and entities may be plain objects instead of mappings."""
        sword = SimpleNamespace(type="DIAMOND_SWORD", amount=1, name=None)
        context = AttributeContext(
            player=SimpleNamespace(item_in_hand=sword, inventory=[sword, "TORCH"]),
            nearby=SimpleNamespace(entities=[
                SimpleNamespace(type="ZOMBIE", location=SimpleNamespace(x=1, y=2, z=3)),
            ]),
        )
        registry = default_registry()

        assert registry.resolve("{item_in_hand}", context) == "DIAMOND_SWORD x1"
        assert registry.resolve("{player_inventory}", context) == "DIAMOND_SWORD x1\nTORCH"
        assert registry.resolve("{nearby_zombie_detail}", context) == (
            "- zombie at X: 1.0, Y: 2.0, Z: 3.0"
        )

    def test_object_item_through_engine(self):
        """Matching with object-valued context attributes does not fail."""
        engine = RulesEngine.from_records([{"match": ["hand"], "response": "{item_in_hand}"}])
        context = AttributeContext(
            player=SimpleNamespace(item_in_hand=SimpleNamespace(type="DIAMOND_SWORD", amount=1))
        )
        assert engine.match(context, "hand") == ["DIAMOND_SWORD x1"]

    def test_item_lore(self):
        """Lore and model data are included when present."""
        item = {"type": "BOOK", "lore": ["old", "dusty"], "custom_model_data": 7}
        assert format_item(item) == "BOOK x1, Lore: old | dusty, Model: 7"

    def test_nearby_entities(self, context):
        """Nearby entity counts and details."""
        registry = default_registry()
        assert registry.resolve("{nearby_entities_count}", context) == "3"
        assert registry.resolve("{nearby_entities_detail}", context) == "zombie x2, cow x1"
        assert registry.resolve("{nearby_zombie_count}", context) == "2"
        assert registry.resolve("{nearby_creeper_count}", context) == "0"
        assert registry.resolve("{nearby_zombie_detail}", context) == (
            "- zombie at X: 1.0, Y: 2.0, Z: 3.0\n- zombie"
        )
        assert registry.resolve("{nearby_creeper_detail}", context) == "None nearby."

    def test_static_times(self):
        """Time placeholders render as timestamps."""
        registry = default_registry()
        for name in ("{time_utc}", "{time_gmt}", "{time_server}", "{time_tokyo}"):
            assert TIME_PATTERN.match(registry.resolve(name))


class TestTimeZones:
    """Tests for time zone helpers."""

    def test_zone_label(self):
        """Offset placeholders carry sign, hours and minutes."""
        assert zone_label("gmt", 7, 0) == "{time_gmt_plus_07_00}"
        assert zone_label("utc", -3, 30) == "{time_utc_minus_03_30}"
        assert zone_label("utc", 0, 0) == "{time_utc_plus_00_00}"

    def test_sweep_guard(self):
        """Only offset-style placeholders trigger the sweep."""
        assert needs_offset_sweep("at {time_gmt_plus_07_00}")
        assert not needs_offset_sweep("at {time_utc}")

    def test_offsets(self):
        """Whole, half and quarter hour offsets are applied."""
        text = "{time_utc_plus_07_00}|{time_gmt_minus_03_30}|{time_utc_plus_05_45}"
        assert replace_offset_times(text, now=NOON) == (
            "2024-01-01 19:00:00|2024-01-01 08:30:00|2024-01-01 17:45:00"
        )

    def test_repeated_and_unsupported_offsets(self):
        """Repeats all resolve; offsets outside the range stay."""
        text = "{time_gmt_plus_14_00} {time_gmt_plus_14_00} {time_utc_plus_15_00}"
        assert replace_offset_times(text, now=NOON) == (
            "2024-01-02 02:00:00 2024-01-02 02:00:00 {time_utc_plus_15_00}"
        )

    def test_named_zone(self):
        """Named zones use the IANA database."""
        assert format_zone_time("Asia/Tokyo", now=NOON) == "2024-01-01 21:00:00"
        assert format_zone_time("Not/AZone", now=NOON) == "unknown"

    def test_resolver_sweeps_offsets(self):
        """The registry resolves offset placeholders without registering them."""
        resolved = PlaceholderRegistry().resolve("GMT+7: {time_gmt_plus_07_00}")
        assert TIME_PATTERN.match(resolved.split(": ", 1)[1])


class TestAttributeContext:
    """Tests for dotted attribute lookup."""

    def test_nested_mapping(self):
        """Dotted keys walk nested mappings."""
        context = AttributeContext({"player": {"name": "Alex"}})
        assert context.get("player.name") == "Alex"
        assert context.get("player.level", 0) == 0

    def test_object_attributes(self):
        """Segments fall back to object attributes."""
        class Player:
            name = "Alex"

        assert AttributeContext(player=Player()).get("player.name") == "Alex"

    def test_flat_dotted_key(self):
        """A literal dotted key wins over traversal."""
        assert AttributeContext({"player.name": "Flat"}).get("player.name") == "Flat"


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
