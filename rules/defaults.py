"""
Default Rules - Starter corpus written into an empty rule tree
==============================================================

Covers every built-in placeholder family so a fresh install answers
questions about the player, the world, nearby entities and clocks.
Phrases are written without trailing punctuation because tokens are
matched literally.
"""

from typing import Any, Dict, List

from .record import RuleRecord
from .templates import ENTITY_TYPES
from .timezones import NAMED_ZONES


_PLAYER_RULES = [
    (["what is in my hand", "show my held item"], "You are holding: {item_in_hand}"),
    (["what is my display name", "show display name"], "Your display name is {player_displayname}."),
    (["how much xp do i have", "what is my level"], "Your experience level is {player_exp_level}."),
    (["how hungry am i", "what is my food level"], "Your food level is {player_food_level}."),
    (["what mode am i in", "tell me my game mode"], "You are in {player_gamemode} mode."),
    (["how much health do i have", "tell me my health"], "You have {player_health} health."),
    (["what is in my inventory", "list my items"], "Inventory contents:\n{player_inventory}"),
    (["what is my ip address", "tell me my ip"], "Your IP address is {player_ip}."),
    (["where am i", "tell me my location"], "You are at {player_location} in world {player_world}."),
    (["what is my max health", "max hp"], "Your max health is {player_max_health}."),
    (["what is my name", "who am i"], "Your name is {player_name}."),
    (["what is my uuid", "tell me my player id"], "Your UUID is {player_uuid}."),
    (["what is my short uuid", "shorten my uuid"], "Short UUID: {player_uuid_short}"),
    (["what world am i in", "tell me my world"], "You are in world: {player_world}."),
]

_WORLD_RULES = [
    (["how hard is this world", "tell me world difficulty"], "World difficulty: {world_difficulty}"),
    (["how many entities are in the world"], "Entities in world: {world_entity_count}"),
    (["how many chunks are loaded"], "Loaded chunks: {world_loaded_chunks}"),
    (["what is the seed", "world seed"], "World seed: {world_seed}"),
    (["what time is it in game", "tell me minecraft time"], "World time: {world_time}"),
    (["what is the weather like", "current weather"], "World weather: {world_weather}"),
]

_TIME_RULES = [
    (["what is the server time", "current server time"], "Server time is {time_server}."),
    (["what is the utc time", "tell me utc time"], "UTC time is {time_utc}."),
    (["what is gmt time", "time in gmt"], "GMT time is {time_gmt}."),
    (["what is time in gmt+7", "time in utc+7"], "Time in GMT+7 is {time_gmt_plus_07_00}."),
]


# Entity names whose plural is not formed by appending "s"
_IRREGULAR_PLURALS = {
    "bogged": "bogged",
    "cod": "cod",
    "salmon": "salmon",
    "sheep": "sheep",
    "silverfish": "silverfish",
    "pufferfish": "pufferfish",
    "tropical fish": "tropical fish",
    "wolf": "wolves",
}


def _plural(name: str) -> str:
    if name in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[name]
    if name.endswith(("s", "x", "ch", "sh")):
        return name + "es"
    return name + "s"


def _title(placeholder: str) -> str:
    return placeholder[len("time_"):].replace("_", " ").title()


def _entity_rules() -> List[Dict[str, Any]]:
    rules = [
        {
            "match": ["what mobs are near me", "list nearby entities"],
            "response": "Nearby entities: {nearby_entities_count}\n{nearby_entities_detail}",
        },
    ]
    for entity_type in ENTITY_TYPES:
        name = entity_type.replace("_", " ")
        plural = _plural(name)
        rules.append({
            "match": [f"how many {plural} nearby", f"nearby {name} count"],
            "response": f"There are {{nearby_{entity_type}_count}} {plural} near you.",
        })
        rules.append({
            "match": [f"show nearby {name} detail", f"nearby {name} details"],
            "response": f"Nearby {plural}:\n{{nearby_{entity_type}_detail}}",
        })
    return rules


def default_rule_document() -> List[Dict[str, Any]]:
    """Return the starter corpus in document form."""
    document = _entity_rules()

    for phrases, response in _PLAYER_RULES + _WORLD_RULES + _TIME_RULES:
        document.append({"match": list(phrases), "response": response})

    for placeholder in NAMED_ZONES:
        city = _title(placeholder)
        document.append({
            "match": [f"{city.lower()} time", f"what time is it in {city.lower()}"],
            "response": f"{city} time is {{{placeholder}}}.",
        })

    document.append({
        "match": ["tell me all placeholders", "show me the ai variables"],
        "response": (
            "Placeholders: {player_name}, {player_uuid}, {player_displayname}, {player_ip}, "
            "{player_gamemode}, {player_health}, {player_max_health}, {player_food_level}, "
            "{player_exp_level}, {player_location}, {player_world}, {item_in_hand}, "
            "{player_inventory}, {time_server}, {time_utc}, {time_gmt}, "
            + ", ".join(f"{{{name}}}" for name in NAMED_ZONES)
            + ", {time_gmt_plus_07_00}"
        ),
    })
    return document


def default_rules() -> List[RuleRecord]:
    """Return the starter corpus as records."""
    return [RuleRecord.from_dict(entry) for entry in default_rule_document()]
