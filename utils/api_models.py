"""
Type definitions for catalog API responses to ensure strict typing and reduce runtime errors.

Records are stored exactly as the catalog returns them, so these are
`TypedDict` shapes over the parsed JSON rather than wrapper classes.
Only the fields the data layer or its consumers read are listed.
"""

from typing import Any, Dict, List, Optional, TypedDict


class NamedAPIResource(TypedDict):
    """A `{name, url}` reference to another catalog resource."""

    name: str
    url: str


class PaginatedResult(TypedDict):
    """
    Represents one page of a catalog listing endpoint.

    Attributes:
        count: Total number of resources available.
        next: Absolute URL of the following page, or None on the last page.
        previous: Absolute URL of the preceding page, or None on the first page.
        results: References on this page.
    """

    count: int
    next: Optional[str]
    previous: Optional[str]
    results: List[NamedAPIResource]


class PokemonTypeSlot(TypedDict):
    slot: int
    type: NamedAPIResource


class PokemonStat(TypedDict):
    base_stat: int
    effort: int
    stat: NamedAPIResource


class PokemonAbility(TypedDict):
    is_hidden: bool
    slot: int
    ability: NamedAPIResource


class Pokemon(TypedDict, total=False):
    """
    Represents a Pokemon record from `/pokemon/{id or name}`.

    `location_area_encounters` holds the link to the encounter list for
    this Pokemon and can be handed to `ensure_pokemon_encounters`.
    """

    id: int
    name: str
    base_experience: Optional[int]
    height: int
    weight: int
    is_default: bool
    order: int
    abilities: List[PokemonAbility]
    forms: List[NamedAPIResource]
    location_area_encounters: str
    moves: List[Dict[str, Any]]
    species: NamedAPIResource
    sprites: Dict[str, Any]
    stats: List[PokemonStat]
    types: List[PokemonTypeSlot]


class PokemonSpecies(TypedDict, total=False):
    """Represents a species record from `/pokemon-species/{id or name}`."""

    id: int
    name: str
    order: int
    capture_rate: int
    base_happiness: Optional[int]
    is_baby: bool
    is_legendary: bool
    is_mythical: bool
    evolves_from_species: Optional[NamedAPIResource]
    evolution_chain: Dict[str, str]
    habitat: Optional[NamedAPIResource]
    generation: NamedAPIResource
    flavor_text_entries: List[Dict[str, Any]]
    genera: List[Dict[str, Any]]
    varieties: List[Dict[str, Any]]


class TypeDamageRelations(TypedDict):
    no_damage_to: List[NamedAPIResource]
    half_damage_to: List[NamedAPIResource]
    double_damage_to: List[NamedAPIResource]
    no_damage_from: List[NamedAPIResource]
    half_damage_from: List[NamedAPIResource]
    double_damage_from: List[NamedAPIResource]


class PokemonType(TypedDict, total=False):
    """Represents an elemental type record from `/type/{id or name}`."""

    id: int
    name: str
    damage_relations: TypeDamageRelations
    generation: NamedAPIResource
    move_damage_class: Optional[NamedAPIResource]
    pokemon: List[Dict[str, Any]]
    moves: List[NamedAPIResource]


class EvolutionChainLink(TypedDict):
    is_baby: bool
    species: NamedAPIResource
    evolution_details: List[Dict[str, Any]]
    evolves_to: List["EvolutionChainLink"]


class EvolutionChain(TypedDict):
    """Represents an evolution chain from `/evolution-chain/{id}` (id only, no name)."""

    id: int
    baby_trigger_item: Optional[NamedAPIResource]
    chain: EvolutionChainLink


class PokemonEncounterArea(TypedDict):
    """One entry of the list returned by `/pokemon/{id}/encounters`."""

    location_area: NamedAPIResource
    version_details: List[Dict[str, Any]]


class Ability(TypedDict, total=False):
    id: int
    name: str
    generation: NamedAPIResource
    effect_entries: List[Dict[str, Any]]
    flavor_text_entries: List[Dict[str, Any]]
    pokemon: List[Dict[str, Any]]


class Move(TypedDict, total=False):
    id: int
    name: str
    accuracy: Optional[int]
    power: Optional[int]
    pp: Optional[int]
    priority: int
    type: NamedAPIResource
    damage_class: NamedAPIResource
    effect_entries: List[Dict[str, Any]]


class Item(TypedDict, total=False):
    id: int
    name: str
    cost: int
    sprites: Dict[str, Optional[str]]
    effect_entries: List[Dict[str, Any]]


class Location(TypedDict, total=False):
    id: int
    name: str
    region: Optional[NamedAPIResource]
    areas: List[NamedAPIResource]
    names: List[Dict[str, Any]]


class LocationArea(TypedDict, total=False):
    id: int
    name: str
    game_index: int
    location: NamedAPIResource
    pokemon_encounters: List[Dict[str, Any]]


class CacheStats(TypedDict):
    """
    Represents in-memory cache statistics for one entity or list cache.

    Attributes:
        size: Number of distinct cache keys held (a record fetched by id is
            also held under its name, so one record can count twice).
        hits: Number of lookups answered without a network call.
        misses: Number of lookups that went to the network.
        hit_rate: Percentage string (e.g., '85.5%').
    """

    size: int
    hits: int
    misses: int
    hit_rate: str


class InflightStats(TypedDict):
    """
    Represents request runner statistics.

    Attributes:
        pending_requests: Number of fetches currently in flight.
        coalescing: Whether concurrent fetches for one key share a request.
    """

    pending_requests: int
    coalescing: bool
