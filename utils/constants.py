"""
This module contains static constant definitions used throughout the data layer,
including:
- Resource kinds used in status keys
- Local storage keys for persisted client state
- Fallback messages recorded when a failure is not a catalog API error
- UI preference choices
"""

# Resource kinds (prefix of every status key)
RESOURCE_POKEMON = "pokemon"
RESOURCE_SPECIES = "species"
RESOURCE_TYPE = "type"
RESOURCE_EVOLUTION_CHAIN = "evolution-chain"
RESOURCE_ENCOUNTERS = "encounters"
RESOURCE_ABILITY = "ability"
RESOURCE_MOVE = "move"
RESOURCE_ITEM = "item"
RESOURCE_LOCATION = "location"
RESOURCE_LOCATION_AREA = "location-area"
RESOURCE_POKEMON_LIST = "pokemon-list"
RESOURCE_MOVE_LIST = "move-list"
RESOURCE_LOCATION_LIST = "location-list"

# Cache key building
PARAMS_KEY_SEPARATOR = "|"
PARAMS_PAIR_SEPARATOR = ":"

# Local Storage Keys
STORAGE_KEY_FAVORITES = "pokedex:favorites"
STORAGE_KEY_TEAM = "pokedex:team"
STORAGE_KEY_UI_PREFERENCES = "pokedex:ui-preferences"

# Error Messages (used when a failure carries no catalog error detail)
ERROR_POKEMON = "Failed to load Pokémon"
ERROR_SPECIES = "Failed to load species"
ERROR_TYPE = "Failed to load type"
ERROR_EVOLUTION_CHAIN = "Failed to load evolution chain"
ERROR_ENCOUNTERS = "Failed to load encounter data"
ERROR_POKEMON_LIST = "Failed to load Pokémon list"
ERROR_ABILITY = "Failed to load ability"
ERROR_MOVE = "Failed to load move"
ERROR_ITEM = "Failed to load item"
ERROR_LOCATION = "Failed to load location"
ERROR_LOCATION_AREA = "Failed to load location area"
ERROR_MOVE_LIST = "Failed to load moves"
ERROR_LOCATION_LIST = "Failed to load locations"
ERROR_UNRESOLVED_POKEMON_ID = "Unable to resolve Pokémon id for encounters"

# UI Preferences
THEME_CHOICES = ("system", "light", "dark")
LAYOUT_DENSITY_CHOICES = ("comfortable", "compact")
TOAST_VARIANTS = ("info", "success", "warning", "error")

# Filters
SORT_FIELDS = ("id", "name", "base_experience")
SORT_DIRECTIONS = ("asc", "desc")

# Sprites
SPRITES_BASE_URL = "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon"

# Health Check
API_STARTUP_VALIDATION_TIMEOUT = 10  # Seconds
