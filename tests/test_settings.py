import pytest

from config import settings


def test_defaults_are_valid():
    settings.validate_settings()


def test_no_unused_environment_flag():
    assert not hasattr(settings, "ENVIRONMENT")


@pytest.mark.parametrize(
    "name, value",
    [
        ("API_REQUEST_TIMEOUT", 0),
        ("MAX_CONCURRENT_API_REQUESTS", 0),
        ("POKEMON_LIST_DEFAULT_LIMIT", 0),
        ("POKEAPI_URL", "ftp://pokeapi.co"),
        ("STORAGE_CONNECTION_STRING", "pokedex.db"),
    ],
)
def test_invalid_values_are_rejected(mocker, name, value):
    mocker.patch(f"config.settings.{name}", value)
    with pytest.raises(ValueError):
        settings.validate_settings()
