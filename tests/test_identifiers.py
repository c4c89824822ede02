import pytest

from utils.identifiers import (
    build_status_key,
    cache_key,
    normalize_identifier,
    stable_params_key,
)


class TestNormalizeIdentifier:
    def test_int_is_unchanged(self):
        assert normalize_identifier(25) == 25

    def test_numeric_string_becomes_number(self):
        assert normalize_identifier("25") == 25
        assert normalize_identifier(" 7 ") == 7
        assert normalize_identifier("7.0") == 7
        assert normalize_identifier("1.5") == 1.5

    def test_names_are_trimmed_and_lower_cased(self):
        assert normalize_identifier("Pikachu") == "pikachu"
        assert normalize_identifier("  Mr-Mime ") == "mr-mime"

    def test_numeric_and_name_forms_share_a_key(self):
        assert cache_key(normalize_identifier("25")) == cache_key(normalize_identifier(25))
        assert cache_key(normalize_identifier("EMBER")) == "ember"

    def test_non_finite_numbers_are_names(self):
        assert normalize_identifier("Infinity") == "infinity"
        assert normalize_identifier("nan") == "nan"

    def test_underscored_digits_are_names(self):
        assert normalize_identifier("1_000") == "1_000"
        assert normalize_identifier("2_5.0") == "2_5.0"

    def test_blank_is_rejected(self):
        with pytest.raises(ValueError):
            normalize_identifier("   ")

    @pytest.mark.parametrize("bad", [True, None, 2.5, ["pikachu"]])
    def test_wrong_types_are_rejected(self, bad):
        with pytest.raises(TypeError):
            normalize_identifier(bad)


class TestKeys:
    def test_status_key(self):
        assert build_status_key("pokemon", 1) == "pokemon:1"
        assert build_status_key("move", "Ember") == "move:ember"

    def test_params_key_is_order_independent(self):
        assert stable_params_key({"offset": 0, "limit": 20}) == "limit:20|offset:0"
        assert stable_params_key({"limit": 20, "offset": 0}) == "limit:20|offset:0"
