import pytest

from stores.filters import FiltersStore


class TestFiltersStore:
    def test_initial_state_is_clean(self):
        store = FiltersStore()
        assert not store.is_dirty
        assert store.active_filters_count == 0
        assert store.pagination.limit == 20
        assert store.pagination.offset == 0

    def test_selection_order_does_not_matter(self):
        store = FiltersStore()
        store.set_types(["fire", "water"])
        store.mark_applied()

        store.set_types(["Water", "fire"])

        assert not store.is_dirty

    def test_query_case_and_spaces_do_not_matter(self):
        store = FiltersStore()
        store.set_search_query("pika")
        store.mark_applied()

        store.set_search_query("  PIKA ")
        assert not store.is_dirty

        store.set_search_query("pikachu")
        assert store.is_dirty

    def test_criteria_changes_reset_offset(self):
        store = FiltersStore()
        store.set_pagination(offset=40)
        assert store.pagination.offset == 40

        store.toggle_type("grass")
        assert store.pagination.offset == 0
        assert store.pagination.limit == 20

    def test_pagination_keeps_omitted_values(self):
        store = FiltersStore()
        store.set_pagination(limit=50)
        store.set_pagination(offset=100)
        assert (store.pagination.limit, store.pagination.offset) == (50, 100)

        store.reset_offset()
        assert store.pagination.offset == 0

    def test_toggle_type(self):
        store = FiltersStore()
        store.toggle_type("Fire")
        store.toggle_type("water")
        store.toggle_type("fire")
        assert store.selected_types == ["water"]

    def test_active_filters_count(self):
        store = FiltersStore()
        store.set_search_query("char")
        store.set_types(["fire", "flying"])
        store.set_generations(["generation-i"])
        store.set_habitats(["mountain"])
        assert store.active_filters_count == 5

        store.set_search_query("   ")
        assert store.active_filters_count == 4

    def test_sort(self):
        store = FiltersStore()
        store.set_sort("name", "desc")
        assert store.query_params["sort_field"] == "name"
        assert store.query_params["sort_direction"] == "desc"
        assert store.is_dirty

        with pytest.raises(ValueError):
            store.set_sort("weight")
        with pytest.raises(ValueError):
            store.set_sort("id", "sideways")

    def test_reset_filters_returns_to_defaults(self):
        store = FiltersStore()
        store.set_types(["ghost"])
        store.set_pagination(limit=50, offset=50)

        store.reset_filters()

        assert store.selected_types == []
        assert store.pagination.limit == 20
        assert not store.is_dirty

    def test_query_params(self):
        store = FiltersStore()
        store.set_habitats(["Cave"])
        assert store.query_params == {
            "search": None,
            "types": [],
            "generations": [],
            "habitats": ["cave"],
            "sort_field": "id",
            "sort_direction": "asc",
            "limit": 20,
            "offset": 0,
        }

    def test_notifications(self):
        store = FiltersStore()
        seen = []
        unsubscribe = store.subscribe(lambda name, key: seen.append((name, key)))

        store.set_search_query("eevee")
        store.mark_applied()
        unsubscribe()
        store.reset_filters()

        assert seen == [("filters", "search_query"), ("filters", "applied")]

    def test_broken_listener_does_not_break_store(self):
        store = FiltersStore()

        def broken(name, key):
            raise RuntimeError("listener bug")

        store.subscribe(broken)
        store.set_search_query("mew")

        assert store.search_query == "mew"
