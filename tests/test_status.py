from utils.status import DEFAULT_STATUS, FetchStatus, StatusTracker


class TestStatusTracker:
    def test_unknown_key_reads_default(self):
        tracker = StatusTracker()
        assert tracker.get("pokemon:999") == DEFAULT_STATUS
        assert tracker.get("pokemon:999") == FetchStatus(
            is_loading=False, has_error=False, error_message=None, updated_at=None
        )
        assert "pokemon:999" not in tracker

    def test_lifecycle(self):
        tracker = StatusTracker(clock=lambda: 1234.5)

        loading = tracker.mark_loading("pokemon:1")
        assert loading.is_loading and not loading.has_error
        assert loading.updated_at is None

        done = tracker.mark_success("pokemon:1")
        assert done == FetchStatus(updated_at=1234.5)

        tracker.mark_loading("pokemon:1")
        failed = tracker.mark_error("pokemon:1", "boom")
        assert failed.has_error and not failed.is_loading
        assert failed.error_message == "boom"
        assert failed.updated_at == 1234.5

    def test_success_clears_previous_error(self):
        tracker = StatusTracker()
        tracker.mark_error("move:1", "nope")
        tracker.mark_loading("move:1")
        assert tracker.get("move:1").error_message is None
        tracker.mark_success("move:1")
        assert not tracker.get("move:1").has_error

    def test_iteration(self):
        tracker = StatusTracker()
        tracker.mark_loading("a:1")
        tracker.mark_success("b:2")
        assert sorted(tracker) == ["a:1", "b:2"]
        assert len(tracker) == 2
