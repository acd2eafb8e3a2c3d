"""Tests for the optimistic toggle state machine and the API client."""

import httpx
import pytest

from src.client.api import MiseClient
from src.client.optimistic import OptimisticToggle, Pending, RolledBack, Settled


class TestOptimisticToggle:
    """State transitions of a single toggle."""

    def test_flip_then_resolve(self):
        toggle = OptimisticToggle(False, count=3)

        seq = toggle.flip()
        assert toggle.state == Pending(True, seq)
        assert toggle.value is True
        assert toggle.count == 4

        assert toggle.resolve(seq, True, 7) is True
        assert toggle.state == Settled(True)
        assert toggle.count == 7

    def test_failure_rolls_back(self):
        toggle = OptimisticToggle(True, count=1)
        seq = toggle.flip()
        assert toggle.count == 0

        assert toggle.fail(seq) is True
        assert toggle.state == RolledBack(True)
        assert toggle.value is True
        assert toggle.count == 1

    def test_stale_response_is_discarded(self):
        toggle = OptimisticToggle(False, count=0)
        first = toggle.flip()
        second = toggle.flip()
        assert toggle.value is False

        # The older request answers last; it must not win
        assert toggle.resolve(second, False, 0) is True
        assert toggle.resolve(first, True, 1) is False
        assert toggle.state == Settled(False)
        assert toggle.count == 0

    def test_stale_failure_is_ignored(self):
        toggle = OptimisticToggle(False)
        first = toggle.flip()
        second = toggle.flip()

        assert toggle.fail(first) is False
        assert toggle.state == Pending(False, second)

    def test_failure_restores_value_before_oldest_flip(self):
        toggle = OptimisticToggle(False, count=5)
        toggle.flip()
        toggle.flip()
        latest = toggle.flip()
        assert toggle.value is True

        assert toggle.fail(latest) is True
        assert toggle.value is False
        assert toggle.count == 5

    def test_failure_restores_last_confirmed_value(self):
        toggle = OptimisticToggle(False, count=0)
        first = toggle.flip()
        second = toggle.flip()

        # The first like reached the server; the unlike after it did not
        assert toggle.resolve(first, True, 1) is False
        assert toggle.state == Pending(False, second)

        assert toggle.fail(second) is True
        assert toggle.state == RolledBack(True)
        assert toggle.count == 1

    def test_older_confirmation_does_not_replace_newer_one(self):
        toggle = OptimisticToggle(False, count=0)
        first = toggle.flip()
        second = toggle.flip()
        third = toggle.flip()

        toggle.resolve(second, False, 0)
        toggle.resolve(first, True, 1)
        toggle.fail(third)

        assert toggle.value is False
        assert toggle.count == 0

    def test_late_success_after_rollback_is_shown(self):
        toggle = OptimisticToggle(False, count=0)
        first = toggle.flip()
        second = toggle.flip()
        toggle.fail(second)
        assert toggle.state == RolledBack(False)

        toggle.resolve(first, True, 1)
        assert toggle.state == Settled(True)
        assert toggle.count == 1

    def test_fail_after_settle_is_noop(self):
        toggle = OptimisticToggle(False)
        seq = toggle.flip()
        toggle.resolve(seq, True)
        assert toggle.fail(seq) is False
        assert toggle.state == Settled(True)

    def test_rating_value(self):
        toggle = OptimisticToggle(None, count=2)
        seq = toggle.begin(4)
        assert toggle.value == 4
        assert toggle.count == 2
        toggle.resolve(seq, 4, 3)
        assert toggle.value == 4
        assert toggle.count == 3


class TestMiseClient:
    """The client driven against the app through the test client."""

    def test_like_settles_with_server_state(
        self, client, auth_headers, other_headers, create_recipe
    ):
        recipe = create_recipe(auth_headers)
        api = MiseClient(http=client, token=other_headers["Authorization"].split()[1])
        toggle = OptimisticToggle(False, count=0)

        assert api.like(recipe["id"], toggle) is True
        assert toggle.state == Settled(True)
        assert toggle.count == 1

        assert api.like(recipe["id"], toggle) is True
        assert toggle.state == Settled(False)
        assert toggle.count == 0

    def test_like_failure_rolls_back(self, client, other_headers):
        api = MiseClient(http=client, token=other_headers["Authorization"].split()[1])
        toggle = OptimisticToggle(False, count=0)

        with pytest.raises(httpx.HTTPStatusError):
            api.like(999999, toggle)

        assert toggle.state == RolledBack(False)
        assert toggle.count == 0

    def test_anonymous_like_rolls_back(self, client, auth_headers, create_recipe):
        recipe = create_recipe(auth_headers)
        api = MiseClient(http=client)
        toggle = OptimisticToggle(False, count=0)

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            api.like(recipe["id"], toggle)
        assert exc_info.value.response.status_code == 401
        assert toggle.value is False

    def test_bookmark_and_rating(self, client, auth_headers, other_headers, create_recipe):
        recipe = create_recipe(auth_headers)
        api = MiseClient(http=client)
        api.login(other_headers.email, "testpass123")

        bookmark = OptimisticToggle(False)
        api.bookmark(recipe["id"], bookmark)
        assert bookmark.state == Settled(True)

        rating = OptimisticToggle(None, count=0)
        api.rate_optimistic(recipe["id"], 5, rating)
        assert rating.state == Settled(5)
        assert rating.count == 1

        with pytest.raises(httpx.HTTPStatusError):
            api.rate_optimistic(recipe["id"], 9, rating)
        assert rating.state == RolledBack(5)

    def test_read_endpoints(self, client, auth_headers, other_headers, create_recipe):
        recipe = create_recipe(auth_headers, title="Lemon Tart")
        api = MiseClient(http=client, token=auth_headers["Authorization"].split()[1])
        other = MiseClient(http=client, token=other_headers["Authorization"].split()[1])

        other.toggle_like(recipe["id"])
        other.heartbeat(recipe["id"])

        assert api.get_recipe(recipe["slug"])["likes_count"] == 1
        assert api.trending()[0]["id"] == recipe["id"]
        assert api.search("lemon", max_time=60)[0]["title"] == "Lemon Tart"
        assert api.unread_count() == 1
        assert api.notifications()[0]["type"] == "like"
        assert api.mark_all_read() == 1
        assert api.cooking(recipe["id"])["count"] == 1
