"""Unit tests for ViewCache."""

from discuss.domain.service import ViewCache
from discuss.domain.value import Scope, SortOrder, ViewKey
from tests.conftest import comment_payload, make_page


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def key(scope: Scope, page: int = 1, sort: SortOrder = SortOrder.DESC) -> ViewKey:
    return ViewKey(scope=scope, sort=sort, page=page, page_size=10)


class TestViewCache:
    """Tests for freshness and invalidation."""

    def test_page_is_fresh_until_stale_time(self):
        # Arrange
        clock = FakeClock()
        cache = ViewCache(stale_after_seconds=300, clock=clock)
        k = key(Scope.series("m1"))
        cache.put(k, make_page([comment_payload(1)]))

        # Act / Assert
        assert cache.is_fresh(k)
        clock.now = 301
        assert not cache.is_fresh(k)
        assert cache.is_stale(k)

    def test_mark_stale_touches_only_that_scope(self):
        """Invalidation is exact: sibling scopes keep their views."""
        # Arrange
        cache = ViewCache()
        installment = Scope.installment("c1", "m1")
        series = Scope.series("m1")
        other = Scope.installment("c2", "m1")
        for scope in (installment, series, other):
            cache.put(key(scope), make_page([]))
        cache.put(key(installment, page=2), make_page([]))

        # Act
        marked = cache.mark_stale(installment)

        # Assert
        assert set(marked) == {key(installment), key(installment, page=2)}
        assert cache.is_stale(key(installment))
        assert cache.is_fresh(key(series))
        assert cache.is_fresh(key(other))

    def test_page_from_before_invalidation_is_stored_stale(self):
        """A response that raced a write can never pass as fresh."""
        # Arrange
        cache = ViewCache()
        scope = Scope.aggregate("m1")
        generation = cache.generation(scope)

        # Act
        cache.mark_stale(scope)
        cache.put(key(scope), make_page([]), generation=generation)

        # Assert
        assert cache.is_stale(key(scope))

    def test_update_keeps_freshness(self):
        cache = ViewCache()
        k = key(Scope.series("m1"))
        cache.put(k, make_page([]))

        cache.update(k, make_page([comment_payload(1)]))

        assert cache.is_fresh(k)
        assert len(cache.get(k).page.items) == 1

    def test_drop_scope_and_clear(self):
        cache = ViewCache()
        a, b = Scope.series("m1"), Scope.series("m2")
        cache.put(key(a), make_page([]))
        cache.put(key(b), make_page([]))

        assert cache.drop_scope(a) == 1
        assert key(a) not in cache
        cache.clear()
        assert len(cache) == 0
