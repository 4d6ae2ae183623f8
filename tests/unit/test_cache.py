"""Unit tests for the in-memory TTL store."""

from foodieai.cache import InMemoryTTLStore


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestInMemoryTTLStore:
    """Expiry semantics."""

    def test_get_before_expiry(self):
        """Test a fresh value is returned."""
        clock = FakeClock()
        store = InMemoryTTLStore(clock=clock)
        store.set("k", "v", 10)

        clock.now = 9.9

        assert store.get("k") == "v"

    def test_value_expires(self):
        """Test a value is gone once its TTL has elapsed."""
        clock = FakeClock()
        store = InMemoryTTLStore(clock=clock)
        store.set("k", "v", 10)

        clock.now = 10

        assert store.get("k") is None
        assert len(store) == 0

    def test_set_overwrites_and_extends(self):
        """Test setting again replaces value and expiry."""
        clock = FakeClock()
        store = InMemoryTTLStore(clock=clock)
        store.set("k", "old", 5)
        clock.now = 4
        store.set("k", "new", 5)
        clock.now = 8

        assert store.get("k") == "new"

    def test_delete(self):
        """Test delete removes the key and ignores unknown keys."""
        store = InMemoryTTLStore()
        store.set("k", "v", 60)

        store.delete("k")
        store.delete("missing")

        assert store.get("k") is None

    def test_len_purges_expired(self):
        """Test expired entries are not counted."""
        clock = FakeClock()
        store = InMemoryTTLStore(clock=clock)
        store.set("a", 1, 5)
        store.set("b", 2, 50)
        clock.now = 6

        assert len(store) == 1
