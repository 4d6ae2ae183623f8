"""Unit tests for the product catalog."""

from foodieai import products
from foodieai.cache import InMemoryTTLStore
from foodieai.models import Product
from foodieai.schemas import ProductCreateIn


def _data(name="Greek Yogurt", brand="Fage", kcal100=97):
    return ProductCreateIn(name=name, brand=brand, kcal100=kcal100, protein100=9, fat100=5, carbs100=4)


class TestCreateManual:
    """product.createManual"""

    def test_defaults(self, db):
        """Test the GLOBAL / VERIFIED / INTERNAL defaults and normalized name."""
        product = products.create_manual(db, _data(name="  Greek Yogurt "), owner_user_id="u1")

        assert product.scope == "GLOBAL"
        assert product.status == "VERIFIED"
        assert product.source == "INTERNAL"
        assert product.normalized_name == "greek yogurt"
        assert product.owner_user_id == "u1"

    def test_rapid_duplicate_returns_existing(self, db):
        """Test identical content inside the window creates one product."""
        store = InMemoryTTLStore()

        first = products.create_manual(db, _data(), store=store)
        second = products.create_manual(db, _data(name="greek yogurt"), store=store)

        assert first.id == second.id
        assert db.query(Product).count() == 1

    def test_different_content_is_not_deduplicated(self, db):
        """Test other macros create another product."""
        store = InMemoryTTLStore()

        products.create_manual(db, _data(), store=store)
        products.create_manual(db, _data(kcal100=120), store=store)

        assert db.query(Product).count() == 2

    def test_expired_window_creates_again(self, db):
        """Test the de-dup entry expires."""
        now = [0.0]
        store = InMemoryTTLStore(clock=lambda: now[0])

        products.create_manual(db, _data(), store=store)
        now[0] = 10_000
        products.create_manual(db, _data(), store=store)

        assert db.query(Product).count() == 2

    def test_module_store_is_used_by_default(self, db):
        """Test the process-wide store catches duplicates."""
        first = products.create_manual(db, _data())
        second = products.create_manual(db, _data())

        assert first.id == second.id


class TestSearchProducts:
    """product.search"""

    def test_matches_name_or_brand_case_insensitive(self, db):
        """Test the query hits names and brands."""
        store = InMemoryTTLStore()
        products.create_manual(db, _data(name="Greek Yogurt", brand="Fage"), store=store)
        products.create_manual(db, _data(name="Oat Milk", brand="Oatly"), store=store)
        products.create_manual(db, _data(name="Rice", brand=None), store=store)

        assert [p.name for p in products.search_products(db, "yogurt")] == ["Greek Yogurt"]
        assert [p.name for p in products.search_products(db, "OATLY")] == ["Oat Milk"]
        assert len(products.search_products(db, None)) == 3

    def test_limit(self, db):
        """Test the result size is bounded."""
        store = InMemoryTTLStore()
        for index in range(5):
            products.create_manual(db, _data(name=f"Bar {index}"), store=store)

        assert len(products.search_products(db, "bar", limit=2)) == 2
