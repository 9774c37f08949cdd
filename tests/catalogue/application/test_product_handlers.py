"""Application tests for product creation, management and listing."""

import pytest
from catalogue.product.creation import CreateProduct
from catalogue.product.management import RemoveProduct, UpdateProduct
from shared.errors import Forbidden, NotFound


class TestCreateProduct:
    def test_location_defaults_to_producer_city(self, make_producer, make_product):
        product = make_product(make_producer())
        assert product.location == "Nashik, Maharashtra"
        assert product.currency == "INR"
        assert product.version == 1

    def test_explicit_location_kept(self, make_producer, make_product):
        product = make_product(make_producer(), location="Lasalgaon")
        assert product.location == "Lasalgaon"

    def test_consumers_cannot_create(self, services, make_consumer, principal_for):
        consumer = make_consumer()
        command = CreateProduct(
            name="Milk",
            description="Fresh",
            category="Dairy",
            price=60,
            unit="piece",
            available_quantity=5,
        )
        with pytest.raises(Forbidden):
            services.product_creation.create_product(principal_for(consumer), command)


class TestManageProduct:
    def test_owner_updates(self, services, make_producer, make_product, principal_for):
        producer = make_producer()
        product = make_product(producer)
        updated = services.product_management.update_product(
            principal_for(producer),
            UpdateProduct(product_id=product.id, price=45.0, unit="dozen", available_quantity=30),
        )
        assert updated.price_amount == 45.0
        assert updated.price_unit == "dozen"
        assert updated.available_quantity == 30
        assert updated.version == 2

    def test_non_owner_cannot_update(self, services, make_producer, make_product, principal_for):
        product = make_product(make_producer())
        intruder = make_producer()
        with pytest.raises(Forbidden):
            services.product_management.update_product(
                principal_for(intruder), UpdateProduct(product_id=product.id, price=1.0)
            )

    def test_remove_hides_product(self, services, make_producer, make_product, principal_for):
        producer = make_producer()
        product = make_product(producer)
        services.product_management.remove_product(principal_for(producer), RemoveProduct(product_id=product.id))

        with pytest.raises(NotFound):
            services.product_queries.get_product(product.id)
        assert services.product_queries.list_products() == []

    def test_non_owner_cannot_remove(self, services, make_producer, make_product, principal_for):
        product = make_product(make_producer())
        with pytest.raises(Forbidden):
            services.product_management.remove_product(
                principal_for(make_producer()), RemoveProduct(product_id=product.id)
            )


class TestListing:
    @pytest.fixture()
    def catalogue(self, make_producer, make_product):
        nashik = make_producer()
        pune = make_producer(city="Pune")
        return {
            "tomatoes": make_product(nashik, name="Tomatoes", price=40.0),
            "mangoes": make_product(nashik, name="Alphonso Mangoes", category="Fruits", price=600.0, unit="dozen"),
            "rice": make_product(pune, name="Basmati Rice", category="Grains", price=90.0, description="Aged grain"),
            "nashik": nashik,
            "pune": pune,
        }

    def test_newest_first(self, services, catalogue):
        names = [p.name for p in services.product_queries.list_products()]
        assert names == ["Basmati Rice", "Alphonso Mangoes", "Tomatoes"]

    def test_filter_by_category(self, services, catalogue):
        products = services.product_queries.list_products(category="Fruits")
        assert [p.id for p in products] == [catalogue["mangoes"].id]

    def test_filter_by_price_range(self, services, catalogue):
        products = services.product_queries.list_products(min_price=50, max_price=100)
        assert [p.id for p in products] == [catalogue["rice"].id]

    def test_filter_by_location_is_case_insensitive(self, services, catalogue):
        products = services.product_queries.list_products(location="pune")
        assert [p.id for p in products] == [catalogue["rice"].id]

    def test_search_name_and_description(self, services, catalogue):
        assert [p.id for p in services.product_queries.list_products(search="mango")] == [catalogue["mangoes"].id]
        assert [p.id for p in services.product_queries.list_products(search="AGED")] == [catalogue["rice"].id]

    def test_filter_by_producer(self, services, catalogue):
        products = services.product_queries.list_products(producer_id=catalogue["pune"].id)
        assert [p.id for p in products] == [catalogue["rice"].id]

    def test_list_by_producer(self, services, catalogue):
        products = services.product_queries.list_by_producer(catalogue["nashik"].id)
        assert {p.id for p in products} == {catalogue["tomatoes"].id, catalogue["mangoes"].id}

    def test_list_by_unknown_producer(self, services, catalogue):
        with pytest.raises(NotFound):
            services.product_queries.list_by_producer("missing")

    def test_unavailable_products_hidden(self, services, catalogue, principal_for):
        services.product_management.update_product(
            principal_for(catalogue["nashik"]),
            UpdateProduct(product_id=catalogue["tomatoes"].id, is_available=False),
        )
        ids = [p.id for p in services.product_queries.list_products()]
        assert catalogue["tomatoes"].id not in ids
