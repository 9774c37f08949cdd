"""Application tests for the atomic stock reservation and restoration primitives."""

import pytest
from catalogue.product.management import RemoveProduct
from catalogue.product.repository import ProductRepository
from shared.errors import InsufficientInventory


def _reserve(database, product_id, quantity):
    with database.unit_of_work() as session:
        products = ProductRepository(session)
        products.reserve_stock(products.get(product_id), quantity)


def _restore(database, product_id, quantity):
    with database.unit_of_work() as session:
        ProductRepository(session).restore_stock(product_id, quantity)


class TestReserve:
    def test_decrements_and_bumps_version(self, database, make_producer, make_product, stock_of):
        product = make_product(make_producer(), available_quantity=10)
        _reserve(database, product.id, 3)

        assert stock_of(product.id) == 7
        with database.unit_of_work() as session:
            assert ProductRepository(session).get(product.id).version == 2

    def test_exact_quantity_allowed(self, database, make_producer, make_product, stock_of):
        product = make_product(make_producer(), available_quantity=4)
        _reserve(database, product.id, 4)
        assert stock_of(product.id) == 0

    def test_over_quantity_leaves_stock_untouched(self, database, make_producer, make_product, stock_of):
        product = make_product(make_producer(), available_quantity=2)
        with pytest.raises(InsufficientInventory) as exc:
            _reserve(database, product.id, 3)

        assert exc.value.available == 2
        assert exc.value.requested == 3
        assert stock_of(product.id) == 2


class TestRestore:
    def test_increments(self, database, make_producer, make_product, stock_of):
        product = make_product(make_producer(), available_quantity=5)
        _restore(database, product.id, 3)
        assert stock_of(product.id) == 8

    def test_applies_to_removed_products(
        self, services, database, make_producer, make_product, principal_for, stock_of
    ):
        producer = make_producer()
        product = make_product(producer, available_quantity=5)
        services.product_management.remove_product(principal_for(producer), RemoveProduct(product_id=product.id))

        _restore(database, product.id, 2)
        assert stock_of(product.id) == 7
