"""Application tests for order history and lookups."""

import pytest
from ordering.order.cancellation import CancelOrder
from shared.errors import Forbidden, NotFound, ValidationFailed


@pytest.fixture()
def farmer(make_producer):
    return make_producer()


@pytest.fixture()
def buyer(make_consumer):
    return make_consumer()


@pytest.fixture()
def history(place_order, buyer, farmer, make_product):
    product = make_product(farmer, available_quantity=100)
    return [place_order(buyer, (product, 1)).orders[0] for _ in range(5)]


class TestListOrders:
    def test_buyer_sees_newest_first(self, services, history, buyer, principal_for):
        page = services.order_queries.list_orders(principal_for(buyer))
        assert [o.id for o in page.orders] == [o.id for o in reversed(history)]
        assert page.total_count == 5

    def test_pagination(self, services, history, buyer, principal_for):
        first = services.order_queries.list_orders(principal_for(buyer), page=1, page_size=2)
        last = services.order_queries.list_orders(principal_for(buyer), page=3, page_size=2)

        assert len(first.orders) == 2
        assert first.total_pages == 3
        assert first.has_next and not first.has_prev
        assert len(last.orders) == 1
        assert last.has_prev and not last.has_next

    def test_producer_defaults_to_seller_side(self, services, history, farmer, principal_for):
        page = services.order_queries.list_orders(principal_for(farmer))
        assert page.total_count == 5

    def test_explicit_side(self, services, history, farmer, principal_for):
        page = services.order_queries.list_orders(principal_for(farmer), role="buyer")
        assert page.total_count == 0

    def test_filter_by_status(self, services, history, buyer, principal_for):
        services.order_cancellation.cancel_order(principal_for(buyer), CancelOrder(order_id=history[0].id))
        page = services.order_queries.list_orders(principal_for(buyer), status="cancelled")
        assert [o.id for o in page.orders] == [history[0].id]

    def test_other_buyers_see_nothing(self, services, history, make_consumer, principal_for):
        assert services.order_queries.list_orders(principal_for(make_consumer())).total_count == 0

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"page": 0}, "page"),
            ({"page_size": 101}, "page_size"),
            ({"role": "admin"}, "role"),
            ({"status": "lost"}, "status"),
        ],
    )
    def test_invalid_arguments(self, services, buyer, principal_for, kwargs, field):
        with pytest.raises(ValidationFailed) as exc:
            services.order_queries.list_orders(principal_for(buyer), **kwargs)
        assert field in exc.value.errors


class TestGetOrder:
    def test_parties_can_read(self, services, history, buyer, farmer, principal_for):
        order_id = history[0].id
        assert services.order_queries.get_order(principal_for(buyer), order_id).id == order_id
        assert services.order_queries.get_order(principal_for(farmer), order_id).id == order_id

    def test_outsiders_cannot(self, services, history, make_consumer, principal_for):
        with pytest.raises(Forbidden):
            services.order_queries.get_order(principal_for(make_consumer()), history[0].id)

    def test_unknown(self, services, buyer, principal_for):
        with pytest.raises(NotFound):
            services.order_queries.get_order(principal_for(buyer), "missing")

    def test_references(self, services, history, buyer, farmer):
        accounts, products = services.order_queries.references_for(history[:1])
        assert set(accounts) == {buyer.id, farmer.id}
        assert set(products) == {history[0].items[0].product_id}
