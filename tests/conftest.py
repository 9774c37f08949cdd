import os
from pathlib import Path

import pytest

# Read when identity.auth.passwords is imported; keep hashing cheap in tests
os.environ.setdefault("MARKET_BCRYPT_ROUNDS", "4")


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the settings overlay before any application module is imported."""
    os.environ["MARKET_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)


@pytest.fixture()
def settings(tmp_path, request):
    from shared.config import load_settings

    # A file database so that threads in concurrency tests share it
    return load_settings(request.config.option.env).with_overrides(
        database_uri=f"sqlite:///{tmp_path / 'market.db'}",
    )


@pytest.fixture()
def database(settings):
    import catalogue.product.product  # noqa: F401
    import identity.account.account  # noqa: F401
    import ordering.order.order  # noqa: F401
    from shared.database import Database

    db = Database(settings.database_uri)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture()
def services(settings, database):
    from app import build_services

    return build_services(settings, database)


@pytest.fixture()
def client(settings, database):
    from fastapi.testclient import TestClient

    from app import create_app

    with TestClient(create_app(settings, database)) as test_client:
        yield test_client


# ---------------------------------------------------------------
# Factories
# ---------------------------------------------------------------
_counter = {"n": 0}


def _unique(prefix):
    _counter["n"] += 1
    return f"{prefix}{_counter['n']}"


@pytest.fixture()
def make_producer(services):
    from identity.account.account import AccountRole
    from identity.account.registration import RegisterAccount

    def _make(**overrides):
        data = {
            "role": AccountRole.PRODUCER,
            "first_name": "Ravi",
            "last_name": "Kumar",
            "email": f"{_unique('farmer')}@example.com",
            "phone": "9876543210",
            "password": "harvest123",
            "city": "Nashik",
            "state": "Maharashtra",
            "postal_code": "422001",
            "farm_name": "Green Fields",
            "farm_size": 4.5,
            "crops": ["Tomatoes", "Onions"],
            "terms_accepted": True,
        }
        data.update(overrides)
        return services.registration.register_account(RegisterAccount(**data)).account

    return _make


@pytest.fixture()
def make_consumer(services):
    from identity.account.account import AccountRole
    from identity.account.registration import RegisterAccount

    def _make(**overrides):
        data = {
            "role": AccountRole.CONSUMER,
            "first_name": "Asha",
            "last_name": "Patel",
            "email": f"{_unique('buyer')}@example.com",
            "phone": "9123456780",
            "password": "basket123",
            "city": "Pune",
            "state": "Maharashtra",
            "postal_code": "411001",
            "terms_accepted": True,
        }
        data.update(overrides)
        return services.registration.register_account(RegisterAccount(**data)).account

    return _make


@pytest.fixture()
def principal_for():
    from identity.auth.tokens import Principal

    def _principal(account):
        return Principal(account_id=account.id, role=account.role)

    return _principal


@pytest.fixture()
def make_product(services, principal_for):
    from catalogue.product.creation import CreateProduct

    def _make(producer, **overrides):
        data = {
            "name": "Tomatoes",
            "description": "Vine-ripened, picked this morning.",
            "category": "Vegetables",
            "price": 40.0,
            "unit": "kg",
            "available_quantity": 10,
        }
        data.update(overrides)
        return services.product_creation.create_product(principal_for(producer), CreateProduct(**data))

    return _make


@pytest.fixture()
def shipping_address():
    from ordering.order.address import ShippingAddress

    return ShippingAddress(
        first_name="Asha",
        last_name="Patel",
        address="12 MG Road",
        city="Pune",
        state="Maharashtra",
        postal_code="411001",
        phone="9123456780",
    )


@pytest.fixture()
def place_order(services, principal_for, shipping_address):
    from ordering.order.placement import OrderLine, PlaceOrder

    def _place(buyer, *lines, **overrides):
        data = {
            "buyer_id": buyer.id,
            "items": [OrderLine(product_id=product.id, quantity=quantity) for product, quantity in lines],
            "shipping_address": shipping_address,
        }
        data.update(overrides)
        return services.order_placement.place_order(principal_for(buyer), PlaceOrder(**data))

    return _place


@pytest.fixture()
def stock_of(services):
    from catalogue.product.repository import ProductRepository

    def _stock(product_id):
        with services.database.unit_of_work() as session:
            return ProductRepository(session).get(product_id, include_deleted=True).available_quantity

    return _stock


@pytest.fixture()
def auth_headers(services):
    def _headers(account):
        return {"Authorization": f"Bearer {services.tokens.issue(account.id, account.role)}"}

    return _headers
