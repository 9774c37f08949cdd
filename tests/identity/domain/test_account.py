"""Tests for the Account aggregate and its producer/consumer variants."""

import pytest
from identity.account.account import (
    ACCOUNT_VARIANTS,
    ConsumerAccount,
    ProducerAccount,
    normalize_email,
)
from identity.account.events import AccountDeactivated, AccountRegistered, PasswordChanged, ProfileUpdated
from shared.errors import ValidationFailed


def _consumer(**overrides):
    data = {
        "first_name": "Asha",
        "last_name": "Patel",
        "email": "Asha.Patel@Example.com",
        "phone": "9123456780",
        "password": "basket123",
        "city": "Pune",
        "state": "Maharashtra",
        "postal_code": "411001",
    }
    data.update(overrides)
    return ConsumerAccount.register(**data)


def _producer(**overrides):
    data = {
        "first_name": "Ravi",
        "last_name": "Kumar",
        "email": "ravi@greenfields.in",
        "phone": "9876543210",
        "password": "harvest123",
        "city": "Nashik",
        "state": "Maharashtra",
        "postal_code": "422001",
        "farm_name": "Green Fields",
        "farm_size": 4.5,
        "crops": ["Tomatoes"],
    }
    data.update(overrides)
    return ProducerAccount.register(**data)


class TestRegistration:
    def test_consumer_registration(self):
        account = _consumer()
        assert account.role == "consumer"
        assert account.email == "asha.patel@example.com"
        assert account.is_active is True
        assert account.full_name == "Asha Patel"

    def test_password_is_hashed(self):
        account = _consumer()
        assert account.password_hash != "basket123"
        assert account.check_password("basket123")
        assert not account.check_password("wrong")

    def test_registration_raises_event(self):
        account = _consumer()
        assert len(account._events) == 1
        event = account._events[0]
        assert isinstance(event, AccountRegistered)
        assert event.role == "consumer"
        assert event.email == account.email

    def test_producer_registration(self):
        account = _producer()
        assert account.role == "producer"
        assert account.is_producer
        assert account.farm_name == "Green Fields"
        assert account.crops == ["Tomatoes"]

    def test_variants_keyed_by_role(self):
        assert ACCOUNT_VARIANTS["producer"] is ProducerAccount
        assert ACCOUNT_VARIANTS["consumer"] is ConsumerAccount


class TestRegistrationValidation:
    def test_collects_every_field_error(self):
        with pytest.raises(ValidationFailed) as exc:
            _consumer(first_name="A", phone="123", city="", password="abc")
        assert set(exc.value.errors) >= {"first_name", "phone", "city", "password"}

    @pytest.mark.parametrize("email", ["no-at-sign", "two@@example.com", "a@b", "a b@example.com", "x@.com"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationFailed) as exc:
            _consumer(email=email)
        assert "email" in exc.value.errors

    def test_producer_fields_required(self):
        with pytest.raises(ValidationFailed) as exc:
            _producer(farm_name=None, farm_size=0, crops=[])
        assert set(exc.value.errors) == {"farm_name", "farm_size", "crops"}

    def test_consumer_needs_no_farm(self):
        account = _consumer()
        assert not hasattr(account, "farm_name")

    def test_normalize_email(self):
        assert normalize_email("  Buyer@Market.IN ") == "buyer@market.in"


class TestProfile:
    def test_update_profile(self):
        account = _consumer()
        account._events.clear()
        account.update_profile(city="Mumbai", phone="9000000000")
        assert account.city == "Mumbai"
        assert account.phone == "9000000000"
        assert isinstance(account._events[0], ProfileUpdated)
        assert account._events[0].changed_fields == ("city", "phone")

    def test_consumer_ignores_farm_fields(self):
        account = _consumer()
        account._events.clear()
        account.update_profile(farm_name="Sneaky Farm")
        assert account._events == []

    def test_producer_updates_farm_fields(self):
        account = _producer()
        account.update_profile(farm_size=10.0, crops=["Wheat"])
        assert account.farm_size == 10.0
        assert account.crops == ["Wheat"]

    def test_invalid_update_rejected(self):
        account = _producer()
        with pytest.raises(ValidationFailed) as exc:
            account.update_profile(phone="12", farm_size=-1)
        assert set(exc.value.errors) == {"phone", "farm_size"}


class TestPassword:
    def test_change_password(self):
        account = _consumer()
        account._events.clear()
        account.change_password("basket123", "newsecret")
        assert account.check_password("newsecret")
        assert isinstance(account._events[0], PasswordChanged)

    def test_wrong_current_password(self):
        account = _consumer()
        with pytest.raises(ValidationFailed) as exc:
            account.change_password("nope", "newsecret")
        assert "current_password" in exc.value.errors

    def test_new_password_too_short(self):
        account = _consumer()
        with pytest.raises(ValidationFailed):
            account.change_password("basket123", "abc")


class TestDeactivation:
    def test_deactivate(self):
        account = _consumer()
        account._events.clear()
        account.deactivate()
        assert account.is_active is False
        assert isinstance(account._events[0], AccountDeactivated)

    def test_deactivate_twice_is_quiet(self):
        account = _consumer()
        account.deactivate()
        account._events.clear()
        account.deactivate()
        assert account._events == []
