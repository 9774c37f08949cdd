"""Tests for the unit of work and the transient-conflict retry loop."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from shared.errors import ConcurrencyConflict, NotFound


class _Flaky:
    """Raises ``error`` for the first ``failures`` calls, then returns ``value``."""

    def __init__(self, error, failures, value="done"):
        self.error = error
        self.failures = failures
        self.value = value
        self.calls = 0

    def __call__(self, session):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.value


def _locked():
    return OperationalError("UPDATE products", {}, Exception("database is locked"))


class TestRunInTransaction:
    def test_returns_result_of_work(self, database):
        assert database.run_in_transaction(lambda session: 42) == 42

    def test_retries_transient_errors(self, database):
        work = _Flaky(_locked(), failures=2)
        assert database.run_in_transaction(work, retries=5, backoff=0) == "done"
        assert work.calls == 3

    def test_gives_up_with_concurrency_conflict(self, database):
        work = _Flaky(_locked(), failures=10)
        with pytest.raises(ConcurrencyConflict):
            database.run_in_transaction(work, retries=3, backoff=0)
        assert work.calls == 3

    def test_domain_errors_are_not_retried(self, database):
        work = _Flaky(NotFound("Order", "o-1"), failures=10)
        with pytest.raises(NotFound):
            database.run_in_transaction(work, retries=5, backoff=0)
        assert work.calls == 1

    def test_integrity_errors_retried_only_on_request(self, database):
        error = IntegrityError("INSERT INTO orders", {}, Exception("UNIQUE constraint failed"))

        with pytest.raises(IntegrityError):
            database.run_in_transaction(_Flaky(error, failures=1), retries=3, backoff=0)

        work = _Flaky(error, failures=1)
        assert database.run_in_transaction(work, retries=3, backoff=0, retry_on_integrity_error=True) == "done"


class TestUnitOfWork:
    def test_events_published_after_commit(self, database, make_consumer):
        published = []
        database.publishers.append(published.append)

        account = make_consumer()

        assert [e.event_name for e in published] == ["AccountRegistered"]
        assert published[0].account_id == account.id
        assert account._events == []

    def test_nothing_published_on_rollback(self, database):
        from identity.account.account import ConsumerAccount

        published = []
        database.publishers.append(published.append)
        account = ConsumerAccount.register(
            first_name="Asha",
            last_name="Patel",
            email="asha@example.com",
            phone="9123456780",
            password="basket123",
            city="Pune",
            state="Maharashtra",
            postal_code="411001",
        )

        with pytest.raises(RuntimeError):
            with database.unit_of_work() as session:
                session.add(account)
                session.flush()
                raise RuntimeError("boom")

        assert published == []

    def test_failing_subscriber_keeps_the_commit(self, database, make_consumer):
        from identity.account.repository import AccountRepository

        def unreachable_broker(event_):
            raise ConnectionError("broker down")

        published = []
        database.publishers.extend([unreachable_broker, published.append])

        account = make_consumer()

        assert [e.event_name for e in published] == ["AccountRegistered"]
        with database.unit_of_work() as session:
            assert AccountRepository(session).get(account.id).email == account.email

    def test_events_from_every_aggregate_in_session(self, database, make_producer, make_product):
        published = []
        database.publishers.append(published.append)

        make_product(make_producer(), name="Okra")

        assert [e.event_name for e in published] == ["AccountRegistered", "ProductListed"]
        assert published[1].name == "Okra"
        assert published[1].payload()["name"] == "Okra"


class TestDomainEventLogging:
    def test_log_event_keeps_structlog_event_key_free(self, monkeypatch):
        from datetime import UTC, datetime

        import structlog
        from catalogue.product.events import ProductListed
        from shared import database as database_module
        from structlog.testing import CapturingLogger

        captured = CapturingLogger()
        monkeypatch.setattr(
            database_module,
            "logger",
            structlog.wrap_logger(captured, processors=[], wrapper_class=structlog.BoundLogger),
        )
        listed = ProductListed(
            product_id="p-1",
            producer_id="f-1",
            name="Okra",
            category="Vegetables",
            price_amount=30.0,
            price_unit="kg",
            available_quantity=5,
            listed_at=datetime(2026, 10, 19, tzinfo=UTC),
        )

        database_module.log_event(listed)

        [call] = captured.calls
        assert call.method_name == "info"
        assert call.kwargs["event"] == "domain_event"
        assert call.kwargs["domain_event"] == "ProductListed"
        assert call.kwargs["payload"]["name"] == "Okra"
        assert call.kwargs["payload"]["listed_at"].startswith("2026-10-19T00:00:00")
