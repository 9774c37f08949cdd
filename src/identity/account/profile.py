"""Profile management — update, password change, deactivation, producer directory."""

import structlog
from pydantic import BaseModel

from identity.account.account import Account, ProducerAccount
from identity.account.repository import AccountRepository
from shared.database import Database

logger = structlog.get_logger(__name__)


class UpdateProfile(BaseModel):
    account_id: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    newsletter: bool | None = None
    farm_name: str | None = None
    farm_size: float | None = None
    crops: list[str] | None = None


class ChangePassword(BaseModel):
    account_id: str
    current_password: str
    new_password: str


class DeactivateAccount(BaseModel):
    account_id: str


class ProfileHandler:
    def __init__(self, database: Database):
        self._database = database

    def get_profile(self, account_id: str) -> Account:
        with self._database.unit_of_work() as session:
            return AccountRepository(session).get(account_id)

    def update_profile(self, command: UpdateProfile) -> Account:
        def work(session):
            accounts = AccountRepository(session)
            account = accounts.get(command.account_id)
            account.update_profile(**command.model_dump(exclude={"account_id"}, exclude_none=True))
            return accounts.add(account)

        return self._database.run_in_transaction(work)

    def change_password(self, command: ChangePassword) -> None:
        with self._database.unit_of_work() as session:
            accounts = AccountRepository(session)
            account = accounts.get(command.account_id)
            account.change_password(command.current_password, command.new_password)
            accounts.add(account)
        logger.info("password_changed", account_id=command.account_id)

    def deactivate_account(self, command: DeactivateAccount) -> None:
        with self._database.unit_of_work() as session:
            accounts = AccountRepository(session)
            account = accounts.get(command.account_id)
            account.deactivate()
            accounts.add(account)
        logger.info("account_deactivated", account_id=command.account_id)

    def list_producers(self, limit: int = 20) -> list[ProducerAccount]:
        with self._database.unit_of_work() as session:
            return AccountRepository(session).list_producers(limit=limit)

    def get_producer(self, account_id: str) -> ProducerAccount:
        with self._database.unit_of_work() as session:
            return AccountRepository(session).get_producer(account_id)
