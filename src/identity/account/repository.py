"""Account Store — persistence access for accounts."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from identity.account.account import Account, AccountRole, ProducerAccount
from shared.errors import NotFound


class AccountRepository:
    def __init__(self, session: Session):
        self._session = session

    def add(self, account: Account) -> Account:
        self._session.add(account)
        return account

    def get(self, account_id: str, active_only: bool = True) -> Account:
        account = self._session.get(Account, account_id)
        if account is None or (active_only and not account.is_active):
            raise NotFound("Account", account_id)
        return account

    def find_by_email(self, email: str) -> Account | None:
        return self._session.scalars(select(Account).where(Account.email == email.strip().lower())).first()

    def get_producer(self, account_id: str) -> ProducerAccount:
        account = self._session.get(Account, account_id)
        if account is None or not account.is_active or account.role != AccountRole.PRODUCER.value:
            raise NotFound("Producer", account_id)
        return account

    def list_producers(self, limit: int = 20) -> list[ProducerAccount]:
        stmt = (
            select(ProducerAccount)
            .where(ProducerAccount.is_active.is_(True))
            .order_by(ProducerAccount.created_at.desc())
            .limit(limit)
        )
        return list(self._session.scalars(stmt))

    def summaries(self, account_ids) -> dict[str, Account]:
        ids = {str(i) for i in account_ids}
        if not ids:
            return {}
        return {a.id: a for a in self._session.scalars(select(Account).where(Account.id.in_(ids)))}
