"""Domain events for the Account aggregate."""

from datetime import datetime

from shared.domain import DomainEvent


class AccountRegistered(DomainEvent):
    """A new producer or consumer signed up."""

    account_id: str
    role: str
    email: str
    first_name: str
    last_name: str
    registered_at: datetime


class ProfileUpdated(DomainEvent):
    """Identity, location or role-specific fields were changed."""

    account_id: str
    changed_fields: tuple[str, ...]
    updated_at: datetime


class PasswordChanged(DomainEvent):
    account_id: str
    changed_at: datetime


class AccountDeactivated(DomainEvent):
    """The account holder closed the account; it can no longer sign in."""

    account_id: str
    deactivated_at: datetime


class LoggedIn(DomainEvent):
    account_id: str
    logged_in_at: datetime
