"""Account aggregate — a tagged union of producer and consumer accounts.

Both variants live in one ``accounts`` table, discriminated by ``role``.
Producer-only attributes (farm name, farm size, crops) are required for
``ProducerAccount`` and absent from ``ConsumerAccount``.
"""

import re
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from identity.account.events import (
    AccountDeactivated,
    AccountRegistered,
    LoggedIn,
    PasswordChanged,
    ProfileUpdated,
)
from identity.auth.passwords import hash_password, verify_password
from shared.database import Base
from shared.domain import AggregateRoot
from shared.errors import ValidationFailed

_PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
_FORBIDDEN_EMAIL_CHARS = (" ", ";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")

MIN_PASSWORD_LENGTH = 6


class AccountRole(Enum):
    PRODUCER = "producer"
    CONSUMER = "consumer"


def normalize_email(email: str) -> str:
    """Lower-case and validate an email address, raising ``ValidationFailed``."""
    email = (email or "").strip().lower()
    error = ValidationFailed({"email": ["Please provide a valid email"]})

    if email.count("@") != 1 or any(ch in email for ch in _FORBIDDEN_EMAIL_CHARS):
        raise error
    local_part, domain_part = email.split("@", 1)
    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        raise error
    if "." not in domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        raise error
    if ".." in email:
        raise error
    return email


def _check_name(errors, field, value):
    if value is None or not (2 <= len(value.strip()) <= 50):
        errors.setdefault(field, []).append(f"{field.replace('_', ' ').capitalize()} must be between 2 and 50 characters")


def _check_phone(errors, phone):
    if not phone or not _PHONE_PATTERN.match(phone):
        errors.setdefault("phone", []).append("Please provide a valid 10-digit phone number")


def _check_location(errors, city, state, postal_code):
    for field, value in (("city", city), ("state", state), ("postal_code", postal_code)):
        if not value or not str(value).strip():
            errors.setdefault(field, []).append(f"{field.replace('_', ' ').capitalize()} is required")


def _check_password(errors, password):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        errors.setdefault("password", []).append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class Account(AggregateRoot, Base):
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    role: Mapped[str] = mapped_column(String(20), index=True)
    first_name: Mapped[str] = mapped_column(String(50))
    last_name: Mapped[str] = mapped_column(String(50))
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    phone: Mapped[str] = mapped_column(String(20))
    city: Mapped[str] = mapped_column(String(100))
    state: Mapped[str] = mapped_column(String(100))
    postal_code: Mapped[str] = mapped_column(String(20))
    password_hash: Mapped[str] = mapped_column(String(128))
    newsletter: Mapped[bool] = mapped_column(Boolean, default=False)
    terms_accepted: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime)
    updated_at: Mapped[datetime] = mapped_column(DateTime)

    # Load producer columns with every Account query so detached reads work
    __mapper_args__ = {"polymorphic_on": "role", "with_polymorphic": "*"}

    # Editable through update_profile, per variant
    _PROFILE_FIELDS = ("first_name", "last_name", "phone", "city", "state", "postal_code", "newsletter")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_producer(self) -> bool:
        return self.role == AccountRole.PRODUCER.value

    @classmethod
    def _validate_common(cls, first_name, last_name, phone, city, state, postal_code, password):
        errors: dict[str, list[str]] = {}
        _check_name(errors, "first_name", first_name)
        _check_name(errors, "last_name", last_name)
        _check_phone(errors, phone)
        _check_location(errors, city, state, postal_code)
        _check_password(errors, password)
        return errors

    @classmethod
    def _validate_variant(cls, errors, **attributes):  # noqa: ARG003
        return errors

    @classmethod
    def register(
        cls,
        first_name,
        last_name,
        email,
        phone,
        password,
        city,
        state,
        postal_code,
        newsletter=False,
        terms_accepted=False,
        **attributes,
    ):
        """Validate and create a new account of this variant."""
        errors = cls._validate_common(first_name, last_name, phone, city, state, postal_code, password)
        try:
            email = normalize_email(email)
        except ValidationFailed as exc:
            errors.update(exc.errors)
        errors = cls._validate_variant(errors, **attributes)
        if errors:
            raise ValidationFailed(errors)

        now = datetime.now(UTC)
        account = cls(
            id=str(uuid4()),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            phone=phone,
            city=city.strip(),
            state=state.strip(),
            postal_code=str(postal_code).strip(),
            password_hash=hash_password(password),
            newsletter=bool(newsletter),
            terms_accepted=bool(terms_accepted),
            is_active=True,
            created_at=now,
            updated_at=now,
            **attributes,
        )
        account.raise_(
            AccountRegistered(
                account_id=account.id,
                role=account.role,
                email=account.email,
                first_name=account.first_name,
                last_name=account.last_name,
                registered_at=now,
            )
        )
        return account

    def check_password(self, password: str) -> bool:
        return verify_password(password, self.password_hash)

    def change_password(self, current_password, new_password):
        if not self.check_password(current_password):
            raise ValidationFailed({"current_password": ["Current password is incorrect"]})
        errors: dict[str, list[str]] = {}
        _check_password(errors, new_password)
        if errors:
            raise ValidationFailed(errors)

        now = datetime.now(UTC)
        self.password_hash = hash_password(new_password)
        self.updated_at = now
        self.raise_(PasswordChanged(account_id=self.id, changed_at=now))

    def update_profile(self, **changes):
        """Apply a partial profile update.

        Keys that do not belong to this variant are ignored, so a consumer
        sending farm details has no effect.
        """
        changes = {k: v for k, v in changes.items() if k in self._PROFILE_FIELDS and v is not None}
        if not changes:
            return

        errors: dict[str, list[str]] = {}
        for name_field in ("first_name", "last_name"):
            if name_field in changes:
                _check_name(errors, name_field, changes[name_field])
        if "phone" in changes:
            _check_phone(errors, changes["phone"])
        for location_field in ("city", "state", "postal_code"):
            if location_field in changes and not str(changes[location_field]).strip():
                errors.setdefault(location_field, []).append(
                    f"{location_field.replace('_', ' ').capitalize()} cannot be empty"
                )
        errors = self._validate_variant_update(errors, changes)
        if errors:
            raise ValidationFailed(errors)

        for key, value in changes.items():
            setattr(self, key, value.strip() if isinstance(value, str) else value)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(ProfileUpdated(account_id=self.id, changed_fields=tuple(sorted(changes)), updated_at=now))

    def _validate_variant_update(self, errors, changes):  # noqa: ARG002
        return errors

    def record_login(self):
        now = datetime.now(UTC)
        self.last_login_at = now
        self.raise_(LoggedIn(account_id=self.id, logged_in_at=now))

    def deactivate(self):
        if not self.is_active:
            return
        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(AccountDeactivated(account_id=self.id, deactivated_at=now))


class ProducerAccount(Account):
    """A farmer who lists produce for sale."""

    farm_name: Mapped[str | None] = mapped_column(String(100))
    farm_size: Mapped[float | None] = mapped_column(Float)
    crops: Mapped[list[str] | None] = mapped_column(JSON)

    __mapper_args__ = {"polymorphic_identity": AccountRole.PRODUCER.value}

    _PROFILE_FIELDS = Account._PROFILE_FIELDS + ("farm_name", "farm_size", "crops")

    @classmethod
    def _validate_variant(cls, errors, farm_name=None, farm_size=None, crops=None, **_):
        if not farm_name or not str(farm_name).strip():
            errors.setdefault("farm_name", []).append("Farm name is required for producers")
        if farm_size is None or farm_size <= 0:
            errors.setdefault("farm_size", []).append("Farm size must be a positive number for producers")
        if crops is None or not isinstance(crops, list | tuple) or not crops:
            errors.setdefault("crops", []).append("At least one crop is required for producers")
        return errors

    @classmethod
    def register(cls, *args, farm_name=None, farm_size=None, crops=None, **kwargs):
        return super().register(
            *args,
            farm_name=farm_name,
            farm_size=farm_size,
            crops=list(crops) if crops is not None else None,
            **kwargs,
        )

    def _validate_variant_update(self, errors, changes):
        if "farm_name" in changes and not str(changes["farm_name"]).strip():
            errors.setdefault("farm_name", []).append("Farm name cannot be empty")
        if "farm_size" in changes and changes["farm_size"] <= 0:
            errors.setdefault("farm_size", []).append("Farm size must be a positive number")
        if "crops" in changes:
            if not changes["crops"]:
                errors.setdefault("crops", []).append("At least one crop is required")
            else:
                changes["crops"] = list(changes["crops"])
        return errors


class ConsumerAccount(Account):
    """A buyer browsing and ordering produce."""

    __mapper_args__ = {"polymorphic_identity": AccountRole.CONSUMER.value}


ACCOUNT_VARIANTS: dict[str, type[Account]] = {
    AccountRole.PRODUCER.value: ProducerAccount,
    AccountRole.CONSUMER.value: ConsumerAccount,
}
