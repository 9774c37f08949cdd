"""Account registration and login — commands and handlers."""

from dataclasses import dataclass

import structlog
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError

from identity.account.account import ACCOUNT_VARIANTS, Account, AccountRole, ProducerAccount
from identity.account.repository import AccountRepository
from identity.auth.tokens import TokenService
from shared.database import Database
from shared.errors import AlreadyExists, Unauthenticated

logger = structlog.get_logger(__name__)


class RegisterAccount(BaseModel):
    """Create a new producer or consumer account."""

    role: AccountRole
    first_name: str
    last_name: str
    email: str
    phone: str
    password: str
    city: str
    state: str
    postal_code: str
    newsletter: bool = False
    terms_accepted: bool = False
    farm_name: str | None = None
    farm_size: float | None = None
    crops: list[str] | None = None


class Login(BaseModel):
    email: str
    password: str
    role: AccountRole | None = None


@dataclass(frozen=True)
class AuthResult:
    account: Account
    token: str


class RegistrationHandler:
    def __init__(self, database: Database, tokens: TokenService):
        self._database = database
        self._tokens = tokens

    def register_account(self, command: RegisterAccount) -> AuthResult:
        variant = ACCOUNT_VARIANTS[command.role.value]
        extra = {}
        if variant is ProducerAccount:
            extra = {"farm_name": command.farm_name, "farm_size": command.farm_size, "crops": command.crops}

        account = variant.register(
            first_name=command.first_name,
            last_name=command.last_name,
            email=command.email,
            phone=command.phone,
            password=command.password,
            city=command.city,
            state=command.state,
            postal_code=command.postal_code,
            newsletter=command.newsletter,
            terms_accepted=command.terms_accepted,
            **extra,
        )

        try:
            with self._database.unit_of_work() as session:
                accounts = AccountRepository(session)
                if accounts.find_by_email(account.email) is not None:
                    raise AlreadyExists("User with this email already exists")
                accounts.add(account)
        except IntegrityError:
            raise AlreadyExists("User with this email already exists") from None

        logger.info("account_registered", account_id=account.id, role=account.role)
        return AuthResult(account=account, token=self._tokens.issue(account.id, account.role))

    def login(self, command: Login) -> AuthResult:
        with self._database.unit_of_work() as session:
            account = AccountRepository(session).find_by_email(command.email)
            if (
                account is None
                or not account.is_active
                or (command.role is not None and account.role != command.role.value)
            ):
                logger.info("login_rejected", reason="unknown_account")
                raise Unauthenticated("Invalid credentials or user type")
            if not account.check_password(command.password):
                logger.info("login_rejected", reason="bad_password", account_id=account.id)
                raise Unauthenticated("Invalid credentials")

            account.record_login()

        logger.info("account_logged_in", account_id=account.id)
        return AuthResult(account=account, token=self._tokens.issue(account.id, account.role))
