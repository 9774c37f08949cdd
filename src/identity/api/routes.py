"""FastAPI endpoints for the Identity domain."""

from fastapi import APIRouter, Depends, Request

from identity.account.account import AccountRole
from identity.account.profile import ChangePassword, DeactivateAccount, UpdateProfile
from identity.account.registration import Login, RegisterAccount
from identity.api.dependencies import current_principal
from identity.api.schemas import (
    AccountResponse,
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    ProducerProfileResponse,
    RegisterRequest,
    StatusResponse,
    UpdateProfileRequest,
    internal_role,
)
from identity.auth.tokens import Principal

auth_router = APIRouter(prefix="/auth", tags=["auth"])
users_router = APIRouter(prefix="/users", tags=["users"])


# --- Authentication ---


@auth_router.post("/register", status_code=201, response_model=AuthResponse)
def register(body: RegisterRequest, request: Request) -> AuthResponse:
    command = RegisterAccount(
        role=AccountRole(internal_role(body.user_type)),
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        phone=body.phone,
        password=body.password,
        city=body.city,
        state=body.state,
        postal_code=body.pincode,
        newsletter=body.newsletter,
        terms_accepted=body.terms,
        farm_name=body.farm_name,
        farm_size=body.farm_size,
        crops=body.crops,
    )
    result = request.app.state.services.registration.register_account(command)
    return AuthResponse(
        message="User registered successfully",
        token=result.token,
        user=AccountResponse.from_account(result.account),
    )


@auth_router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, request: Request) -> AuthResponse:
    command = Login(
        email=body.email,
        password=body.password,
        role=AccountRole(internal_role(body.user_type)) if body.user_type else None,
    )
    result = request.app.state.services.registration.login(command)
    return AuthResponse(
        message="Login successful",
        token=result.token,
        user=AccountResponse.from_account(result.account),
    )


@auth_router.get("/me", response_model=AccountResponse)
def me(request: Request, principal: Principal = Depends(current_principal)) -> AccountResponse:
    account = request.app.state.services.profiles.get_profile(principal.account_id)
    return AccountResponse.from_account(account)


# --- Profile ---


@users_router.get("/profile", response_model=AccountResponse)
def get_profile(request: Request, principal: Principal = Depends(current_principal)) -> AccountResponse:
    account = request.app.state.services.profiles.get_profile(principal.account_id)
    return AccountResponse.from_account(account)


@users_router.put("/profile", response_model=AccountResponse)
def update_profile(
    body: UpdateProfileRequest,
    request: Request,
    principal: Principal = Depends(current_principal),
) -> AccountResponse:
    command = UpdateProfile(
        account_id=principal.account_id,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        city=body.city,
        state=body.state,
        postal_code=body.pincode,
        newsletter=body.newsletter,
        farm_name=body.farm_name,
        farm_size=body.farm_size,
        crops=body.crops,
    )
    account = request.app.state.services.profiles.update_profile(command)
    return AccountResponse.from_account(account)


@users_router.put("/profile/password", response_model=StatusResponse)
def change_password(
    body: ChangePasswordRequest,
    request: Request,
    principal: Principal = Depends(current_principal),
) -> StatusResponse:
    command = ChangePassword(
        account_id=principal.account_id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    request.app.state.services.profiles.change_password(command)
    return StatusResponse(message="Password updated successfully")


@users_router.delete("/profile", response_model=StatusResponse)
def deactivate_account(request: Request, principal: Principal = Depends(current_principal)) -> StatusResponse:
    request.app.state.services.profiles.deactivate_account(DeactivateAccount(account_id=principal.account_id))
    return StatusResponse(message="Account deactivated successfully")


# --- Producer directory ---


@users_router.get("/farmers", response_model=list[ProducerProfileResponse])
def list_farmers(request: Request) -> list[ProducerProfileResponse]:
    producers = request.app.state.services.profiles.list_producers()
    return [ProducerProfileResponse.from_account(p) for p in producers]


@users_router.get("/farmers/{producer_id}", response_model=ProducerProfileResponse)
def get_farmer(producer_id: str, request: Request) -> ProducerProfileResponse:
    producer = request.app.state.services.profiles.get_producer(producer_id)
    return ProducerProfileResponse.from_account(producer)
