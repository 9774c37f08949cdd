"""FastAPI dependencies resolving the authenticated caller."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from identity.auth.tokens import Principal
from shared.errors import NotFound, Unauthenticated
from shared.logging import add_context

bearer_scheme = HTTPBearer(auto_error=False)


def current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    """Verify the bearer token and make sure its account is still active."""
    if credentials is None:
        raise Unauthenticated("Access denied. No token provided.")

    services = request.app.state.services
    principal = services.tokens.verify(credentials.credentials)
    try:
        account = services.profiles.get_profile(principal.account_id)
    except NotFound:
        raise Unauthenticated("Token is not valid") from None

    add_context(account_id=account.id, role=account.role)
    return Principal(account_id=account.id, role=account.role)
