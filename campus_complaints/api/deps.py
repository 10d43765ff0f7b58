"""
FastAPI dependencies.

Services live on ``app.state`` (installed by ``create_app``); the acting user
is resolved from the ``Authorization: Bearer`` access token issued at login.

Example usage in a router:
    from fastapi import Depends, APIRouter
    from campus_complaints.api import deps

    router = APIRouter()

    @router.get("/me")
    async def read_me(current_user = Depends(deps.get_current_user)):
        return current_user
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from campus_complaints.core.exceptions import AuthenticationError
from campus_complaints.core.logging import user_id as user_id_var
from campus_complaints.core.security import TokenManager
from campus_complaints.repositories.gateway import PersistenceGateway
from campus_complaints.schemas.user import User
from campus_complaints.services.access_policy import AccessPolicy
from campus_complaints.services.lifecycle import ComplaintLifecycleService

# Missing credentials surface as AuthenticationError, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


# --- Services -----------------------------------------------------------------

def get_gateway(request: Request) -> PersistenceGateway:
    return request.app.state.gateway


def get_policy(request: Request) -> AccessPolicy:
    return request.app.state.policy


def get_lifecycle(request: Request) -> ComplaintLifecycleService:
    return request.app.state.lifecycle


def get_token_manager(request: Request) -> TokenManager:
    return request.app.state.tokens


# --- Authentication -----------------------------------------------------------

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenManager = Depends(get_token_manager),
    gateway: PersistenceGateway = Depends(get_gateway),
) -> User:
    """Resolve the acting user; 401 when the token is missing, invalid or stale."""
    if credentials is None:
        raise AuthenticationError()

    subject = tokens.verify_token(credentials.credentials)["sub"]
    user = next((u for u in await gateway.get_all_users() if u.id == subject), None)
    if user is None:
        raise AuthenticationError("Unknown user", details={"user_id": subject})

    user_id_var.set(user.id)
    return user


__all__ = [
    "get_gateway",
    "get_policy",
    "get_lifecycle",
    "get_token_manager",
    "get_current_user",
]
