"""
Sign in, sign out and self-service signup.
"""

from fastapi import APIRouter, Depends, status

from campus_complaints.api import deps
from campus_complaints.core.exceptions import AuthenticationError
from campus_complaints.core.logging import get_logger
from campus_complaints.core.security import TokenManager
from campus_complaints.repositories.gateway import PersistenceGateway
from campus_complaints.schemas.user import LoginRequest, SignupRequest, TokenResponse, User
from campus_complaints.utils.identifiers import new_id

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    gateway: PersistenceGateway = Depends(deps.get_gateway),
    tokens: TokenManager = Depends(deps.get_token_manager),
) -> TokenResponse:
    """Check credentials and issue a bearer token for the other routes."""
    user = await gateway.login(payload.email, payload.password)
    if user is None:
        raise AuthenticationError("Invalid email or password")

    token = tokens.create_access_token(user.id, claims={"role": user.role.value})
    logger.info("User signed in", extra={"user_ref": user.id})
    return TokenResponse(access_token=token, expires_in=tokens.expires_in, user=user)


@router.post("/logout")
async def logout(gateway: PersistenceGateway = Depends(deps.get_gateway)) -> dict:
    await gateway.logout()
    return {"message": "Signed out"}


@router.post("/signup", response_model=User, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    gateway: PersistenceGateway = Depends(deps.get_gateway),
) -> User:
    user = User(
        id=new_id("user"),
        name=payload.name,
        email=payload.email,
        role=payload.role,
        department=payload.department,
        employee_id=payload.employee_id,
    )
    await gateway.add_user(user, payload.password)
    logger.info("User signed up", extra={"user_ref": user.id, "role": user.role.value})
    return user
