"""
User directory endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends

from campus_complaints.api import deps
from campus_complaints.repositories.gateway import PersistenceGateway
from campus_complaints.schemas.user import User

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/managers", response_model=List[User])
async def list_managers(
    current_user: User = Depends(deps.get_current_user),
    gateway: PersistenceGateway = Depends(deps.get_gateway),
) -> List[User]:
    """Managers a complaint can be assigned to."""
    return [u for u in await gateway.get_all_users() if u.is_manager]
