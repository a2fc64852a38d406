from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from ..auth import require_roles
from ..database import get_session
from ..application.principal import Principal, Role
from ..application.services.accounts_service import AccountsService
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..schemas.common.common import MessageResponse

router = APIRouter(prefix="/admin", tags=["Admin"])


class UserFlagsResponse(BaseModel):
    id: str
    role: str
    is_approved: bool
    is_blocked: bool


def get_accounts_service(session: Session = Depends(get_session)) -> AccountsService:
    return AccountsService(user_repo=SqlUserRepository(session))


def _flags(user) -> UserFlagsResponse:
    return UserFlagsResponse(id=user.id, role=user.role, is_approved=user.is_approved, is_blocked=user.is_blocked)


@router.patch("/users/{user_id}/approve", response_model=UserFlagsResponse)
def approve_user(
    user_id: str,
    principal: Principal = Depends(require_roles(Role.ADMIN)),
    service: AccountsService = Depends(get_accounts_service),
):
    return _flags(service.set_approval(principal, user_id, True))


@router.patch("/users/{user_id}/unapprove", response_model=UserFlagsResponse)
def unapprove_user(
    user_id: str,
    principal: Principal = Depends(require_roles(Role.ADMIN)),
    service: AccountsService = Depends(get_accounts_service),
):
    return _flags(service.set_approval(principal, user_id, False))


@router.patch("/users/{user_id}/block", response_model=UserFlagsResponse)
def block_user(
    user_id: str,
    principal: Principal = Depends(require_roles(Role.ADMIN)),
    service: AccountsService = Depends(get_accounts_service),
):
    return _flags(service.set_blocked(principal, user_id, True))


@router.patch("/users/{user_id}/unblock", response_model=UserFlagsResponse)
def unblock_user(
    user_id: str,
    principal: Principal = Depends(require_roles(Role.ADMIN)),
    service: AccountsService = Depends(get_accounts_service),
):
    return _flags(service.set_blocked(principal, user_id, False))


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    principal: Principal = Depends(require_roles(Role.ADMIN)),
    service: AccountsService = Depends(get_accounts_service),
):
    service.delete_account(principal, user_id)
    return MessageResponse(message="User and related records deleted")
