import logging
from dataclasses import dataclass

from ...exceptions import ForbiddenError, NotFoundError, ValidationError
from ..ports.user_repo import UserDto, UserRepository
from ..principal import Principal

logger = logging.getLogger(__name__)


@dataclass
class AccountsService:
    """Admin oversight of accounts: approval, blocking and cascading deletion."""

    user_repo: UserRepository

    def set_approval(self, principal: Principal, user_id: str, approved: bool) -> UserDto:
        self._ensure_admin(principal)
        user = self.user_repo.set_flags(user_id, is_approved=approved)
        if not user:
            raise NotFoundError("User not found")
        logger.info(f"Admin {principal.user_id} set is_approved={approved} for user {user_id}")
        return user

    def set_blocked(self, principal: Principal, user_id: str, blocked: bool) -> UserDto:
        self._ensure_admin(principal)
        if blocked and user_id == principal.user_id:
            raise ValidationError("Admins cannot block their own account")
        user = self.user_repo.set_flags(user_id, is_blocked=blocked)
        if not user:
            raise NotFoundError("User not found")
        logger.info(f"Admin {principal.user_id} set is_blocked={blocked} for user {user_id}")
        return user

    def delete_account(self, principal: Principal, user_id: str) -> None:
        self._ensure_admin(principal)
        if user_id == principal.user_id:
            raise ValidationError("Admins cannot delete their own account")
        if not self.user_repo.delete_account(user_id):
            raise NotFoundError("User not found")
        logger.info(f"Admin {principal.user_id} deleted user {user_id} and dependent records")

    def _ensure_admin(self, principal: Principal) -> None:
        if not principal.is_admin:
            raise ForbiddenError("Admin access required")
