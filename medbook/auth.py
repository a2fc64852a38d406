import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from .database import get_session
from .application.principal import Principal, Role
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .utils import decode_jwt_token

logger = logging.getLogger(__name__)

oauth2_scheme = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> Principal:
    if not credentials or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Authorization token is required")
    payload = decode_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")

    users = SqlUserRepository(session)
    user = users.get_by_id(str(user_id))
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token: user no longer exists")
    if user.is_blocked:
        logger.warning(f"Blocked user {user.id} attempted access")
        raise HTTPException(status_code=403, detail="Your account has been blocked. Please contact support.")

    try:
        role = Role(user.role)
    except ValueError:
        raise HTTPException(status_code=403, detail="Unknown account role")

    doctor_id = None
    patient_id = None
    if role == Role.DOCTOR:
        doctor = users.doctor_for_user(user.id)
        doctor_id = doctor.id if doctor else None
    elif role == Role.PATIENT:
        patient = users.patient_for_user(user.id)
        patient_id = patient.id if patient else None

    return Principal(
        user_id=user.id,
        role=role,
        is_approved=user.is_approved,
        is_blocked=user.is_blocked,
        doctor_id=doctor_id,
        patient_id=patient_id,
    )


def require_roles(*roles: Role):
    """Dependency factory restricting a route to the given roles."""
    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise HTTPException(status_code=403, detail="You do not have permission to perform this action")
        if principal.role == Role.DOCTOR:
            if not principal.is_approved:
                raise HTTPException(status_code=403, detail="Your doctor account is pending approval")
            if principal.doctor_id is None:
                raise HTTPException(status_code=403, detail="Doctor profile not found")
        if principal.role == Role.PATIENT and principal.patient_id is None:
            raise HTTPException(status_code=403, detail="Patient profile not found")
        return principal
    return dependency
