import jwt
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from .config import settings


# =========================
# JWT Token Handling
# =========================
def create_jwt_token(data: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
    """Create a signed access token. `data` must carry the user id under "sub"."""
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
