import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from property_manager.core.config import configs

logger = logging.getLogger(__name__)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=configs.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, configs.SECRET_KEY, algorithm=configs.ALGORITHM)
    logger.debug("Created new access token")
    return encoded_jwt


def decode_access_token(token: str) -> Optional[dict]:
    """Decode a JWT access token. Returns None when the token is invalid or expired."""
    try:
        return jwt.decode(token, configs.SECRET_KEY, algorithms=[configs.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Error decoding access token: {e}")
        return None
