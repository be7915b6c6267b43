import logging
import uuid
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from property_manager.common.uow import UnitOfWork
from property_manager.core.config import settings
from property_manager.core.security import decode_access_token
from property_manager.db.database import get_db
from property_manager.domain.storage.factory import get_storage_client
from property_manager.services.photo_storage import PhotoStorageGateway

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token", auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    user_id: uuid.UUID
    account_id: uuid.UUID


async def get_uow(db: AsyncSession = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db)


def get_storage_gateway() -> PhotoStorageGateway:
    return PhotoStorageGateway(get_storage_client())


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Resolve the caller and their account from the bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        logger.warning("Could not validate credentials: No bearer token.")
        raise credentials_exception

    payload = decode_access_token(token)
    if payload is None:
        logger.warning("Could not validate credentials: Token decoding failed.")
        raise credentials_exception

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
        account_id = uuid.UUID(str(payload.get("account_id")))
    except ValueError:
        logger.warning("Could not validate credentials: Missing user or account in token payload.")
        raise credentials_exception

    return CurrentUser(user_id=user_id, account_id=account_id)
