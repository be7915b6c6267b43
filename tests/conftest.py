import os
import tempfile

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("STORAGE_TYPE", "local")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="property-manager-media-"))

import io
import uuid
from datetime import timedelta
from typing import AsyncGenerator, Dict, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import property_manager.models  # noqa: F401
from property_manager.api.deps import get_storage_gateway, get_uow
from property_manager.common.uow import UnitOfWork
from property_manager.core.security import create_access_token
from property_manager.db.database import Base
from property_manager.domain.storage.base import ObjectMetadata, StorageService
from property_manager.main import app
from property_manager.models import Property, WorkOrder
from property_manager.services.photo_storage import PhotoStorageGateway


class InMemoryStorage(StorageService):
    """Blob store double that keeps objects in a dict keyed by storage key."""

    def __init__(self):
        self.objects: Dict[str, Tuple[bytes, Optional[str]]] = {}
        self.deleted = []
        self.fail_deletes = False

    async def generate_upload_url(self, path: str, content_type: str, expires_in: timedelta) -> str:
        return f"https://storage.test/{path}?X-Goog-Signature=upload"

    async def generate_download_url(self, path: str, expires_in: timedelta) -> str:
        return f"https://storage.test/{path}?X-Goog-Signature=download"

    async def get_metadata(self, path: str) -> Optional[ObjectMetadata]:
        if path not in self.objects:
            return None
        data, content_type = self.objects[path]
        return ObjectMetadata(content_type=content_type, size=len(data))

    async def read_file(self, path: str) -> bytes:
        return self.objects[path][0]

    async def save_bytes(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        self.objects[path] = (data, content_type)
        return path

    async def delete_file(self, path: str) -> bool:
        if self.fail_deletes:
            raise ConnectionError("storage backend unavailable")
        self.deleted.append(path)
        return self.objects.pop(path, None) is not None


def make_jpeg(size=(640, 480), color=(200, 120, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def account_id():
    return uuid.uuid4()


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def gateway(storage):
    return PhotoStorageGateway(storage)


@pytest.fixture
def jpeg_bytes():
    return make_jpeg()


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.owner_repo = MagicMock()
    uow.photo_repo = MagicMock()
    uow.owners = MagicMock(return_value=uow.owner_repo)
    uow.photos = MagicMock(return_value=uow.photo_repo)
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    uow.flush = AsyncMock()
    uow.refresh = AsyncMock()

    uow.owner_repo.exists = AsyncMock(return_value=True)

    # Make the mock_uow behave like an async context manager
    uow.__aenter__ = AsyncMock(return_value=uow)

    async def aexit_side_effect(exc_type, exc_val, exc_tb):
        if exc_type:
            await uow.rollback()
        else:
            await uow.commit()

    uow.__aexit__ = AsyncMock(side_effect=aexit_side_effect)

    return uow


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def uow(db_session):
    return UnitOfWork(db_session)


@pytest_asyncio.fixture
async def property_owner(db_session, account_id) -> Property:
    owner = Property(account_id=account_id, name="12 Harbour Street")
    db_session.add(owner)
    await db_session.commit()
    return owner


@pytest_asyncio.fixture
async def work_order_owner(db_session, account_id, property_owner) -> WorkOrder:
    owner = WorkOrder(account_id=account_id, property_id=property_owner.id, description="Leaking kitchen tap")
    db_session.add(owner)
    await db_session.commit()
    return owner


@pytest.fixture
def auth_headers(account_id, user_id):
    token = create_access_token({"sub": str(user_id), "account_id": str(account_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(db_session, gateway) -> AsyncGenerator[AsyncClient, None]:
    # Override dependencies
    async def override_get_uow():
        yield UnitOfWork(db_session)

    app.dependency_overrides[get_uow] = override_get_uow
    app.dependency_overrides[get_storage_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    # Clean up
    app.dependency_overrides = {}
