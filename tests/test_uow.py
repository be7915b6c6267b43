from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from property_manager.common.uow import UnitOfWork
from property_manager.core.exceptions import ConflictError
from property_manager.domain.owner_kind import OwnerKind


@pytest.fixture
def mock_db_session():
    return AsyncMock(spec=AsyncSession)


def test_repositories_by_kind(mock_db_session):
    uow = UnitOfWork(mock_db_session)

    assert uow.owners(OwnerKind.PROPERTY) is uow.properties
    assert uow.owners(OwnerKind.WORK_ORDER) is uow.work_orders
    assert uow.photos(OwnerKind.PROPERTY) is uow.property_photos
    assert uow.photos(OwnerKind.WORK_ORDER) is uow.work_order_photos


@pytest.mark.asyncio
async def test_context_commits_on_success(mock_db_session):
    async with UnitOfWork(mock_db_session):
        pass

    mock_db_session.commit.assert_called_once()
    mock_db_session.rollback.assert_not_called()


@pytest.mark.asyncio
async def test_context_rolls_back_on_error(mock_db_session):
    with pytest.raises(RuntimeError):
        async with UnitOfWork(mock_db_session):
            raise RuntimeError("boom")

    mock_db_session.rollback.assert_called_once()
    mock_db_session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_commit_integrity_error_is_conflict(mock_db_session):
    mock_db_session.commit.side_effect = IntegrityError("UPDATE", {}, Exception("unique"))

    with pytest.raises(ConflictError):
        await UnitOfWork(mock_db_session).commit()

    mock_db_session.rollback.assert_called_once()
