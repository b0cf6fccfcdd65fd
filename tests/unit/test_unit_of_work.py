"""SqlAlchemyUnitOfWork with a mocked AsyncSession."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


class _Begin:
    """Stands in for AsyncSessionTransaction used as an async context manager."""

    def __init__(self) -> None:
        self.exc_type = None
        self.entered = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exc_type = exc_type
        return False


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock()
    session.in_transaction = MagicMock(return_value=False)
    session.begin = MagicMock(return_value=_Begin())
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


async def test_transaction_uses_session_begin(session) -> None:
    uow = SqlAlchemyUnitOfWork(session)
    async with uow.transaction():
        pass

    begin = session.begin.return_value
    assert begin.entered
    assert begin.exc_type is None
    session.commit.assert_not_awaited()


async def test_error_propagates_through_session_begin(session) -> None:
    uow = SqlAlchemyUnitOfWork(session)
    with pytest.raises(ValueError):
        async with uow.transaction():
            raise ValueError("boom")
    assert session.begin.return_value.exc_type is ValueError


async def test_adopts_autobegun_transaction_and_commits(session) -> None:
    session.in_transaction.return_value = True
    uow = SqlAlchemyUnitOfWork(session)
    async with uow.transaction():
        pass

    session.begin.assert_not_called()
    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


async def test_adopted_transaction_rolls_back_on_error(session) -> None:
    session.in_transaction.return_value = True
    uow = SqlAlchemyUnitOfWork(session)
    with pytest.raises(ValueError):
        async with uow.transaction():
            raise ValueError("boom")

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()
