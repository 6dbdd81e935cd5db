"""QueryExecutor 통합 테스트."""
import pytest
from sqlalchemy import select
from sqlalchemy.exc import MultipleResultsFound, NoResultFound

from fastuow.executor import QueryExecutor
from tests.app.domain.models import OrderLine, User


@pytest.fixture
def executor(session):
    session.add_all(
        [OrderLine("o1", 10), OrderLine("o1", 5), OrderLine("o2", 20), User("kim")]
    )
    session.commit()
    return QueryExecutor(session)


@pytest.mark.asyncio
async def test_first_and_last(executor):
    stmt = select(OrderLine).order_by(OrderLine.qty)

    assert (await executor.first(stmt)).qty == 5
    assert (await executor.last(stmt)).qty == 20
    assert await executor.first_or_none(stmt.where(OrderLine.qty > 100)) is None
    assert await executor.last_or_none(stmt.where(OrderLine.qty > 100)) is None

    with pytest.raises(NoResultFound):
        await executor.first(stmt.where(OrderLine.qty > 100))

    with pytest.raises(NoResultFound):
        await executor.last(stmt.where(OrderLine.qty > 100))


@pytest.mark.asyncio
async def test_single(executor):
    assert (await executor.single(select(User))).name == "kim"
    assert await executor.single_or_none(select(User).where(User.name == "x")) is None

    with pytest.raises(MultipleResultsFound):
        await executor.single(select(OrderLine))


@pytest.mark.asyncio
async def test_aggregates(executor):
    stmt = select(OrderLine).where(OrderLine.orderid == "o1")

    assert await executor.max(stmt, OrderLine.qty) == 10
    assert await executor.min(stmt, OrderLine.qty) == 5
    assert await executor.sum(stmt, OrderLine.qty) == 15
    assert await executor.sum(stmt.where(OrderLine.qty > 100), OrderLine.qty) == 0


@pytest.mark.asyncio
async def test_to_list_and_to_dict(executor):
    lines = await executor.to_list(select(OrderLine).order_by(OrderLine.qty))
    assert [it.qty for it in lines] == [5, 10, 20]

    qty_by_id = await executor.to_dict(
        select(OrderLine), key=lambda it: it.id, value=lambda it: it.qty
    )
    assert sorted(qty_by_id.values()) == [5, 10, 20]

    with pytest.raises(ValueError, match="duplicate key"):
        await executor.to_dict(select(OrderLine), key=lambda it: it.orderid)


@pytest.mark.asyncio
async def test_aggregates_respect_limit(executor):
    stmt = select(OrderLine).order_by(OrderLine.qty).limit(2)

    assert await executor.max(stmt, OrderLine.qty) == 10
    assert await executor.min(stmt, OrderLine.qty) == 5
    assert await executor.sum(stmt, OrderLine.qty) == 15
    assert await executor.average(stmt, OrderLine.qty) == 7.5
    assert await executor.count(stmt) == 2


@pytest.mark.asyncio
async def test_count_and_average(executor):
    stmt = select(OrderLine)

    assert await executor.count(stmt) == 3
    assert await executor.count(stmt.where(OrderLine.qty > 100)) == 0
    o1 = stmt.where(OrderLine.orderid == "o1")
    assert await executor.average(o1, OrderLine.qty) == 7.5
    assert await executor.average(stmt.where(OrderLine.qty > 100), OrderLine.qty) is None


@pytest.mark.asyncio
async def test_any_and_all(executor):
    stmt = select(OrderLine)
    empty = stmt.where(OrderLine.qty > 100)

    assert await executor.any(stmt)
    assert not await executor.any(empty)
    assert await executor.any(stmt, OrderLine.qty == 20)
    assert not await executor.any(stmt, OrderLine.orderid == "o3")

    assert await executor.all(stmt, OrderLine.qty > 0)
    assert not await executor.all(stmt, OrderLine.qty < 20)
    assert await executor.all(empty, OrderLine.qty < 0)


@pytest.mark.asyncio
async def test_any_and_all_respect_limit(executor):
    stmt = select(OrderLine).order_by(OrderLine.qty).limit(2)

    assert not await executor.any(stmt, OrderLine.qty == 20)
    assert await executor.all(stmt, OrderLine.qty < 20)
