"""``select()`` 문을 비동기로 실행하는 헬퍼.

전역 싱글턴 없이, 쿼리를 실행할 세션을 명시적으로 받아서 사용합니다. ::

    executor = QueryExecutor(session)
    user = await executor.first(select(User).where(User.name == "kim"))

각 메소드는 워커 스레드에서 쿼리를 실행하므로 실행 중인 태스크가 취소되면
대기만 중단됩니다.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Hashable, List, Optional, TypeVar

from sqlalchemy import ColumnElement, Subquery, case, func, literal, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


class QueryExecutor:
    def __init__(self, session: Session):
        self.session = session

    def __repr__(self) -> str:
        return f"QueryExecutor[{self.session!r}]"

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(fn, *args)

    def _to_list(self, stmt: Select) -> List[Any]:
        return list(self.session.scalars(stmt).all())

    def _aggregate(self, stmt: Select, column: Any, agg: Callable[[Any], Any]) -> Any:
        # LIMIT/OFFSET 이 걸린 쿼리도 선택된 행에 대해서만 집계하도록 서브쿼리로 감쌉니다.
        sub = stmt.subquery()
        return self.session.scalar(select(agg(_sub_column(sub, column))))

    def _count(self, stmt: Select) -> int:
        return self.session.scalar(select(func.count()).select_from(stmt.subquery()))

    def _exists(self, stmt: Select, condition: Optional[ColumnElement] = None) -> bool:
        if condition is None:
            sub = stmt.subquery()
            rows = select(literal(1)).select_from(sub)
            return bool(self.session.scalar(select(rows.exists())))

        sub = _matched_subquery(stmt, condition)
        matched = select(literal(1)).select_from(sub).where(sub.c[_MATCHED] == 1)
        return bool(self.session.scalar(select(matched.exists())))

    def _all(self, stmt: Select, condition: ColumnElement) -> bool:
        sub = _matched_subquery(stmt, condition)
        unmatched = select(literal(1)).select_from(sub).where(sub.c[_MATCHED] == 0)
        return not self.session.scalar(select(unmatched.exists()))

    async def first(self, stmt: Select) -> Any:
        """첫번째 결과를 리턴합니다. 결과가 없으면 :class:`NoResultFound`."""
        return await self._run(lambda: self.session.scalars(stmt.limit(1)).one())

    async def first_or_none(self, stmt: Select) -> Optional[Any]:
        return await self._run(lambda: self.session.scalars(stmt.limit(1)).first())

    async def single(self, stmt: Select) -> Any:
        """결과가 정확히 하나일 때 리턴합니다.

        없으면 :class:`NoResultFound`, 둘 이상이면 :class:`MultipleResultsFound`.
        """
        return await self._run(lambda: self.session.scalars(stmt).one())

    async def single_or_none(self, stmt: Select) -> Optional[Any]:
        return await self._run(lambda: self.session.scalars(stmt).one_or_none())

    async def last(self, stmt: Select) -> Any:
        items = await self.to_list(stmt)
        if not items:
            raise NoResultFound("No row was found when one was required")
        return items[-1]

    async def last_or_none(self, stmt: Select) -> Optional[Any]:
        items = await self.to_list(stmt)
        return items[-1] if items else None

    async def max(self, stmt: Select, column: Any) -> Any:
        return await self._run(self._aggregate, stmt, column, func.max)

    async def min(self, stmt: Select, column: Any) -> Any:
        return await self._run(self._aggregate, stmt, column, func.min)

    async def sum(self, stmt: Select, column: Any) -> Any:
        """`column` 의 합계. 결과가 없으면 ``0`` 을 리턴합니다."""
        result = await self._run(self._aggregate, stmt, column, func.sum)
        return result if result is not None else 0

    async def average(self, stmt: Select, column: Any) -> Any:
        """`column` 의 평균. 결과가 없으면 ``None`` 을 리턴합니다."""
        return await self._run(self._aggregate, stmt, column, func.avg)

    async def count(self, stmt: Select) -> int:
        return await self._run(self._count, stmt)

    async def any(self, stmt: Select, condition: Optional[ColumnElement] = None) -> bool:
        """결과가 하나라도 있는지, `condition` 이 주어지면 만족하는 행이 있는지."""
        return await self._run(self._exists, stmt, condition)

    async def all(self, stmt: Select, condition: ColumnElement) -> bool:
        """모든 결과 행이 `condition` 을 만족하는지. 결과가 없으면 ``True``."""
        return await self._run(self._all, stmt, condition)

    async def to_list(self, stmt: Select) -> List[Any]:
        return await self._run(self._to_list, stmt)

    async def to_dict(
        self,
        stmt: Select,
        key: Callable[[Any], K],
        value: Optional[Callable[[Any], Any]] = None,
    ) -> dict[K, Any]:
        """결과를 ``key(item)`` 을 키로 하는 dict 로 리턴합니다.

        키가 중복되면 :class:`ValueError` 를 던집니다.
        """
        items = await self.to_list(stmt)
        result: dict[K, Any] = {}
        for item in items:
            k = key(item)
            if k in result:
                raise ValueError(f"duplicate key: {k!r}")
            result[k] = value(item) if value else item
        return result


_MATCHED = "_fastuow_matched"


def _sub_column(sub: Subquery, column: Any) -> ColumnElement:
    """매핑된 속성이나 컬럼에 대응하는 서브쿼리 컬럼."""
    return sub.c[column.expression.name]


def _matched_subquery(stmt: Select, condition: ColumnElement) -> Subquery:
    # 조건을 WHERE 가 아닌 컬럼으로 추가해야 LIMIT 이 걸린 쿼리의 의미가 유지됩니다.
    flag = case((condition, 1), else_=0).label(_MATCHED)
    return stmt.add_columns(flag).subquery()
