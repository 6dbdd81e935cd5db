"""레포지터리 패턴 구현.

- ``SqlAlchemy*Repository``: ORM :class:`~sqlalchemy.orm.Session` 기반.
  세션의 변경 추적을 이용하므로 :class:`~fastuow.coordinator.SessionCoordinator`
  와 함께 사용합니다.
- ``SqlAlchemyCore*Repository``: Core :class:`~sqlalchemy.engine.Connection`
  기반. 매핑된 테이블에 바로 INSERT/UPDATE/DELETE 를 실행합니다.
"""
from __future__ import annotations

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import delete, insert, inspect, select, update
from sqlalchemy.engine import Connection, Row
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm.attributes import flag_dirty

from fastuow.core import AbstractReadOnlyRepository, AbstractRepository

E = TypeVar("E")


class SqlAlchemyReadOnlyRepository(AbstractReadOnlyRepository[E]):
    """SqlAlchemy ORM을 저장소로 하는 :class:`AbstractReadOnlyRepository` 구현입니다."""

    def __init__(self, entity_class: Type[E], session: Session):
        self.entity_class = entity_class
        self.session = session

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{self.entity_class.__name__}]"

    def read(self) -> Query:
        return self.session.query(self.entity_class)

    def get(self, id: Any) -> Optional[E]:
        return self.session.get(self.entity_class, id)


class SqlAlchemyRepository(SqlAlchemyReadOnlyRepository[E], AbstractRepository[E]):
    """SqlAlchemy ORM을 저장소로 하는 :class:`AbstractRepository` 구현입니다."""

    def add(self, item: E) -> None:
        self.session.add(item)

    def update(self, item: E) -> None:
        """세션에 없는(detached) 객체는 merge 하여 변경 사항을 반영합니다."""
        if item in self.session:
            flag_dirty(item)
        else:
            self.session.merge(item)

    def delete(self, item: E) -> None:
        # detached 객체는 세션에 붙인 후 삭제 예정으로 표시됩니다.
        self.session.delete(item)


class _MappedTable(Generic[E]):
    """매핑된 클래스의 테이블, 컬럼, PK 정보."""

    def __init__(self, entity_class: Type[E]):
        mapper = inspect(entity_class)
        self.entity_class = entity_class
        self.table = mapper.local_table
        self.columns = {attr.key: attr.columns[0] for attr in mapper.column_attrs}
        self.primary_key = list(mapper.primary_key)
        self.primary_key_set = frozenset(self.primary_key)
        self.keys = {column: key for key, column in self.columns.items()}

    def to_entity(self, row: Row) -> E:
        return self.entity_class(
            **{key: row._mapping[column] for key, column in self.columns.items()}
        )

    def values(self, item: E) -> dict[Any, Any]:
        return {column: getattr(item, key) for key, column in self.columns.items()}

    def where_id(self, id: Any) -> list[Any]:
        ids = id if isinstance(id, tuple) else (id,)
        return [column == value for column, value in zip(self.primary_key, ids)]

    def where_item(self, item: E) -> list[Any]:
        return [column == getattr(item, self.keys[column]) for column in self.primary_key]


class SqlAlchemyCoreReadOnlyRepository(AbstractReadOnlyRepository[E]):
    """SqlAlchemy Core 커넥션을 저장소로 하는 읽기 전용 레포지터리입니다."""

    def __init__(self, entity_class: Type[E], connection: Connection):
        self.entity_class = entity_class
        self.connection = connection
        self.mapped = _MappedTable(entity_class)

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{self.entity_class.__name__}]"

    def read(self) -> List[E]:
        rows = self.connection.execute(select(self.mapped.table))
        return [self.mapped.to_entity(row) for row in rows]

    def get(self, id: Any) -> Optional[E]:
        stmt = select(self.mapped.table).where(*self.mapped.where_id(id))
        row = self.connection.execute(stmt).first()
        return self.mapped.to_entity(row) if row else None


class SqlAlchemyCoreRepository(
    SqlAlchemyCoreReadOnlyRepository[E], AbstractRepository[E]
):
    """SqlAlchemy Core 커넥션을 저장소로 하는 레포지터리입니다.

    실행한 명령은 :class:`~fastuow.coordinator.ConnectionCoordinator` 의
    트랜잭션 안에서 실행되며 ``save_changes()`` 시점에 커밋됩니다.
    """

    def add(self, item: E) -> None:
        # 값이 없는 PK 는 DB 가 할당하도록 제외합니다.
        values = {
            column: value
            for column, value in self.mapped.values(item).items()
            if not (value is None and column in self.mapped.primary_key_set)
        }
        result = self.connection.execute(insert(self.mapped.table).values(values))

        for column, value in zip(self.mapped.primary_key, result.inserted_primary_key):
            key = self.mapped.keys[column]
            if getattr(item, key) is None:
                setattr(item, key, value)

    def update(self, item: E) -> None:
        values = {
            column: value
            for column, value in self.mapped.values(item).items()
            if column not in self.mapped.primary_key_set
        }
        stmt = (
            update(self.mapped.table)
            .where(*self.mapped.where_item(item))
            .values(values)
        )
        self.connection.execute(stmt)

    def delete(self, item: E) -> None:
        stmt = delete(self.mapped.table).where(*self.mapped.where_item(item))
        self.connection.execute(stmt)


class SessionRepositoryFactory:
    """ORM 세션 기반 레포지터리를 만드는 생성 훅."""

    def __init__(self, session: Session):
        self.session = session

    def create_readonly(self, entity_class: Type[E]) -> AbstractReadOnlyRepository[E]:
        return SqlAlchemyReadOnlyRepository(entity_class, self.session)

    def create(self, entity_class: Type[E]) -> AbstractRepository[E]:
        return SqlAlchemyRepository(entity_class, self.session)


class ConnectionRepositoryFactory:
    """Core 커넥션 기반 레포지터리를 만드는 생성 훅."""

    def __init__(self, connection: Connection):
        self.connection = connection

    def create_readonly(self, entity_class: Type[E]) -> AbstractReadOnlyRepository[E]:
        return SqlAlchemyCoreReadOnlyRepository(entity_class, self.connection)

    def create(self, entity_class: Type[E]) -> AbstractRepository[E]:
        return SqlAlchemyCoreRepository(entity_class, self.connection)
