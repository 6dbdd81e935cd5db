from __future__ import annotations

import abc
import asyncio
import enum
import weakref
from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    Protocol,
    Type,
    TypeVar,
)


E = TypeVar("E")
"""엔티티 타입. SqlAlchemy 매퍼에 등록된(declarative 혹은 imperative) 클래스면 됩니다."""


class EntityState(enum.Enum):
    """변경 추적 컨텍스트 안에서의 엔티티 상태."""

    UNCHANGED = "unchanged"
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    DETACHED = "detached"


class TrackedEntry(Protocol):
    """엔티티와 그 상태를 묶은 트래킹 레코드.

    ``state`` 에 값을 쓰면 트래킹 컨텍스트의 실제 상태가 바뀝니다.
    """

    entity: Any
    state: EntityState


class AbstractReadOnlyRepository(Generic[E], abc.ABC):
    """읽기 전용 Repository 의 추상 인터페이스 입니다."""

    entity_class: Type[E]

    @abc.abstractmethod
    def read(self) -> Iterable[E]:
        """모든 :class:`E` 객체를 조회합니다."""
        raise NotImplementedError

    @abc.abstractmethod
    def get(self, id: Any) -> Optional[E]:
        """PK 가 `id` 인 객체를 조회합니다. 못 찾을 경우 ``None`` 을 리턴합니다."""
        raise NotImplementedError

    def all(self) -> List[E]:
        return list(self.read())


class AbstractRepository(AbstractReadOnlyRepository[E]):
    """Repository 패턴의 추상 인터페이스 입니다."""

    @abc.abstractmethod
    def add(self, item: E) -> None:
        """레포지터리에 :class:`E` 객체를 추가합니다."""
        raise NotImplementedError

    @abc.abstractmethod
    def update(self, item: E) -> None:
        """변경된 :class:`E` 객체를 레포지터리에 반영합니다."""
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, item: E) -> None:
        """레포지터리에서 :class:`E` 객체를 삭제합니다."""
        raise NotImplementedError


class RepositoryFactory(Protocol):
    """등록되지 않은 레포지터리를 만들어주는 팩토리 (레포지터리 생성 훅)."""

    def create_readonly(self, entity_class: Type[E]) -> AbstractReadOnlyRepository[E]:
        ...

    def create(self, entity_class: Type[E]) -> AbstractRepository[E]:
        ...


class AbstractCoordinator(abc.ABC):
    """트랜잭션 자원을 소유하고 커밋/롤백을 담당하는 코디네이터.

    자원 해제는 :meth:`dispose` 한 곳에서만 일어나며 여러 번 호출해도
    안전합니다. ``dispose()`` 없이 객체가 버려지거나 인터프리터가
    종료될 때에는 :class:`weakref.finalize` 가 자원을 정리합니다.
    """

    _disposed = False
    _finalizer: Optional[weakref.finalize] = None

    def _own_resource(self, release: Callable[[], Any]) -> None:
        # `release` 가 self 를 참조하면 finalize 가 영영 호출되지 않습니다.
        self._finalizer = weakref.finalize(self, release)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """트랜잭션 자원을 한 번만 해제합니다."""
        if self._disposed:
            return
        self._disposed = True
        if self._finalizer:
            self._finalizer()

    @abc.abstractmethod
    def save_changes(self) -> None:
        """모든 변경 사항을 커밋합니다."""
        raise NotImplementedError

    async def save_changes_async(self) -> None:
        """:meth:`save_changes` 를 워커 스레드에서 실행합니다.

        I/O 를 기다리는 동안만 제어권을 양보하며 별도의 병렬성은 없습니다.
        """
        await asyncio.to_thread(self.save_changes)

    @abc.abstractmethod
    def reject_all_changes(self) -> None:
        """커밋되지 않은 모든 변경 사항을 되돌립니다."""
        raise NotImplementedError

    @abc.abstractmethod
    def reject_changes(self, entity_class: Type[Any]) -> None:
        """`entity_class` 타입 엔티티의 커밋되지 않은 변경 사항만 되돌립니다."""
        raise NotImplementedError
