"""UnitOfWork 패턴 모듈.

UoW 는 영구 저장소의 유일한 진입점이며, 로드된 객체의 최신 상태를 계속 트래킹 합니다.
이를 통해 얻을 수 있는 3가지 이득은 다음과 같습니다.

- A *stable snapshot of the database* to work with, so the objects
  we use aren't changing halfway through an operation
- A way to persist all of our *changes at once*, so if something goes wrong,
  we don't end up in an inconsistent state
- A *simple API* to our persistence concerns and a handy place to get a repository

:class:`UnitOfWork` 는 :class:`~fastuow.registry.RepositoryRegistry` 와
트랜잭션 코디네이터를 조합한 파사드입니다. 커밋/롤백 정책은 전적으로
코디네이터가 결정합니다.

``dispose()`` 된 UoW 의 모든 연산(``dispose()`` 제외)은
:class:`~fastuow.core.UnitOfWorkDisposedError` 를 던집니다.
"""
from __future__ import annotations

from typing import Any, Callable, Optional, Sequence, Tuple, Type, TypeVar, Union

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session

from fastuow.coordinator import ConnectionCoordinator, SessionCoordinator
from fastuow.core import (
    AbstractCoordinator,
    AbstractReadOnlyRepository,
    AbstractRepository,
    RepositoryFactory,
    UnitOfWorkDisposedError,
)
from fastuow.core._logging import get_logger
from fastuow.registry import Registration, RepositoryRegistry
from fastuow.repo import ConnectionRepositoryFactory, SessionRepositoryFactory

E = TypeVar("E")
R = TypeVar("R")

RepoMakerFunc = Callable[[Any], Any]
RepoMakers = Sequence[Tuple[Any, RepoMakerFunc]]
"""``(계약 타입, 트랜잭션 자원을 받아 레포지터리를 만드는 함수)`` 목록."""


logger = get_logger("fastuow.uow")


class UnitOfWork:
    """레포지터리 조회와 저장/취소를 제공하는 트랜잭션 범위.

    요청(혹은 작업) 하나당 하나씩 만들어 사용하며 스레드 간에 공유하지 않습니다.

    Example: ::

        with UnitOfWork.for_session(get_session()) as uow:
            uow.resolve(User).add(User(name="kim"))
            uow.save_changes()
    """

    def __init__(
        self,
        coordinator: AbstractCoordinator,
        factory: RepositoryFactory,
        repositories: Sequence[Registration] = (),
    ) -> None:
        self.coordinator = coordinator
        self.registry = RepositoryRegistry(type(self), factory, repositories)

    @classmethod
    def for_session(
        cls,
        session: Union[Session, Callable[[], Session]],
        repo_makers: RepoMakers = (),
    ) -> UnitOfWork:
        """ORM 세션의 변경 추적을 이용하는 UoW 를 만듭니다."""
        coordinator = SessionCoordinator(session)
        return cls(
            coordinator,
            SessionRepositoryFactory(coordinator.session),
            [(contract, make(coordinator.session)) for contract, make in repo_makers],
        )

    @classmethod
    def for_connection(
        cls,
        bind: Union[Engine, Connection],
        repo_makers: RepoMakers = (),
    ) -> UnitOfWork:
        """커넥션 + 트랜잭션 기반의 UoW 를 만듭니다."""
        coordinator = ConnectionCoordinator(bind)
        return cls(
            coordinator,
            ConnectionRepositoryFactory(coordinator.connection),
            [
                (contract, make(coordinator.connection))
                for contract, make in repo_makers
            ],
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{self.coordinator!r}]"

    def __enter__(self) -> UnitOfWork:
        """``with`` 블록에 진입했을때 실행되는 메소드입니다."""
        self._check_disposed()
        return self

    def __exit__(self, *args: Any) -> None:
        """``with`` 블록에서 빠져나갈 때 자원을 해제합니다.

        커밋되지 않은 변경은 트랜잭션 자원이 닫히면서 버려집니다.
        """
        self.dispose()

    def __getitem__(self, entity_class: Type[E]) -> AbstractRepository[E]:
        return self.resolve(entity_class)

    @property
    def disposed(self) -> bool:
        return self.coordinator.disposed

    def _check_disposed(self) -> None:
        if self.coordinator.disposed:
            raise UnitOfWorkDisposedError(f"{self!r} is already disposed")

    def resolve_readonly(self, entity_class: Type[E]) -> AbstractReadOnlyRepository[E]:
        """`entity_class` 에 대한 읽기 전용 레포지터리를 리턴합니다."""
        self._check_disposed()
        return self.registry.resolve_readonly(entity_class)

    def resolve(self, entity_class: Type[E]) -> AbstractRepository[E]:
        """`entity_class` 에 대한 레포지터리를 리턴합니다.

        등록된 레포지터리가 없으면 새로 만들고, 이후에는 같은 객체를 리턴합니다.
        """
        self._check_disposed()
        return self.registry.resolve(entity_class)

    def resolve_custom(self, contract: Type[R]) -> R:
        """`contract` 타입으로 등록된 커스텀 레포지터리를 리턴합니다."""
        self._check_disposed()
        return self.registry.resolve_custom(contract)

    def save_changes(self) -> None:
        self._check_disposed()
        self.coordinator.save_changes()

    async def save_changes_async(self) -> None:
        self._check_disposed()
        await self.coordinator.save_changes_async()

    def reject_all_changes(self) -> None:
        self._check_disposed()
        self.coordinator.reject_all_changes()

    def reject_changes(self, entity_class: Type[Any]) -> None:
        self._check_disposed()
        self.coordinator.reject_changes(entity_class)

    def dispose(self) -> None:
        """트랜잭션 자원을 해제합니다. 여러 번 호출해도 안전합니다."""
        if not self.coordinator.disposed:
            logger.debug("dispose %r", self)
        self.coordinator.dispose()


def get_unit_of_work(
    session: Optional[Union[Session, Callable[[], Session]]] = None,
    repo_makers: RepoMakers = (),
) -> UnitOfWork:
    """기본 설정으로 ORM 세션 기반 UoW 를 만듭니다.

    `session` 이 없으면 :class:`~fastuow.config.UnitOfWorkConfig` 를 읽어
    세션 팩토리를 만듭니다.
    """
    if session is None:
        from fastuow.config import UnitOfWorkConfig
        from fastuow.orm import create_sessionmaker

        session = create_sessionmaker(UnitOfWorkConfig.load_from_config())

    return UnitOfWork.for_session(session, repo_makers)
