"""FastAPI 의존성 주입 헬퍼.

요청마다 :class:`~fastuow.uow.UnitOfWork` 를 하나 만들고 응답 후 해제합니다. ::

    get_uow = unit_of_work_dependency(lambda: UnitOfWork.for_session(get_session))
    get_users = repository_dependency(User, get_uow)

    @app.post("/users")
    def add_user(name: str, users=Depends(get_users), uow=Depends(get_uow)):
        users.add(User(name=name))
        uow.save_changes()

FastAPI 는 한 요청 안에서 같은 의존성을 한 번만 실행하므로 ``get_users`` 와
``get_uow`` 는 같은 UoW 를 공유합니다.
"""
from typing import Any, Callable, Generator, Type, TypeVar

from fastapi import Depends

from fastuow.core import AbstractReadOnlyRepository
from fastuow.uow import UnitOfWork

E = TypeVar("E")

UowDependency = Callable[[], Generator[UnitOfWork, None, None]]


def unit_of_work_dependency(make_uow: Callable[[], UnitOfWork]) -> UowDependency:
    """요청 범위의 UoW 를 제공하는 의존성을 만듭니다."""

    def get_uow() -> Generator[UnitOfWork, None, None]:
        with make_uow() as uow:
            yield uow

    return get_uow


def repository_dependency(
    entity_class: Type[E],
    uow_dependency: UowDependency,
    readonly: bool = False,
) -> Callable[..., AbstractReadOnlyRepository[E]]:
    """요청의 UoW 에서 `entity_class` 레포지터리를 꺼내주는 의존성을 만듭니다."""

    def get_repository(uow: UnitOfWork = Depends(uow_dependency)) -> Any:
        if readonly:
            return uow.resolve_readonly(entity_class)
        return uow.resolve(entity_class)

    return get_repository
