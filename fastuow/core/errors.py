"""FastUoW 에러 정의."""
from __future__ import annotations

from typing import Any


def _type_name(typ: Any) -> str:
    # Generic alias(`AbstractRepository[User]`)는 repr 이 더 읽기 쉽습니다.
    return getattr(typ, "__qualname__", None) or repr(typ)


class UnitOfWorkError(Exception):
    """``FastUoW`` 와 관련된 모든 에러의 기본 클래스."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    ...


class RepositoryNotFoundError(UnitOfWorkError):
    """등록되지 않은 커스텀 레포지터리를 요청했을 때 발생합니다."""

    def __init__(self, repository_type: Any, unit_of_work_type: type):
        super().__init__(
            f"{_type_name(repository_type)} was not registered in"
            f" {_type_name(unit_of_work_type)}"
        )
        self.repository_type = repository_type
        self.unit_of_work_type = unit_of_work_type


class AmbiguousRegistrationError(UnitOfWorkError):
    """하나의 계약 타입에 두 개 이상의 레포지터리가 등록되어 있을 때 발생합니다."""

    def __init__(self, repository_type: Any, unit_of_work_type: type):
        super().__init__(
            f"More than one {_type_name(repository_type)} was registered in"
            f" {_type_name(unit_of_work_type)}"
        )
        self.repository_type = repository_type
        self.unit_of_work_type = unit_of_work_type


class UnsupportedOperationError(UnitOfWorkError, NotImplementedError):
    """트랜잭션 자원이 지원하지 않는 작업을 요청했을 때 발생합니다."""

    ...


class UnitOfWorkDisposedError(UnitOfWorkError):
    """이미 ``dispose()`` 된 UoW 를 사용하려 할 때 발생합니다."""

    ...


class InvalidStateTransition(UnitOfWorkError):
    """트래킹 엔트리의 상태를 허용되지 않는 상태로 바꾸려 할 때 발생합니다."""

    def __init__(self, entity: Any, current: Any, requested: Any):
        super().__init__(
            f"cannot change state of {entity!r} from {current.name} to {requested.name}"
        )
        self.entity = entity
        self.current = current
        self.requested = requested
