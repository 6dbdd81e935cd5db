"""레포지터리 레지스트리.

UoW 인스턴스마다 하나씩 존재하며, 생성 시점에 명시적으로 등록된
레포지터리(binding)를 계약 타입으로 찾아주고, 등록되지 않은 엔티티
레포지터리는 팩토리로 만들어 캐시합니다.

계약 타입은 정확히 일치해야 합니다. ``AbstractRepository[User]`` 로 등록된
레포지터리는 ``AbstractReadOnlyRepository[User]`` 요청을 만족하지 않습니다.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Optional, Sequence, Tuple, Type, TypeVar, get_origin

from fastuow.core import (
    AbstractReadOnlyRepository,
    AbstractRepository,
    AmbiguousRegistrationError,
    RepositoryFactory,
    RepositoryNotFoundError,
)
from fastuow.core._logging import get_logger

E = TypeVar("E")
R = TypeVar("R")

Registration = Tuple[Any, Any]
"""``(계약 타입, 레포지터리 인스턴스)`` 쌍."""

logger = get_logger("fastuow.registry")


def check_registration(contract: Any, repository: Any) -> None:
    """레포지터리 인스턴스가 계약 타입을 구현하는지 검사합니다."""
    origin = get_origin(contract) or contract
    if (
        isinstance(origin, type)
        and issubclass(origin, AbstractReadOnlyRepository)
        and not isinstance(repository, origin)
    ):
        raise TypeError(f"{repository!r} does not implement {contract!r}")


class RepositoryRegistry:
    def __init__(
        self,
        owner_type: type,
        factory: RepositoryFactory,
        registrations: Sequence[Registration] = (),
    ):
        for contract, repository in registrations:
            check_registration(contract, repository)

        self.owner_type = owner_type
        self.factory = factory
        self.registrations = list(registrations)
        self.created: dict[Any, Any] = {}
        self._grouped: Optional[dict[Any, list[Any]]] = None

    def __repr__(self) -> str:
        return f"RepositoryRegistry[{self.owner_type.__name__}]"

    @property
    def grouped(self) -> dict[Any, list[Any]]:
        """등록된 레포지터리를 계약 타입별로 묶은 맵. 한 번만 계산합니다."""
        if self._grouped is None:
            grouped = defaultdict[Any, list[Any]](list)
            for contract, repository in self.registrations:
                grouped[contract].append(repository)
            self._grouped = dict(grouped)
        return self._grouped

    def find(self, contract: Any) -> Optional[Any]:
        """계약 타입에 등록된 레포지터리를 찾습니다.

        없으면 ``None``, 두 개 이상이면 :class:`AmbiguousRegistrationError`.
        """
        found = self.grouped.get(contract, [])
        if len(found) > 1:
            raise AmbiguousRegistrationError(contract, self.owner_type)
        return found[0] if found else None

    def resolve_readonly(self, entity_class: Type[E]) -> AbstractReadOnlyRepository[E]:
        contract = AbstractReadOnlyRepository[entity_class]  # type: ignore
        repository = self.find(contract)
        if repository is not None:
            return repository

        if contract not in self.created:
            logger.debug("create repository for %r", contract)
            self.created[contract] = self.factory.create_readonly(entity_class)
        return self.created[contract]

    def resolve(self, entity_class: Type[E]) -> AbstractRepository[E]:
        contract = AbstractRepository[entity_class]  # type: ignore
        repository = self.find(contract)
        if repository is not None:
            return repository

        if contract not in self.created:
            logger.debug("create repository for %r", contract)
            self.created[contract] = self.factory.create(entity_class)
        return self.created[contract]

    def resolve_custom(self, contract: Type[R]) -> R:
        # 커스텀 레포지터리는 생성 훅이 없으므로 반드시 등록되어 있어야 합니다.
        repository = self.find(contract)
        if repository is None:
            raise RepositoryNotFoundError(contract, self.owner_type)
        return repository
