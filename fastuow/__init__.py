"""FastUoW - SqlAlchemy 기반 Unit of Work / Repository 패턴 구현."""
from fastuow.config import UnitOfWorkConfig  # noqa
from fastuow.coordinator import ConnectionCoordinator, SessionCoordinator  # noqa
from fastuow.core import (  # noqa
    AbstractCoordinator,
    AbstractReadOnlyRepository,
    AbstractRepository,
    AmbiguousRegistrationError,
    EntityState,
    InvalidStateTransition,
    RepositoryNotFoundError,
    UnitOfWorkDisposedError,
    UnitOfWorkError,
    UnsupportedOperationError,
)
from fastuow.executor import QueryExecutor  # noqa
from fastuow.registry import RepositoryRegistry  # noqa
from fastuow.uow import UnitOfWork, get_unit_of_work  # noqa
