from .errors import (  # noqa
    AmbiguousRegistrationError,
    InvalidStateTransition,
    RepositoryNotFoundError,
    UnitOfWorkDisposedError,
    UnitOfWorkError,
    UnsupportedOperationError,
)
from .models import (  # noqa
    AbstractCoordinator,
    AbstractReadOnlyRepository,
    AbstractRepository,
    EntityState,
    RepositoryFactory,
    TrackedEntry,
)
