"""트랜잭션 코디네이터.

- :class:`ConnectionCoordinator`: 커넥션 + 트랜잭션 기반. 커밋/롤백 직후
  새 트랜잭션을 시작하여 UoW 를 계속 사용할 수 있게 합니다.
- :class:`SessionCoordinator`: ORM 세션의 변경 추적 기반. 저장에 실패하면
  롤백 후 모든 변경을 되돌리고 원래 예외를 그대로 다시 던집니다.
"""
from __future__ import annotations

from typing import Any, Callable, List, Optional, Type, Union

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session

from fastuow.core import AbstractCoordinator, UnsupportedOperationError
from fastuow.core._logging import get_logger
from fastuow.tracking import SessionEntry, reject_entries, session_entries

logger = get_logger("fastuow.coordinator")


class ConnectionCoordinator(AbstractCoordinator):
    """``SqlAlchemy`` 커넥션과 트랜잭션을 소유하는 코디네이터입니다.

    :class:`Connection` 을 직접 넘기면 그 커넥션의 소유권도 넘어오므로
    ``dispose()`` 시 닫힙니다. 이미 시작된(autobegin) 트랜잭션이 있으면
    새로 시작하지 않고 그 트랜잭션을 이어서 사용합니다.
    """

    def __init__(self, bind: Union[Engine, Connection]):
        self.connection: Connection = (
            bind.connect() if isinstance(bind, Engine) else bind
        )
        self._own_resource(self.connection.close)
        if self.connection.in_transaction():
            self.transaction = self.connection.get_transaction()
        else:
            self.transaction = self.connection.begin()

    def __repr__(self) -> str:
        return f"ConnectionCoordinator[{self.connection!r}]"

    def save_changes(self) -> None:
        """트랜잭션을 커밋하고 새 트랜잭션을 시작합니다.

        커밋 중 발생한 예외는 그대로 전파됩니다.
        """
        self.transaction.commit()
        self.transaction = self.connection.begin()

    def reject_all_changes(self) -> None:
        """트랜잭션을 롤백하고 새 트랜잭션을 시작합니다."""
        self.transaction.rollback()
        self.transaction = self.connection.begin()

    def reject_changes(self, entity_class: Type[Any]) -> None:
        raise UnsupportedOperationError(
            f"{type(self).__name__} cannot reject changes of {entity_class.__name__}"
            " only: the transaction has no per-entity granularity"
        )


class SessionCoordinator(AbstractCoordinator):
    """``SqlAlchemy`` ORM 세션의 변경 추적을 이용하는 코디네이터입니다.

    추가/수정/삭제는 :meth:`save_changes` 전까지 세션에 보류되어야 하므로
    세션의 ``autoflush`` 를 끕니다.
    """

    def __init__(self, session: Union[Session, Callable[[], Session]]):
        self.session: Session = session if isinstance(session, Session) else session()
        self.session.autoflush = False
        self._own_resource(self.session.close)

    def __repr__(self) -> str:
        return f"SessionCoordinator[{self.session!r}]"

    def entries(self, entity_class: Optional[Type[Any]] = None) -> List[SessionEntry]:
        """세션이 추적중인 엔트리 목록."""
        return session_entries(self.session, entity_class)

    def save_changes(self) -> None:
        """보류된 변경을 flush 하고 커밋합니다.

        실패하면 트랜잭션을 롤백하고 :meth:`reject_all_changes` 로 논리적인
        상태까지 되돌린 뒤 원래 예외를 다시 던집니다.
        """
        if not self.session.in_transaction():
            self.session.begin()

        try:
            self.session.flush()
            self.session.commit()
        except Exception:
            logger.exception("Failed to save changes, rolling back")
            self.session.rollback()
            self.reject_all_changes()
            raise

    def reject_all_changes(self) -> None:
        reject_entries(self.entries())

    def reject_changes(self, entity_class: Type[Any]) -> None:
        reject_entries(self.entries(entity_class))
